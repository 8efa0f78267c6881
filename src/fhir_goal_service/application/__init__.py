"""Application wiring: settings and service construction."""

from fhir_goal_service.application.config_loader import Settings, get_settings, load_settings, reset_settings
from fhir_goal_service.application.service_factory import create_goal_service

__all__ = ["Settings", "get_settings", "load_settings", "reset_settings", "create_goal_service"]
