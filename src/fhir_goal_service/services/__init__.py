"""FHIR resource services."""

from fhir_goal_service.services.base import FhirResourceService
from fhir_goal_service.services.goal_service import FhirGoalService

__all__ = ["FhirResourceService", "FhirGoalService"]
