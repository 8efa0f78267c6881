"""
Utility modules for the FHIR Goal service.

This package contains logging, date and localization helpers used throughout
the service code.
"""

from fhir_goal_service.utils.logging import (
    configure_logging,
    get_logger,
    log_with_context
)

__all__ = [
    "configure_logging",
    "get_logger",
    "log_with_context"
]
