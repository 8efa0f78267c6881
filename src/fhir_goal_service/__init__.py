"""
FHIR Goal Service package.

Maps care plan goal records from an EHR's storage model onto FHIR Goal
resources and answers Goal searches through a pluggable care plan store.
Logging is left to the application: call ``configure_logging`` at startup.
"""

# Package version
__version__ = "0.1.0"

# Logging utilities
from fhir_goal_service.utils.logging import configure_logging, get_logger, log_with_context

# ----------------------------------------------------------------------
# Public API re-exports
# ----------------------------------------------------------------------
from fhir_goal_service.domain.records import CarePlanRecord, GoalDetail
from fhir_goal_service.domain.resources import DATA_MISSING, DataMissing, GoalResource, GoalTarget
from fhir_goal_service.domain.search import ProcessingResult
from fhir_goal_service.services.goal_service import FhirGoalService
from fhir_goal_service.application.service_factory import create_goal_service

__all__ = [
    "__version__",
    # Logging
    "get_logger",
    "log_with_context",
    "configure_logging",
    # Records and resources
    "CarePlanRecord",
    "GoalDetail",
    "DATA_MISSING",
    "DataMissing",
    "GoalResource",
    "GoalTarget",
    "ProcessingResult",
    # Services
    "FhirGoalService",
    "create_goal_service",
]
