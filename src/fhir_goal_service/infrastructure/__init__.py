"""
Reference implementations of the collaborators the services delegate to.
"""

from fhir_goal_service.infrastructure.care_plan_store import InMemoryCarePlanStore
from fhir_goal_service.infrastructure.provenance import FhirProvenanceService
from fhir_goal_service.infrastructure.terminology import TerminologyService

__all__ = [
    "InMemoryCarePlanStore",
    "FhirProvenanceService",
    "TerminologyService",
]
