"""Input records, output resource elements and search types."""

from fhir_goal_service.domain.records import CarePlanRecord, GoalDetail
from fhir_goal_service.domain.resources import (
    DATA_MISSING,
    CodeableConcept,
    Coding,
    DataMissing,
    GoalResource,
    GoalTarget,
    Meta,
    Narrative,
    Reference,
    is_missing,
)
from fhir_goal_service.domain.search import (
    FhirSearchParameterDefinition,
    ProcessingResult,
    SearchFieldType,
    ServiceField,
)

__all__ = [
    "CarePlanRecord",
    "GoalDetail",
    "DATA_MISSING",
    "CodeableConcept",
    "Coding",
    "DataMissing",
    "GoalResource",
    "GoalTarget",
    "Meta",
    "Narrative",
    "Reference",
    "is_missing",
    "FhirSearchParameterDefinition",
    "ProcessingResult",
    "SearchFieldType",
    "ServiceField",
]
