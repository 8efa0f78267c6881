"""
FHIR search parameter definitions and search results.

A FHIR resource service declares which FHIR search parameters it accepts and
which internal record fields each one maps onto; storage collaborators answer
with a ``ProcessingResult``.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from fhir_goal_service.constants import PATIENT_REFERENCE_PREFIX


class SearchFieldType(enum.Enum):
    """FHIR search parameter types supported by the services."""

    TOKEN = "token"
    REFERENCE = "reference"
    STRING = "string"
    DATE = "date"


@dataclass(frozen=True)
class ServiceField:
    """An internal record field a search parameter is matched against."""

    TYPE_STRING = "string"
    TYPE_UUID = "uuid"

    name: str
    type: str = "string"


@dataclass(frozen=True)
class FhirSearchParameterDefinition:
    """Maps a FHIR search parameter onto one or more internal fields."""

    name: str
    type: SearchFieldType
    fields: Tuple[ServiceField, ...]

    def __post_init__(self):
        # Accept bare field names as well as ServiceField instances
        object.__setattr__(
            self, "fields",
            tuple(f if isinstance(f, ServiceField) else ServiceField(f) for f in self.fields),
        )

    def to_internal_value(self, value: Any) -> Any:
        """Translate a FHIR search value into the value stored in the internal fields.

        Reference values drop their resource type prefix ("Patient/123" -> "123").
        """
        if self.type is SearchFieldType.REFERENCE and isinstance(value, str) and "/" in value:
            return value.rsplit("/", 1)[1]
        return value

    def to_filters(self, value: Any) -> Dict[str, Any]:
        internal = self.to_internal_value(value)
        return {f.name: internal for f in self.fields}


def patient_reference(puuid: str) -> str:
    return f"{PATIENT_REFERENCE_PREFIX}{puuid}"


@dataclass
class ProcessingResult:
    """Records returned by a search, plus any problems the collaborator reported."""

    data: List[Any] = field(default_factory=list)
    validation_messages: Dict[str, Any] = field(default_factory=dict)
    internal_errors: List[str] = field(default_factory=list)

    def is_valid(self) -> bool:
        return not self.validation_messages and not self.internal_errors

    def has_data(self) -> bool:
        return bool(self.data)

    def add_data(self, item: Any) -> None:
        self.data.append(item)

    def first(self) -> Optional[Any]:
        return self.data[0] if self.data else None

    def __len__(self) -> int:
        return len(self.data)
