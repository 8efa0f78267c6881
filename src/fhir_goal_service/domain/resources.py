"""
Typed FHIR output elements for the Goal resource.

Elements are immutable once built. Any element whose source data was absent
holds a ``DataMissing`` value instead of being dropped, and ``to_fhir()``
renders it as the data-absent-reason extension:

* on complex elements the element becomes ``{"extension": [...]}``
* on primitive elements the value is omitted and ``_<name>`` carries the
  extension, following the FHIR JSON rules for primitive extensions
"""
import json
from typing import Any, ClassVar, Dict, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from fhir_goal_service.constants import DATA_ABSENT_REASON_UNKNOWN, DATA_ABSENT_REASON_URL


class FhirElement(BaseModel):
    """Base class for output elements."""

    model_config = ConfigDict(frozen=True)

    def to_fhir(self) -> Dict[str, Any]:
        raise NotImplementedError


class DataMissing(FhirElement):
    """Marker for an element whose source data was absent."""

    reason: str = DATA_ABSENT_REASON_UNKNOWN

    def extension(self) -> Dict[str, Any]:
        return {"url": DATA_ABSENT_REASON_URL, "valueCode": self.reason}

    def to_fhir(self) -> Dict[str, Any]:
        return {"extension": [self.extension()]}


DATA_MISSING = DataMissing()


def is_missing(value: Any) -> bool:
    return isinstance(value, DataMissing)


def _put_primitive(out: Dict[str, Any], name: str, value: Union[str, DataMissing, None]) -> None:
    if isinstance(value, DataMissing):
        out[f"_{name}"] = value.to_fhir()
    elif value is not None:
        out[name] = value


def _put_complex(out: Dict[str, Any], name: str, value: Optional[FhirElement]) -> None:
    if value is not None:
        out[name] = value.to_fhir()


class Meta(FhirElement):
    version_id: str
    last_updated: str

    def to_fhir(self) -> Dict[str, Any]:
        return {"versionId": self.version_id, "lastUpdated": self.last_updated}


class Reference(FhirElement):
    reference: str

    def to_fhir(self) -> Dict[str, Any]:
        return {"reference": self.reference}


class Coding(FhirElement):
    code: Optional[str] = None
    system: Optional[str] = None
    display: Union[str, DataMissing, None] = None

    def to_fhir(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        _put_primitive(out, "system", self.system)
        _put_primitive(out, "code", self.code)
        _put_primitive(out, "display", self.display)
        return out


class CodeableConcept(FhirElement):
    coding: Tuple[Coding, ...] = ()
    # An empty string is kept: a goal description is present even when blank
    text: Optional[str] = None

    def to_fhir(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.coding:
            out["coding"] = [c.to_fhir() for c in self.coding]
        _put_primitive(out, "text", self.text)
        return out


class Narrative(FhirElement):
    status: str = "generated"
    div: str

    def to_fhir(self) -> Dict[str, Any]:
        return {"status": self.status, "div": self.div}


class GoalTarget(FhirElement):
    due_date: Union[str, DataMissing, None] = None
    detail_string: Optional[str] = None
    measure: Union[CodeableConcept, DataMissing, None] = None

    def to_fhir(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        _put_complex(out, "measure", self.measure)
        _put_primitive(out, "detailString", self.detail_string)
        _put_primitive(out, "dueDate", self.due_date)
        return out


class GoalResource(FhirElement):
    """A FHIR Goal resource."""

    resource_type: ClassVar[str] = "Goal"

    id: Optional[str] = None
    meta: Meta
    text: Optional[Narrative] = None
    lifecycle_status: str
    description: Optional[CodeableConcept] = None
    subject: Union[Reference, DataMissing]
    target: Optional[Tuple[GoalTarget, ...]] = None

    def to_fhir(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"resourceType": self.resource_type}
        _put_primitive(out, "id", self.id)
        _put_complex(out, "meta", self.meta)
        _put_complex(out, "text", self.text)
        _put_primitive(out, "lifecycleStatus", self.lifecycle_status)
        _put_complex(out, "description", self.description)
        _put_complex(out, "subject", self.subject)
        if self.target is not None:
            out["target"] = [t.to_fhir() for t in self.target]
        return out

    def to_json(self) -> str:
        return json.dumps(self.to_fhir())
