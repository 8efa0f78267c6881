"""
Interfaces of the services a FHIR resource service delegates to.

Any object with matching methods can be passed in; the reference
implementations live in ``fhir_goal_service.infrastructure``.
"""
from typing import Any, Mapping, Optional, Protocol, runtime_checkable

from fhir_goal_service.domain.search import ProcessingResult


@runtime_checkable
class RecordStore(Protocol):
    """Storage/query service holding the internal records."""

    def search(
        self,
        search: Mapping[str, Any],
        is_and_condition: bool = True,
        puuid_bind: Optional[str] = None,
    ) -> ProcessingResult:
        ...


@runtime_checkable
class TerminologyLookup(Protocol):
    """Resolves clinical codes. Unknown codes yield an empty description and no system."""

    def lookup_code_description(self, code: str) -> str:
        ...

    def get_system_for_code(self, code: str) -> Optional[str]:
        ...


@runtime_checkable
class ProvenanceFactory(Protocol):
    def create_provenance_for_domain_resource(self, resource: Any) -> Any:
        ...


@runtime_checkable
class Translator(Protocol):
    def translate(self, text: str) -> str:
        ...
