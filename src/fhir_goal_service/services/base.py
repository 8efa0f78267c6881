"""
The interface every FHIR resource service implements, plus the search helpers
they share.
"""
import abc
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from fhir_goal_service.domain.search import FhirSearchParameterDefinition, ProcessingResult, patient_reference
from fhir_goal_service.utils.logging import get_logger, log_with_context

logger = get_logger(__name__)


class FhirResourceService(abc.ABC):
    """Read side of a FHIR resource backed by internal records."""

    @property
    @abc.abstractmethod
    def search_parameters(self) -> Mapping[str, FhirSearchParameterDefinition]:
        """FHIR search parameters the service accepts."""

    @abc.abstractmethod
    def convert(self, record: Any, encode: bool = False) -> Any:
        """Map one internal record onto the FHIR resource (or its JSON when ``encode``)."""

    @abc.abstractmethod
    def search_for_records(self, search: Mapping[str, Any], puuid_bind: Optional[str] = None) -> ProcessingResult:
        """Search the internal records with internal field filters."""

    @abc.abstractmethod
    def get_all(self, fhir_search_params: Mapping[str, Any], puuid_bind: Optional[str] = None) -> ProcessingResult:
        """Search with FHIR search parameters and return FHIR resources."""

    @abc.abstractmethod
    def get_one(self, fhir_resource_id: str, puuid_bind: Optional[str] = None) -> ProcessingResult:
        """Look a resource up by its FHIR id."""

    @abc.abstractmethod
    def profile_uris(self) -> List[str]:
        """Profiles the produced resources conform to."""


def build_get_one_search(fhir_resource_id: str, puuid_bind: Optional[str] = None) -> Dict[str, str]:
    """FHIR search parameters for a lookup by id, scoped to a patient when one is bound."""
    search = {"_id": fhir_resource_id}
    if puuid_bind:
        search["patient"] = patient_reference(puuid_bind)
    return search


def translate_search_parameters(
    definitions: Mapping[str, FhirSearchParameterDefinition],
    fhir_search_params: Mapping[str, Any],
) -> Dict[str, Any]:
    """Turn FHIR search parameters into internal field filters.

    Parameters without a definition are dropped.
    """
    filters: Dict[str, Any] = {}
    for name, value in fhir_search_params.items():
        definition = definitions.get(name)
        if definition is None:
            log_with_context(logger, logging.DEBUG, "Ignoring unsupported search parameter", parameter=name)
            continue
        filters.update(definition.to_filters(value))
    return filters


def convert_search_result(result: ProcessingResult, convert: Callable[[Any], Any]) -> ProcessingResult:
    """Convert every record of a search result, keeping the reported problems."""
    converted = ProcessingResult(
        validation_messages=dict(result.validation_messages),
        internal_errors=list(result.internal_errors),
    )
    for record in result.data:
        converted.add_data(convert(record))
    return converted
