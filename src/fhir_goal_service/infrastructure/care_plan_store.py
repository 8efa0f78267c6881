"""
In-memory care plan goal store.

Holds goal records in the shape the mapper consumes (``uuid``, ``puuid``,
``details``) and answers searches by exact field match. Useful for tests and
for serving goals exported from another system.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional

from fhir_goal_service.domain.search import ProcessingResult
from fhir_goal_service.utils.logging import get_logger

logger = get_logger(__name__)


class InMemoryCarePlanStore:
    """Goal records kept in insertion order."""

    def __init__(self, records: Optional[Iterable[Mapping[str, Any]]] = None):
        self._records: List[Dict[str, Any]] = []
        for record in records or []:
            self.add(record)

    def add(self, record: Mapping[str, Any]) -> None:
        self._records.append(dict(record))

    def _matches(self, record: Mapping[str, Any], search: Mapping[str, Any], match_all: bool) -> bool:
        if not search:
            return True
        checks = [record.get(name) == value for name, value in search.items()]
        return all(checks) if match_all else any(checks)

    def search(
        self,
        search: Mapping[str, Any],
        is_and_condition: bool = True,
        puuid_bind: Optional[str] = None,
    ) -> ProcessingResult:
        """
        Find goal records matching the filters.

        Args:
            search: Record field -> required value
            is_and_condition: Require every filter to match (otherwise any one)
            puuid_bind: Restrict visibility to this patient's records

        Returns:
            ProcessingResult holding copies of the matching records
        """
        result = ProcessingResult()
        for record in self._records:
            if puuid_bind is not None and record.get("puuid") != puuid_bind:
                continue
            if self._matches(record, search, is_and_condition):
                result.add_data(dict(record))

        logger.debug(f"Care plan store matched {len(result)} of {len(self._records)} records")
        return result

    def __len__(self) -> int:
        return len(self._records)
