"""
Table-driven terminology service.

Codes are stored as ``TYPE:code`` strings (``LOINC:8302-2``); several codes
may share one field separated by ``;``. The code type prefix selects the FHIR
code system; descriptions come from a code table, usually loaded from YAML::

    default_code_type: LOINC
    code_systems:
      LOCAL: http://example.org/codes
    codes:
      LOINC:
        8302-2: Body height
"""
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple, Union

from fhir_goal_service.application.config_loader import load_yaml_file
from fhir_goal_service.constants import CODE_SYSTEMS
from fhir_goal_service.utils.logging import get_logger

logger = get_logger(__name__)

CODE_SEPARATOR = ";"


class TerminologyService:
    """Resolves code descriptions and code systems. Unknown codes are not an error."""

    def __init__(
        self,
        codes: Optional[Mapping[str, Mapping[str, str]]] = None,
        code_systems: Optional[Mapping[str, str]] = None,
        default_code_type: Optional[str] = "LOINC",
    ):
        """
        Args:
            codes: Descriptions keyed by code type, then by code.
            code_systems: Extra or overriding code type -> system URI entries.
            default_code_type: Code type assumed for codes without a prefix.
        """
        self.default_code_type = default_code_type.upper() if default_code_type else None
        self.code_systems: Dict[str, str] = dict(CODE_SYSTEMS)
        for code_type, system in (code_systems or {}).items():
            self.code_systems[str(code_type).upper()] = str(system)

        self._descriptions: Dict[Tuple[str, str], str] = {}
        for code_type, table in (codes or {}).items():
            for code, description in (table or {}).items():
                self._descriptions[(str(code_type).upper(), str(code))] = str(description)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "TerminologyService":
        data = load_yaml_file(path)
        codes = data.get("codes") or {}
        if not isinstance(codes, dict):
            logger.warning(f"Ignoring malformed code table in {path}")
            codes = {}
        service = cls(
            codes={k: v for k, v in codes.items() if isinstance(v, dict)},
            code_systems=data.get("code_systems") or {},
            default_code_type=data.get("default_code_type", "LOINC"),
        )
        logger.info(f"Loaded {len(service)} code descriptions from {path}")
        return service

    def parse_code(self, code: str) -> Tuple[Optional[str], str]:
        """Split ``TYPE:code`` into its code type and code value."""
        code = code.strip()
        if ":" in code:
            code_type, value = code.split(":", 1)
            return code_type.strip().upper(), value.strip()
        return self.default_code_type, code

    def _split_codes(self, code: str) -> List[str]:
        return [c for c in (part.strip() for part in code.split(CODE_SEPARATOR)) if c]

    def lookup_code_description(self, code: Optional[str]) -> str:
        """Description of a code; several codes give their descriptions joined by ``; ``."""
        if not code:
            return ""

        descriptions = []
        for single in self._split_codes(code):
            code_type, value = self.parse_code(single)
            description = self._descriptions.get((code_type, value)) if code_type else None
            if description:
                descriptions.append(description)
            else:
                logger.debug(f"No description for code {single!r}")
        return "; ".join(descriptions)

    def get_system_for_code(self, code: Optional[str]) -> Optional[str]:
        """Code system URI of the (first) code, or None when the code type is unknown."""
        if not code:
            return None
        codes = self._split_codes(code)
        if not codes:
            return None
        code_type, _ = self.parse_code(codes[0])
        if code_type is None:
            return None
        return self.code_systems.get(code_type)

    def __len__(self) -> int:
        return len(self._descriptions)
