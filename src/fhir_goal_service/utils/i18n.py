"""
Localization of display text.

Catalog files are YAML mappings of language code to a table of source text
and its translation::

    es:
      Body weight: Peso corporal
"""
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from fhir_goal_service.utils.logging import get_logger

logger = get_logger(__name__)


class CatalogTranslator:
    """Translate text through a per-language catalog, falling back to the source text."""

    def __init__(self, language: str = "en", catalog: Optional[Mapping[str, str]] = None):
        self.language = language
        self._catalog: Dict[str, str] = dict(catalog or {})

    @classmethod
    def from_file(cls, path: Union[str, Path], language: str = "en") -> "CatalogTranslator":
        # application imports utils
        from fhir_goal_service.application.config_loader import load_yaml_file

        catalogs = load_yaml_file(path)
        catalog = catalogs.get(language) or {}
        if not isinstance(catalog, dict):
            logger.warning(f"Ignoring malformed catalog for language {language!r} in {path}")
            catalog = {}
        return cls(language, {str(k): str(v) for k, v in catalog.items()})

    def translate(self, text: str) -> str:
        if not text:
            return text
        return self._catalog.get(text, text)

    def __len__(self) -> int:
        return len(self._catalog)
