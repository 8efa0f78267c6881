"""Builds a FhirGoalService wired to the reference collaborators from Settings."""

from typing import Optional

from fhir_goal_service.application.config_loader import Settings, get_settings
from fhir_goal_service.infrastructure.care_plan_store import InMemoryCarePlanStore
from fhir_goal_service.infrastructure.provenance import FhirProvenanceService
from fhir_goal_service.infrastructure.terminology import TerminologyService
from fhir_goal_service.services.collaborators import RecordStore
from fhir_goal_service.services.goal_service import FhirGoalService
from fhir_goal_service.utils.i18n import CatalogTranslator
from fhir_goal_service.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def create_goal_service(
    settings: Optional[Settings] = None,
    store: Optional[RecordStore] = None,
) -> FhirGoalService:
    """Create a Goal service.

    Args:
        settings: Settings to use; the cached global settings by default. Their
            log level is applied to the root logger.
        store: Care plan store; an empty in-memory store by default.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    if settings.terminology_file is not None:
        terminology = TerminologyService.from_file(settings.terminology_file)
    else:
        terminology = TerminologyService()

    if settings.translations_file is not None:
        translator = CatalogTranslator.from_file(settings.translations_file, settings.language)
    else:
        translator = CatalogTranslator(settings.language)

    logger.info(f"Creating Goal service (language={settings.language})")
    return FhirGoalService(
        store=store if store is not None else InMemoryCarePlanStore(),
        terminology=terminology,
        provenance=FhirProvenanceService(settings.provenance_organization),
        translator=translator,
    )
