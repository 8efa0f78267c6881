"""
FHIR Goal resource service.

Goals are not stored on their own: each one is the set of goal rows of a care
plan form. The service maps such a care plan record onto a FHIR Goal and
answers Goal searches by delegating to the care plan store.
"""
import html
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from fhir_goal_service.constants import (
    GOAL_LIFECYCLE_STATUS,
    RESOURCE_VERSION_ID,
    US_CORE_GOAL_PROFILE_URI,
    XHTML_NAMESPACE,
)
from fhir_goal_service.domain.records import CarePlanRecord, GoalDetail
from fhir_goal_service.domain.resources import (
    DATA_MISSING,
    CodeableConcept,
    Coding,
    GoalResource,
    GoalTarget,
    Meta,
    Narrative,
    Reference,
)
from fhir_goal_service.domain.search import (
    FhirSearchParameterDefinition,
    ProcessingResult,
    SearchFieldType,
    ServiceField,
    patient_reference,
)
from fhir_goal_service.exceptions import GoalServiceError
from fhir_goal_service.services.base import (
    FhirResourceService,
    build_get_one_search,
    convert_search_result,
    translate_search_parameters,
)
from fhir_goal_service.services.collaborators import (
    ProvenanceFactory,
    RecordStore,
    TerminologyLookup,
    Translator,
)
from fhir_goal_service.utils.dates import fhir_instant_now, to_fhir_date
from fhir_goal_service.utils.logging import LogMetrics, get_logger, log_with_context

logger = get_logger(__name__)


class _IdentityTranslator:
    def translate(self, text: str) -> str:
        return text


class FhirGoalService(FhirResourceService):
    """Maps care plan goal records onto FHIR Goal resources."""

    def __init__(
        self,
        store: RecordStore,
        terminology: TerminologyLookup,
        provenance: Optional[ProvenanceFactory] = None,
        translator: Optional[Translator] = None,
    ):
        """
        Args:
            store: Care plan store, searched for goal records.
            terminology: Resolves goal target codes to a display and code system.
            provenance: Builds Provenance resources; required for create_provenance.
            translator: Localizes code displays. Defaults to no translation.
        """
        self.store = store
        self.terminology = terminology
        self.provenance = provenance
        self.translator = translator if translator is not None else _IdentityTranslator()
        self._search_parameters = self._load_search_parameters()

    def _load_search_parameters(self) -> Dict[str, FhirSearchParameterDefinition]:
        return {
            "patient": self.patient_context_search_field(),
            # A surrogate id: goals live inside care plan forms and have no
            # identity of their own in storage.
            "_id": FhirSearchParameterDefinition("_id", SearchFieldType.TOKEN, [ServiceField("uuid")]),
        }

    @property
    def search_parameters(self) -> Mapping[str, FhirSearchParameterDefinition]:
        return self._search_parameters

    def patient_context_search_field(self) -> FhirSearchParameterDefinition:
        return FhirSearchParameterDefinition(
            "patient",
            SearchFieldType.REFERENCE,
            [ServiceField("puuid", ServiceField.TYPE_UUID)],
        )

    def profile_uris(self) -> List[str]:
        return [US_CORE_GOAL_PROFILE_URI]

    # ------------------------------------------------------------------
    # Record -> resource
    # ------------------------------------------------------------------

    def convert(
        self,
        record: Union[CarePlanRecord, Mapping[str, Any]],
        encode: bool = False,
    ) -> Union[GoalResource, str]:
        """
        Map a care plan record onto a FHIR Goal resource.

        Absent fields never fail the conversion; they are carried as
        data-absent-reason markers so the resource keeps its structure.

        Args:
            record: The care plan record or the raw storage row
            encode: Return the resource serialized as JSON instead of the model

        Returns:
            The Goal resource, or its JSON text when ``encode`` is set
        """
        record = CarePlanRecord.from_record(record)

        fields: Dict[str, Any] = {
            "id": record.uuid,
            "meta": Meta(version_id=RESOURCE_VERSION_ID, last_updated=fhir_instant_now()),
            "lifecycle_status": GOAL_LIFECYCLE_STATUS,
        }

        if record.puuid is not None:
            fields["subject"] = Reference(reference=patient_reference(record.puuid))
        else:
            fields["subject"] = DATA_MISSING

        # US Core only asks for descriptive text. The individual rows are
        # exposed as targets.
        if record.details:
            text, xhtml = self.care_plan_text_from_details(record.details)
            fields["description"] = CodeableConcept(text=text)
            if xhtml:
                fields["text"] = Narrative(div=f'<div xmlns="{XHTML_NAMESPACE}">{xhtml}</div>')
            fields["target"] = tuple(self._build_target(detail) for detail in record.details)

        goal = GoalResource(**fields)
        log_with_context(
            logger, logging.DEBUG, "Converted care plan record to Goal",
            goal_id=goal.id, targets=len(record.details),
        )

        if encode:
            return goal.to_json()
        return goal

    def _build_target(self, detail: GoalDetail) -> GoalTarget:
        fields: Dict[str, Any] = {"due_date": to_fhir_date(detail.date) or DATA_MISSING}

        if detail.description:
            # a detail requires a measure: a coded one when the row has a code
            fields["detail_string"] = detail.description
            if detail.code:
                fields["measure"] = self._build_measure(detail.code)
            else:
                fields["measure"] = DATA_MISSING

        return GoalTarget(**fields)

    def _build_measure(self, code: str) -> CodeableConcept:
        code_text = self.terminology.lookup_code_description(code)
        code_system = self.terminology.get_system_for_code(code)

        display = self.translator.translate(code_text) if code_text else DATA_MISSING
        # Usually LOINC, but any code system the terminology service knows is accepted
        coding = Coding(code=code, system=code_system or None, display=display)
        return CodeableConcept(coding=(coding,))

    @staticmethod
    def care_plan_text_from_details(details: Sequence[GoalDetail]):
        """Combined plain text and HTML description of the goal rows.

        Each row contributes its description, or its code text when the row has
        no description at all.

        Returns:
            Tuple of (newline-joined text, ``<p>`` joined HTML)
        """
        descriptions = []
        for detail in details:
            if detail.description is not None:
                descriptions.append(detail.description)
            else:
                descriptions.append(detail.codetext or "")

        text = "\n".join(descriptions)
        xhtml = ""
        if descriptions:
            xhtml = "<p>" + "</p><p>".join(html.escape(d) for d in descriptions) + "</p>"
        return text, xhtml

    # ------------------------------------------------------------------
    # Searches
    # ------------------------------------------------------------------

    def get_one(self, fhir_resource_id: str, puuid_bind: Optional[str] = None) -> ProcessingResult:
        """
        Look a Goal up by its FHIR resource id.

        Args:
            fhir_resource_id: The goal's (surrogate) resource id
            puuid_bind: Only return the goal if it belongs to this patient
        """
        return self.get_all(build_get_one_search(fhir_resource_id, puuid_bind))

    def get_all(self, fhir_search_params: Mapping[str, Any], puuid_bind: Optional[str] = None) -> ProcessingResult:
        search = translate_search_parameters(self.search_parameters, fhir_search_params)
        with LogMetrics(logger, "Goal search") as metrics:
            result = self.search_for_records(search, puuid_bind)
            converted = convert_search_result(result, self.convert)
            metrics.log_count(len(converted), "goals")
        return converted

    def search_for_records(self, search: Mapping[str, Any], puuid_bind: Optional[str] = None) -> ProcessingResult:
        """Search care plan goal records with internal field filters."""
        log_with_context(
            logger, logging.INFO, "Searching care plan goals",
            filters=sorted(search), patient_bound=puuid_bind is not None,
        )
        return self.store.search(search, True, puuid_bind)

    # ------------------------------------------------------------------
    # Provenance and write side
    # ------------------------------------------------------------------

    def create_provenance(self, resource: Any, encode: bool = False) -> Any:
        """Build the Provenance resource for a Goal produced by this service."""
        if self.provenance is None:
            raise GoalServiceError("FhirGoalService was created without a provenance factory")
        provenance = self.provenance.create_provenance_for_domain_resource(resource)
        if encode:
            return provenance.model_dump_json(exclude_none=True)
        return provenance

    def parse_fhir_resource(self, fhir_resource: Any = None) -> None:
        # Goals are read-only
        return None

    def insert_record(self, record: Any) -> None:
        return None

    def update_record(self, fhir_resource_id: str, updated_record: Any) -> None:
        return None
