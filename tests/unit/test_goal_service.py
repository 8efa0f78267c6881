"""
Unit tests for the FHIR Goal service.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from fhir_goal_service.constants import DATA_ABSENT_REASON_URL, US_CORE_GOAL_PROFILE_URI
from fhir_goal_service.domain.records import CarePlanRecord
from fhir_goal_service.domain.resources import DATA_MISSING, GoalResource, Reference, is_missing
from fhir_goal_service.domain.search import ProcessingResult, SearchFieldType
from fhir_goal_service.exceptions import GoalServiceError
from fhir_goal_service.services.base import FhirResourceService
from fhir_goal_service.services.goal_service import FhirGoalService
from fhir_goal_service.utils.i18n import CatalogTranslator

LOINC = "http://loinc.org"
DATA_MISSING_JSON = {"extension": [{"url": DATA_ABSENT_REASON_URL, "valueCode": "unknown"}]}


class TestConvert:
    """Tests for mapping care plan records onto Goal resources."""

    def test_sample_record(self, goal_service, mock_terminology, sample_goal_record, fixed_now):
        """Test converting a record with one fully populated goal row."""
        goal = goal_service.convert(sample_goal_record)

        assert isinstance(goal, GoalResource)
        assert goal.id == "u1"
        assert goal.meta.version_id == "1"
        assert goal.meta.last_updated == fixed_now
        assert goal.lifecycle_status == "active"
        assert goal.subject == Reference(reference="Patient/p1")
        assert goal.description.text == "Lose weight"

        assert len(goal.target) == 1
        target = goal.target[0]
        assert target.due_date == "2023-01-01"
        assert target.detail_string == "Lose weight"
        assert len(target.measure.coding) == 1
        coding = target.measure.coding[0]
        assert coding.code == "1234-5"
        assert coding.system == LOINC
        assert coding.display == "Body weight"

        mock_terminology.lookup_code_description.assert_called_once_with("1234-5")
        mock_terminology.get_system_for_code.assert_called_once_with("1234-5")

    def test_accepts_record_model(self, goal_service, sample_goal_record):
        """Test that an already built CarePlanRecord converts the same way."""
        goal = goal_service.convert(CarePlanRecord.from_record(sample_goal_record))
        assert goal.id == "u1"
        assert goal.target[0].detail_string == "Lose weight"

    def test_narrative_from_descriptions(self, goal_service, sample_goal_record):
        """Test the generated narrative holds the HTML rendition of the descriptions."""
        goal = goal_service.convert(sample_goal_record)
        assert goal.text.status == "generated"
        assert goal.text.div == '<div xmlns="http://www.w3.org/1999/xhtml"><p>Lose weight</p></div>'

    def test_empty_details(self, goal_service, fixed_now):
        """Test that a record without goal rows has no description and no targets."""
        goal = goal_service.convert({"uuid": "u1", "puuid": "p1", "details": []})

        assert goal.description is None
        assert goal.target is None
        assert goal.text is None

        encoded = goal.to_fhir()
        assert "description" not in encoded
        assert "target" not in encoded
        assert "text" not in encoded
        assert encoded["lifecycleStatus"] == "active"

    def test_missing_details_key(self, goal_service):
        """Test that a record without a details key behaves like empty details."""
        goal = goal_service.convert({"uuid": "u1", "puuid": "p1"})
        assert goal.target is None

    def test_missing_patient(self, goal_service, sample_goal_record):
        """Test that an absent puuid gives a data-missing subject."""
        del sample_goal_record["puuid"]
        goal = goal_service.convert(sample_goal_record)

        assert is_missing(goal.subject)
        assert goal.to_fhir()["subject"] == DATA_MISSING_JSON

    def test_missing_uuid(self, goal_service):
        """Test that an absent uuid leaves the id unset instead of failing."""
        goal = goal_service.convert({"puuid": "p1", "details": []})
        assert goal.id is None
        assert "id" not in goal.to_fhir()

    def test_target_per_detail_in_order(self, goal_service, mock_terminology, multi_detail_record):
        """Test one target per detail row, covering every target branch."""
        goal = goal_service.convert(multi_detail_record)

        assert len(goal.target) == 3
        first, second, third = goal.target

        # description and code: coded measure
        assert first.due_date == "2023-02-01"
        assert first.detail_string == "Walk daily"
        assert first.measure.coding[0].code == "LOINC:29463-7"

        # description without code: data-missing measure, never omitted
        assert is_missing(second.due_date)
        assert second.detail_string == "Reduce salt"
        assert is_missing(second.measure)

        # no description: due date only, code ignored
        assert third.due_date == "2023-03-15"
        assert third.detail_string is None
        assert third.measure is None

        mock_terminology.lookup_code_description.assert_called_once_with("LOINC:29463-7")

    def test_description_text_joins_rows(self, goal_service, multi_detail_record):
        """Test the description joins every row's description with newlines."""
        goal = goal_service.convert(multi_detail_record)
        assert goal.description.text == "Walk daily\nReduce salt\n"
        assert goal.text.div.endswith("<p>Walk daily</p><p>Reduce salt</p><p></p></div>")

    def test_description_falls_back_to_codetext(self, goal_service):
        """Test that a row without a description contributes its code text."""
        goal = goal_service.convert({"uuid": "u1", "details": [{"codetext": "Body height"}, {}]})
        assert goal.description.text == "Body height\n"

    def test_narrative_escapes_markup(self, goal_service):
        """Test that descriptions are escaped inside the XHTML narrative."""
        goal = goal_service.convert({"uuid": "u1", "details": [{"description": "BMI < 25 & steady"}]})
        assert "<p>BMI &lt; 25 &amp; steady</p>" in goal.text.div
        assert goal.description.text == "BMI < 25 & steady"

    def test_unknown_code_display_missing(self, goal_service, mock_terminology, sample_goal_record):
        """Test that a code unknown to the terminology service gets a data-missing display."""
        mock_terminology.lookup_code_description.return_value = ""
        goal = goal_service.convert(sample_goal_record)

        coding = goal.target[0].measure.coding[0]
        assert coding.code == "1234-5"
        assert is_missing(coding.display)

        encoded = goal.to_fhir()["target"][0]["measure"]["coding"][0]
        assert "display" not in encoded
        assert encoded["_display"] == DATA_MISSING_JSON

    def test_unknown_code_system_omitted(self, goal_service, mock_terminology, sample_goal_record):
        """Test that a code system the terminology service cannot resolve is left out."""
        mock_terminology.get_system_for_code.return_value = None
        goal = goal_service.convert(sample_goal_record)

        assert goal.target[0].measure.coding[0].system is None
        assert "system" not in goal.to_fhir()["target"][0]["measure"]["coding"][0]

    def test_display_is_localized(self, mock_store, mock_terminology, sample_goal_record):
        """Test that the resolved display goes through the translator."""
        translator = MagicMock()
        translator.translate.return_value = "Peso corporal"
        service = FhirGoalService(mock_store, mock_terminology, translator=translator)

        goal = service.convert(sample_goal_record)

        translator.translate.assert_called_once_with("Body weight")
        assert goal.target[0].measure.coding[0].display == "Peso corporal"

    def test_malformed_fields_degrade(self, goal_service):
        """Test that unreadable values become data-missing markers instead of errors."""
        record = {"uuid": 42, "puuid": None, "details": [None, {"date": "unknown", "description": "Sleep more"}]}
        goal = goal_service.convert(record)

        assert goal.id == "42"
        assert is_missing(goal.subject)
        assert len(goal.target) == 2
        assert is_missing(goal.target[0].due_date)
        assert goal.target[0].detail_string is None
        assert is_missing(goal.target[1].due_date)
        assert is_missing(goal.target[1].measure)

    def test_partial_due_dates(self, goal_service):
        """Test that year and year-month due dates are not padded with invented days."""
        record = {
            "uuid": "u3",
            "details": [
                {"date": "2023", "description": "a"},
                {"date": "2023-05", "description": "b"},
                {"date": "12", "description": "c"},
            ],
        }
        goal = goal_service.convert(record)

        assert goal.target[0].due_date == "2023"
        assert goal.target[1].due_date == "2023-05"
        assert is_missing(goal.target[2].due_date)

    def test_zero_description_is_text(self, goal_service):
        """Test that the description "0" counts as a description."""
        goal = goal_service.convert({"uuid": "u4", "details": [{"description": "0", "code": ""}]})

        assert goal.target[0].detail_string == "0"
        assert is_missing(goal.target[0].measure)

    def test_empty_catalog_translator_is_kept(self, mock_store, mock_terminology):
        """Test that a translator with no entries is still used."""
        translator = CatalogTranslator("es")
        service = FhirGoalService(mock_store, mock_terminology, translator=translator)

        assert service.translator is translator

    def test_encode_returns_json(self, goal_service, sample_goal_record, fixed_now):
        """Test the encoded form of a converted goal."""
        encoded = goal_service.convert(sample_goal_record, encode=True)

        assert isinstance(encoded, str)
        data = json.loads(encoded)
        assert data["resourceType"] == "Goal"
        assert data["id"] == "u1"
        assert data["meta"] == {"versionId": "1", "lastUpdated": fixed_now}
        assert data["lifecycleStatus"] == "active"
        assert data["subject"] == {"reference": "Patient/p1"}
        assert data["description"] == {"text": "Lose weight"}
        assert data["target"] == [
            {
                "measure": {"coding": [{"system": LOINC, "code": "1234-5", "display": "Body weight"}]},
                "detailString": "Lose weight",
                "dueDate": "2023-01-01",
            }
        ]

    def test_encode_data_missing_due_date(self, goal_service):
        """Test that a missing due date is encoded as a primitive extension."""
        data = json.loads(goal_service.convert({"uuid": "u1", "details": [{"description": ""}]}, encode=True))
        assert data["target"] == [{"_dueDate": DATA_MISSING_JSON}]

    def test_last_updated_is_utc_instant(self, goal_service, sample_goal_record):
        """Test the lastUpdated timestamp format without freezing the clock."""
        goal = goal_service.convert(sample_goal_record)
        assert goal.meta.last_updated.endswith("+00:00")
        assert "T" in goal.meta.last_updated


class TestSearch:
    """Tests for Goal lookups and searches."""

    def test_get_one_search(self, goal_service):
        """Test the FHIR search issued by a lookup by id."""
        with patch.object(goal_service, "get_all", return_value=ProcessingResult()) as get_all:
            goal_service.get_one("g-123")
        get_all.assert_called_once_with({"_id": "g-123"})

    def test_get_one_with_patient(self, goal_service):
        """Test that a bound patient adds a patient reference to the search."""
        with patch.object(goal_service, "get_all", return_value=ProcessingResult()) as get_all:
            goal_service.get_one("g-123", "p-1")
        get_all.assert_called_once_with({"_id": "g-123", "patient": "Patient/p-1"})

    def test_get_one_reaches_store(self, goal_service, mock_store):
        """Test the internal filters a lookup by id hands to the store."""
        goal_service.get_one("g-123", "p-1")
        mock_store.search.assert_called_once_with({"uuid": "g-123", "puuid": "p-1"}, True, None)

    def test_search_for_records_passes_through(self, goal_service, mock_store):
        """Test that record searches go straight to the store with the AND flag set."""
        expected = ProcessingResult(data=[{"uuid": "x"}])
        mock_store.search.return_value = expected

        result = goal_service.search_for_records({"uuid": "x"}, "p1")

        assert result is expected
        mock_store.search.assert_called_once_with({"uuid": "x"}, True, "p1")

    def test_get_all_converts_records(self, goal_service, mock_store, sample_goal_record):
        """Test that every record found is converted to a Goal."""
        mock_store.search.return_value = ProcessingResult(data=[sample_goal_record])

        result = goal_service.get_all({"patient": "Patient/p1"})

        mock_store.search.assert_called_once_with({"puuid": "p1"}, True, None)
        assert len(result) == 1
        assert isinstance(result.first(), GoalResource)
        assert result.first().id == "u1"

    def test_get_all_ignores_unknown_parameters(self, goal_service, mock_store):
        """Test that undeclared search parameters are not passed on."""
        goal_service.get_all({"_id": "u1", "lifecycle-status": "active"}, "p1")
        mock_store.search.assert_called_once_with({"uuid": "u1"}, True, "p1")

    def test_get_all_keeps_store_errors(self, goal_service, mock_store):
        """Test that problems reported by the store reach the caller."""
        mock_store.search.return_value = ProcessingResult(internal_errors=["database unavailable"])

        result = goal_service.get_all({"_id": "u1"})

        assert not result.is_valid()
        assert result.internal_errors == ["database unavailable"]

    def test_store_exceptions_propagate(self, goal_service, mock_store):
        """Test that store failures are not wrapped or retried."""
        mock_store.search.side_effect = RuntimeError("connection reset")

        with pytest.raises(RuntimeError, match="connection reset"):
            goal_service.get_one("u1")
        assert mock_store.search.call_count == 1

    def test_end_to_end_with_store(self, care_plan_store, terminology_service):
        """Test lookups against the in-memory store and table terminology."""
        service = FhirGoalService(care_plan_store, terminology_service)

        result = service.get_one("u2")
        assert len(result) == 1
        measure = result.first().target[0].measure
        assert measure.coding[0].system == LOINC
        assert measure.coding[0].display == "Body weight"

        # the goal belongs to p2
        assert len(service.get_one("u2", "p1")) == 0

        by_patient = service.get_all({"patient": "Patient/p1"})
        assert [g.id for g in by_patient.data] == ["u1"]
        # "1234-5" is not in the code table
        assert is_missing(by_patient.first().target[0].measure.coding[0].display)


class TestServiceSurface:
    """Tests for the service declarations, provenance and write stubs."""

    def test_is_resource_service(self, goal_service):
        assert isinstance(goal_service, FhirResourceService)

    def test_profile_uris(self, goal_service):
        assert goal_service.profile_uris() == [US_CORE_GOAL_PROFILE_URI]

    def test_search_parameters(self, goal_service):
        """Test the declared FHIR search parameters."""
        params = goal_service.search_parameters
        assert set(params) == {"patient", "_id"}

        assert params["patient"].type is SearchFieldType.REFERENCE
        assert params["patient"].fields[0].name == "puuid"
        assert params["patient"].fields[0].type == "uuid"

        assert params["_id"].type is SearchFieldType.TOKEN
        assert params["_id"].fields[0].name == "uuid"

    def test_patient_context_search_field(self, goal_service):
        field = goal_service.patient_context_search_field()
        assert field.name == "patient"
        assert field.to_filters("Patient/p-1") == {"puuid": "p-1"}

    def test_create_provenance_delegates(self, mock_store, mock_terminology, sample_goal_record):
        """Test that provenance is built by the provenance collaborator."""
        provenance = MagicMock()
        service = FhirGoalService(mock_store, mock_terminology, provenance=provenance)
        goal = service.convert(sample_goal_record)

        result = service.create_provenance(goal)

        provenance.create_provenance_for_domain_resource.assert_called_once_with(goal)
        assert result is provenance.create_provenance_for_domain_resource.return_value

    def test_create_provenance_encoded(self, mock_store, mock_terminology, sample_goal_record):
        provenance = MagicMock()
        provenance.create_provenance_for_domain_resource.return_value.model_dump_json.return_value = "{}"
        service = FhirGoalService(mock_store, mock_terminology, provenance=provenance)

        assert service.create_provenance(service.convert(sample_goal_record), encode=True) == "{}"

    def test_create_provenance_without_factory(self, goal_service, sample_goal_record):
        with pytest.raises(GoalServiceError):
            goal_service.create_provenance(goal_service.convert(sample_goal_record))

    def test_write_operations_are_noops(self, goal_service, mock_store, sample_goal_record):
        """Test that the write side does nothing and returns nothing."""
        assert goal_service.parse_fhir_resource({"resourceType": "Goal"}) is None
        assert goal_service.insert_record(sample_goal_record) is None
        assert goal_service.update_record("u1", sample_goal_record) is None
        mock_store.search.assert_not_called()

    def test_data_missing_singleton_reason(self):
        assert DATA_MISSING.reason == "unknown"
