"""
Common test fixtures and utilities for the FHIR Goal service tests.
"""

import logging
import os
from unittest.mock import MagicMock, patch

import pytest

from fhir_goal_service.application.config_loader import reset_settings
from fhir_goal_service.domain.search import ProcessingResult
from fhir_goal_service.infrastructure.care_plan_store import InMemoryCarePlanStore
from fhir_goal_service.infrastructure.terminology import TerminologyService
from fhir_goal_service.services.goal_service import FhirGoalService

FIXED_NOW = "2024-05-01T12:00:00+00:00"

LOINC = "http://loinc.org"


@pytest.fixture
def sample_goal_record():
    """A care plan record with one fully populated goal row."""
    return {
        "uuid": "u1",
        "puuid": "p1",
        "details": [
            {
                "date": "2023-01-01",
                "description": "Lose weight",
                "code": "1234-5",
                "codetext": "Body weight",
            }
        ],
    }


@pytest.fixture
def multi_detail_record():
    """A care plan record exercising every target branch."""
    return {
        "uuid": "u2",
        "puuid": "p2",
        "details": [
            {"date": "2023-02-01", "description": "Walk daily", "code": "LOINC:29463-7"},
            {"date": "", "description": "Reduce salt", "code": ""},
            {"date": "2023-03-15 00:00:00", "description": "", "code": "LOINC:8302-2", "codetext": "Height"},
        ],
    }


@pytest.fixture
def mock_terminology():
    """Terminology collaborator resolving every code to a LOINC display."""
    terminology = MagicMock()
    terminology.lookup_code_description.return_value = "Body weight"
    terminology.get_system_for_code.return_value = LOINC
    return terminology


@pytest.fixture
def mock_store():
    """Storage collaborator returning no records."""
    store = MagicMock()
    store.search.return_value = ProcessingResult()
    return store


@pytest.fixture
def goal_service(mock_store, mock_terminology):
    """Goal service wired to mock collaborators."""
    return FhirGoalService(store=mock_store, terminology=mock_terminology)


@pytest.fixture
def terminology_service():
    """A small table-driven terminology service."""
    return TerminologyService(
        codes={
            "LOINC": {"29463-7": "Body weight", "8302-2": "Body height"},
            "SNOMED-CT": {"289169006": "Exercise"},
        }
    )


@pytest.fixture
def care_plan_store(sample_goal_record, multi_detail_record):
    """In-memory store holding goals for two patients."""
    return InMemoryCarePlanStore([sample_goal_record, multi_detail_record])


@pytest.fixture
def fixed_now():
    """Freeze the lastUpdated timestamp of converted goals."""
    with patch("fhir_goal_service.services.goal_service.fhir_instant_now", return_value=FIXED_NOW):
        yield FIXED_NOW


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Keep cached settings and GOAL_SERVICE_* variables from leaking between tests."""
    for key in list(os.environ):
        if key.upper().startswith("GOAL_SERVICE_"):
            monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Remove the JSON handler and restore the root level after each test."""
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler.get_name() == "fhir_goal_service.json":
            root.removeHandler(handler)
    root.setLevel(level)
