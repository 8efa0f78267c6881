"""Shared constants for the FHIR Goal service.

FHIR structure definition URLs, code system URIs keyed by the EHR's code type
prefixes, and the fixed values every Goal resource carries.
"""
from __future__ import annotations

__all__ = [
    "US_CORE_GOAL_PROFILE_URI",
    "DATA_ABSENT_REASON_URL",
    "DATA_ABSENT_REASON_UNKNOWN",
    "GOAL_LIFECYCLE_STATUS",
    "RESOURCE_VERSION_ID",
    "PATIENT_REFERENCE_PREFIX",
    "XHTML_NAMESPACE",
    "CODE_SYSTEMS",
]

US_CORE_GOAL_PROFILE_URI = "http://hl7.org/fhir/us/core/StructureDefinition/us-core-goal"

DATA_ABSENT_REASON_URL = "http://hl7.org/fhir/StructureDefinition/data-absent-reason"
DATA_ABSENT_REASON_UNKNOWN = "unknown"

# The care plan form does not track goal status.
GOAL_LIFECYCLE_STATUS = "active"

RESOURCE_VERSION_ID = "1"

PATIENT_REFERENCE_PREFIX = "Patient/"

XHTML_NAMESPACE = "http://www.w3.org/1999/xhtml"

# Code type prefix (as stored in "TYPE:code" strings) -> FHIR code system URI
CODE_SYSTEMS = {
    "LOINC": "http://loinc.org",
    "SNOMED-CT": "http://snomed.info/sct",
    "SNOMED": "http://snomed.info/sct",
    "SNOMED-PR": "http://snomed.info/sct",
    "CPT4": "http://www.ama-assn.org/go/cpt",
    "ICD10": "http://hl7.org/fhir/sid/icd-10-cm",
    "ICD10-PCS": "http://www.cms.gov/Medicare/Coding/ICD10",
    "RXNORM": "http://www.nlm.nih.gov/research/umls/rxnorm",
    "RXCUI": "http://www.nlm.nih.gov/research/umls/rxnorm",
    "CVX": "http://hl7.org/fhir/sid/cvx",
    "NUCC": "http://nucc.org/provider-taxonomy",
    "HCPCS": "urn:oid:2.16.840.1.113883.6.285",
}
