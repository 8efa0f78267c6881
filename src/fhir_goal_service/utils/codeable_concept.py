"""
Helpers for building encoded FHIR CodeableConcept data types.

Used where a CodeableConcept is handed to a ``fhir.resources`` model as plain
JSON, such as the agent type of a Provenance.
"""
from typing import Any, Dict, Optional


def create_codeable_concept(
    code: str,
    system: str,
    display: Optional[str] = None,
    text: Optional[str] = None
) -> Dict[str, Any]:
    """
    Create a FHIR CodeableConcept object.

    Args:
        code: The code value
        system: The coding system URI
        display: Optional display text for the coding
        text: Optional text for the CodeableConcept

    Returns:
        A FHIR CodeableConcept object as a dictionary
    """
    result = {"coding": [{"system": system, "code": code}]}

    if display:
        result["coding"][0]["display"] = display

    if text:
        result["text"] = text

    return result
