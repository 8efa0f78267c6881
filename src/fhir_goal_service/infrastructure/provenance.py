"""
Provenance resources for FHIR resources produced by the services.

Every resource is attributed to a single author organization, recorded at the
time the Provenance is built.
"""
from typing import Any, Mapping, Tuple

from fhir.resources.provenance import Provenance

from fhir_goal_service.exceptions import GoalServiceError
from fhir_goal_service.utils.codeable_concept import create_codeable_concept
from fhir_goal_service.utils.dates import fhir_instant_now
from fhir_goal_service.utils.logging import get_logger

logger = get_logger(__name__)

PROVENANCE_PARTICIPANT_TYPE_SYSTEM = "http://terminology.hl7.org/CodeSystem/provenance-participant-type"


def _resource_identity(resource: Any) -> Tuple[str, Any]:
    if isinstance(resource, Mapping):
        return resource.get("resourceType"), resource.get("id")
    return getattr(resource, "resource_type", None), getattr(resource, "id", None)


class FhirProvenanceService:
    """Builds ``fhir.resources`` Provenance models."""

    def __init__(self, organization_reference: str = "Organization/default"):
        self.organization_reference = organization_reference

    def create_provenance_for_domain_resource(self, resource: Any) -> Provenance:
        """
        Create the Provenance for a domain resource.

        Args:
            resource: A resource model from this package, or a FHIR resource dict

        Returns:
            Provenance targeting the resource

        Raises:
            GoalServiceError: If the resource has no type or id to reference
        """
        resource_type, resource_id = _resource_identity(resource)
        if not resource_type or not resource_id:
            raise GoalServiceError("Provenance needs a resource with a resourceType and an id")

        provenance = Provenance.model_validate({
            "resourceType": "Provenance",
            "target": [{"reference": f"{resource_type}/{resource_id}"}],
            "recorded": fhir_instant_now(),
            "agent": [
                {
                    "type": create_codeable_concept(
                        "author", PROVENANCE_PARTICIPANT_TYPE_SYSTEM, display="Author"
                    ),
                    "who": {"reference": self.organization_reference},
                }
            ],
        })
        logger.debug(f"Created Provenance for {resource_type}/{resource_id}")
        return provenance
