import logging

from harvester.exceptions import ReferenceValidationError
from harvester.models.fhir.types import ReferenceHandle

logger = logging.getLogger(__name__)


def build_reference_handle(reference: str | None, base_url: str) -> ReferenceHandle:
    """
    Converts a FHIR reference string to a ReferenceHandle, making it relative to the given base URL if necessary.
    """
    if reference is None or reference.strip() == "":
        raise ReferenceValidationError("Invalid reference (empty)")

    ref = reference.strip()
    if ref.startswith(base_url):
        ref = ref[len(base_url):].lstrip("/")

    if ref.startswith("https://") or ref.startswith("http://"):
        raise ReferenceValidationError(f"Reference {reference} points outside of the source server")

    parts = ref.split("/")
    # Versioned references point at the same resource
    if len(parts) == 4 and parts[2] == "_history":
        parts = parts[:2]

    if len(parts) != 2 or not all(parts):
        logger.error("Failed to parse reference: %s", reference)
        raise ReferenceValidationError("Invalid reference: %s" % reference)

    return ReferenceHandle(resource_type=parts[0], id=parts[1])
