"""
Id Resolver - map a requested dataset id to its data id and metadata id.

Socrata geo datasets come in parent/child pairs:
- a parent lists its derived views in ``childViews``; the first child holds
  the queryable (SODA 2.1) data while the parent keeps the metadata.
- a child names its parent in ``privateMetadata.geo.parentUid``; the child
  holds the data and the parent the metadata.

Both rules are applied independently to the same descriptor.
"""

import logging
from typing import Dict, Any, Optional

from services.socrata_client import SocrataClient
from .exceptions import DatasetNotFoundError, UpstreamUnreachableError
from .models import DatasetReference

logger = logging.getLogger(__name__)


def _parent_uid(descriptor: Dict[str, Any]) -> Optional[str]:
    private = descriptor.get("privateMetadata") or {}
    geo = private.get("geo") or {}
    return geo.get("parentUid") or None


def apply_descriptor(reference: DatasetReference, descriptor: Dict[str, Any]) -> DatasetReference:
    """
    Apply the child-view and geo-parent rules of a descriptor.

    Args:
        reference: Reference built from the requested id
        descriptor: Parsed /api/views/{id}.json document

    Returns:
        Updated reference (the input when neither rule applies)
    """
    child_views = descriptor.get("childViews")
    if child_views:
        reference = reference.with_primary_id(child_views[0])

    parent_uid = _parent_uid(descriptor)
    if parent_uid:
        reference = reference.with_metadata_id(parent_uid)

    return reference


def resolve_dataset(client: SocrataClient, host: str, dataset_id: str) -> DatasetReference:
    """
    Resolve the data id and metadata id for a requested dataset.

    Args:
        client: Socrata HTTP client
        host: Socrata domain for this request
        dataset_id: Id as requested

    Returns:
        DatasetReference with both ids

    Raises:
        DatasetNotFoundError: Descriptor lookup returned 404
        UpstreamUnreachableError: Any other descriptor failure, or a
            descriptor that is not a JSON object
    """
    response = client.get_view(host, dataset_id)

    if not response.success:
        if response.status_code == 404:
            raise DatasetNotFoundError(dataset_id)
        raise UpstreamUnreachableError(response.status_code, response.error)

    if not isinstance(response.data, dict):
        raise UpstreamUnreachableError(502, "Dataset descriptor is not a JSON object")

    reference = apply_descriptor(DatasetReference.for_id(host, dataset_id), response.data)

    if reference.primary_id != dataset_id or reference.metadata_id != dataset_id:
        logger.info(
            f"Resolved {dataset_id} on {host}: data={reference.primary_id}, "
            f"metadata={reference.metadata_id}"
        )

    return reference
