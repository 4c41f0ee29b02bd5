"""
Metadata Fetcher - descriptive metadata and geometry column lookup.
"""

import logging
from typing import List, Dict, Any, Optional

from services.socrata_client import SocrataClient
from .exceptions import UpstreamUnreachableError
from .models import DescriptiveMetadata

logger = logging.getLogger(__name__)

# Socrata dataTypeName -> GeoJSON geometry type
GEOMETRY_TYPES = {
    "point": "Point",
    "line": "LineString",
    "polygon": "Polygon",
    "multipoint": "MultiPoint",
    "multiline": "MultiLineString",
    "multipolygon": "MultiPolygon",
}


def fetch_descriptive(client: SocrataClient, host: str, metadata_id: str) -> DescriptiveMetadata:
    """
    Fetch name, description and license for a dataset.

    Raises:
        UpstreamUnreachableError: If the metadata API call fails or the
            body is not a JSON object
    """
    response = client.get_metadata(host, metadata_id)
    if not response.success:
        raise UpstreamUnreachableError(response.status_code, response.error)
    if not isinstance(response.data, dict):
        raise UpstreamUnreachableError(502, "Metadata document is not a JSON object")
    return DescriptiveMetadata.model_validate(response.data)


def fetch_columns(client: SocrataClient, host: str, data_id: str) -> List[Dict[str, Any]]:
    """
    Fetch the column definitions of a resource.

    getByResourceName answers with the view document; older portals wrap
    it in a list.

    Raises:
        UpstreamUnreachableError: Any failure; the orchestrator routes on
            ``upstream_status`` (400 and 404 are not terminal here). A view
            or column that is not a JSON object fails with 502.
    """
    response = client.get_columns(host, data_id)
    if not response.success:
        raise UpstreamUnreachableError(response.status_code, response.error)

    view = response.data
    if isinstance(view, list):
        view = view[0] if view else {}
    if not isinstance(view, dict):
        raise UpstreamUnreachableError(502, "Column listing is not a view document")

    columns = view.get("columns") or []
    if not isinstance(columns, list) or not all(isinstance(col, dict) for col in columns):
        raise UpstreamUnreachableError(502, "Column listing has malformed columns")

    logger.debug(f"{data_id} on {host} has {len(columns)} columns")
    return columns


def geometry_columns(columns: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Columns whose dataTypeName is a geometry type, in column order."""
    return [col for col in columns if col.get("dataTypeName") in GEOMETRY_TYPES]


def geometry_type(geometry_fields: List[Dict[str, Any]]) -> Optional[str]:
    """GeoJSON type of the first geometry column, if any."""
    if not geometry_fields:
        return None
    return GEOMETRY_TYPES[geometry_fields[0]["dataTypeName"]]
