"""
Extent Calculator.

Asks Socrata for extent(<geometry column>) and reduces the outer ring of
the first returned geometry to [[minX, minY], [maxX, maxY]].

Only that one ring is folded. The result is the bound of the first
returned feature, which is not guaranteed to be a dataset-wide extent;
any further features in the response are ignored. Consumers that need an
exact layer bound must not rely on it.
"""

import logging
from typing import List, Dict, Any, Optional, Sequence

from services.socrata_client import SocrataClient
from .exceptions import UpstreamUnreachableError
from .query import extent_query

logger = logging.getLogger(__name__)

Extent = List[List[float]]


def ring_extent(ring: Sequence[Sequence[float]]) -> Optional[Extent]:
    """
    Fold a coordinate ring into its bounding box.

    The accumulator starts empty and is seeded by the first point.

    >>> ring_extent([[0, 0], [2, 3], [-1, 4]])
    [[-1, 0], [2, 4]]
    """
    acc: Extent = []
    for point in ring:
        x, y = point[0], point[1]
        if not acc:
            acc = [[x, y], [x, y]]
        else:
            acc = [
                [min(acc[0][0], x), min(acc[0][1], y)],
                [max(acc[1][0], x), max(acc[1][1], y)]
            ]
    return acc or None


def outer_ring(feature_collection: Dict[str, Any]) -> Optional[Sequence[Sequence[float]]]:
    """Outer ring of the first feature's (Multi)Polygon, or None."""
    features = feature_collection.get("features") or []
    if not features:
        return None

    geometry = features[0].get("geometry") or {}
    coordinates = geometry.get("coordinates")
    if not coordinates:
        return None

    if geometry.get("type") == "Polygon":
        return coordinates[0]
    if geometry.get("type") == "MultiPolygon":
        return coordinates[0][0]
    return None


def compute_extent(
    client: SocrataClient,
    host: str,
    data_id: str,
    geometry_fields: List[Dict[str, Any]]
) -> Optional[Extent]:
    """
    Compute the layer extent for the first geometry column.

    Args:
        client: Socrata HTTP client
        host: Socrata domain
        data_id: Resource id holding the data
        geometry_fields: Geometry column definitions (may be empty)

    Returns:
        [[minX, minY], [maxX, maxY]], or None without any upstream call
        when there is no geometry column

    Raises:
        UpstreamUnreachableError: If the extent probe fails or its body is
            not a FeatureCollection
    """
    if not geometry_fields:
        return None

    field_name = geometry_fields[0]["fieldName"]
    response = client.get_geojson(host, data_id, extent_query(field_name))
    if not response.success:
        raise UpstreamUnreachableError(response.status_code, response.error)

    if not isinstance(response.data, dict):
        raise UpstreamUnreachableError(502, "Extent response is not a FeatureCollection")

    ring = outer_ring(response.data)
    if ring is None:
        logger.info(f"Extent probe for {data_id}.{field_name} returned no geometry")
        return None

    return ring_extent(ring)
