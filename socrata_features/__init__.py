# ============================================================================
# CLAUDE CONTEXT - SOCRATA FEATURES MODULE
# ============================================================================
# STATUS: Standalone Module - Socrata feature provider
# PURPOSE: Serve Socrata open-data datasets as GeoJSON FeatureCollections with layer metadata
# EXPORTS: SocrataFeatureService, SocrataConfig, get_socrata_config, error classes
# INTERFACES: get_data(request, callback) - host framework provider contract
# PYDANTIC_MODELS: ProviderRequest, DatasetReference, MetadataEnvelope
# DEPENDENCIES: httpx, pydantic
# SOURCE: Socrata views, resource, metadata and migrations APIs
# SCOPE: Id resolution, data fetch, metadata merge
# PATTERNS: Service Layer, Standalone Module
# ENTRY_POINTS: from socrata_features import SocrataFeatureService
# ============================================================================

"""
Socrata Features - Standalone Module

Fetches a Socrata dataset and its metadata and reshapes the result into a
GeoJSON FeatureCollection with a FeatureServer metadata envelope.

Architecture:
    socrata_features/
    ├── config.py      # Environment-based configuration
    ├── exceptions.py  # NotFound / Unreachable / InvalidQuery
    ├── models.py      # Pydantic models (request, dataset reference, envelope)
    ├── query.py       # FeatureServer query -> SoQL query string
    ├── resolver.py    # Parent/child id resolution
    ├── metadata.py    # Descriptive metadata and geometry columns
    ├── extent.py      # Extent probe and ring fold
    └── service.py     # Orchestration and retry state machine

    services/socrata_client.py   # httpx client for the Socrata APIs

Integration:
    from socrata_features import SocrataFeatureService

    service = SocrataFeatureService()
    service.get_data(
        {"params": {"host": "data.sfgov.org", "id": "tmnf-yvry"}, "query": {}},
        lambda err, geojson: ...
    )
"""

from .config import SocrataConfig, get_socrata_config
from .exceptions import (
    SocrataProviderError,
    DatasetNotFoundError,
    UpstreamUnreachableError,
    InvalidQueryError
)
from .models import ProviderRequest, DatasetReference, MetadataEnvelope
from .service import SocrataFeatureService

__version__ = "1.0.0"
__all__ = [
    "SocrataConfig",
    "get_socrata_config",
    "SocrataFeatureService",
    "ProviderRequest",
    "DatasetReference",
    "MetadataEnvelope",
    "SocrataProviderError",
    "DatasetNotFoundError",
    "UpstreamUnreachableError",
    "InvalidQueryError"
]
