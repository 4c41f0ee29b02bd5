# ============================================================================
# CLAUDE CONTEXT - SOCRATA PROVIDER MODELS
# ============================================================================
# STATUS: Standalone Models - request, dataset reference and metadata envelope
# PURPOSE: Pydantic models passed between the provider pipeline stages
# EXPORTS: PathParameters, QueryParameters, ProviderRequest, DatasetReference,
#          DescriptiveMetadata, MetadataEnvelope
# INTERFACES: Pydantic BaseModel
# PYDANTIC_MODELS: All classes in this file
# DEPENDENCIES: pydantic, typing
# SOURCE: FeatureServer request parameters, Socrata metadata API
# VALIDATION: Pydantic v2 validation
# PATTERNS: Data Transfer Objects (DTOs)
# ============================================================================

"""
Socrata Provider Pydantic Models

Field names that mirror a wire format (FeatureServer query parameters,
FeatureServer layer metadata) keep that format's camelCase spelling.
"""

from typing import List, Dict, Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


ID_FIELD = ":id"


def _blank_to_none(v: Any) -> Optional[str]:
    if v is None:
        return None
    v = str(v)
    return v if v.strip() else None


class PathParameters(BaseModel):
    """
    Route parameters of a FeatureServer request.

    /{host?}/{id}/FeatureServer/{layer}/{method}
    """
    model_config = ConfigDict(extra="ignore")

    host: Optional[str] = Field(
        default=None,
        description="Socrata domain for this request (falls back to configured default)"
    )
    id: str = Field(
        min_length=1,
        description="Dataset id as given by the caller (4x4 id, legacy or NBE)"
    )
    layer: Optional[str] = Field(
        default=None,
        description="FeatureServer layer index"
    )
    method: Optional[str] = Field(
        default=None,
        description="FeatureServer method (e.g. 'query')"
    )

    @field_validator("host", "layer", "method", mode="before")
    @classmethod
    def blank_is_absent(cls, v: Any) -> Optional[str]:
        return _blank_to_none(v)


class QueryParameters(BaseModel):
    """
    FeatureServer query parameters the provider translates to SoQL.

    An empty string is treated the same as an absent parameter.
    """
    model_config = ConfigDict(extra="ignore")

    where: Optional[str] = Field(
        default=None,
        description="Where clause, passed through as SoQL $where"
    )
    resultOffset: Optional[str] = Field(
        default=None,
        description="Number of records to skip ($offset)"
    )
    resultRecordCount: Optional[str] = Field(
        default=None,
        description="Maximum number of records ($limit)"
    )
    orderByFields: Optional[str] = Field(
        default=None,
        description="Esri ordering, e.g. 'name ASC, date DESC'"
    )

    @field_validator("where", "resultOffset", "resultRecordCount", "orderByFields", mode="before")
    @classmethod
    def blank_is_absent(cls, v: Any) -> Optional[str]:
        return _blank_to_none(v)


class ProviderRequest(BaseModel):
    """
    Request-like structure handed to the provider by the host framework.
    """
    params: PathParameters
    query: QueryParameters = Field(default_factory=QueryParameters)

    @classmethod
    def from_parts(
        cls,
        params: Dict[str, Any],
        query: Optional[Dict[str, Any]] = None
    ) -> "ProviderRequest":
        """Build from the host's raw route-parameter and query dicts."""
        return cls(
            params=PathParameters(**params),
            query=QueryParameters(**(query or {}))
        )


class DatasetReference(BaseModel):
    """
    The pair of ids one request works with, plus its host.

    Some Socrata geo datasets keep the queryable data and the descriptive
    metadata under different ids, so both are always carried even when
    they are equal. Frozen: resolution steps return an updated copy.
    """
    model_config = ConfigDict(frozen=True)

    primary_id: str = Field(description="Id queried for features and columns")
    metadata_id: str = Field(description="Id queried for descriptive metadata")
    host: str = Field(description="Socrata domain")

    @classmethod
    def for_id(cls, host: str, dataset_id: str) -> "DatasetReference":
        return cls(primary_id=dataset_id, metadata_id=dataset_id, host=host)

    def with_primary_id(self, primary_id: str) -> "DatasetReference":
        return self.model_copy(update={"primary_id": primary_id})

    def with_metadata_id(self, metadata_id: str) -> "DatasetReference":
        return self.model_copy(update={"metadata_id": metadata_id})


class DescriptiveMetadata(BaseModel):
    """Fields read from /api/views/metadata/v1/{id}.json."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    description: Optional[str] = None
    license: Optional[str] = None


class MetadataEnvelope(BaseModel):
    """
    FeatureServer layer metadata attached to the FeatureCollection.
    """
    idField: str = Field(
        default=ID_FIELD,
        description="Unique identifier field (Socrata row id)"
    )
    name: Optional[str] = Field(
        default=None,
        description="Layer name"
    )
    description: Optional[str] = Field(
        default=None,
        description="Layer description"
    )
    copyrightText: Optional[str] = Field(
        default=None,
        description="License sentence built from organization and license; omitted without a license"
    )
    extent: Optional[List[List[float]]] = Field(
        default=None,
        description="[[minX, minY], [maxX, maxY]] or null when no geometry column"
    )
    geometryType: Optional[str] = Field(
        default=None,
        description="GeoJSON geometry type of the layer, when known"
    )

    @classmethod
    def build(
        cls,
        descriptive: DescriptiveMetadata,
        organization: str,
        extent: Optional[List[List[float]]],
        geometry_type: Optional[str] = None
    ) -> "MetadataEnvelope":
        return cls(
            name=descriptive.name,
            description=descriptive.description,
            copyrightText=(
                f"This data licensed by {organization} under {descriptive.license}"
                if descriptive.license else None
            ),
            extent=extent,
            geometryType=geometry_type
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize; extent stays present (null) while copyrightText and geometryType are omitted when unknown."""
        data = self.model_dump(mode="json")
        for key in ("copyrightText", "geometryType"):
            if data.get(key) is None:
                data.pop(key, None)
        return data
