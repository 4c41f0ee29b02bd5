# ============================================================================
# CLAUDE CONTEXT - SOCRATA FEATURE SERVICE
# ============================================================================
# STATUS: Standalone Service - Socrata to GeoJSON FeatureCollection pipeline
# PURPOSE: Resolve ids, fetch features and metadata, merge into one response
# EXPORTS: SocrataFeatureService, FetchState, FailureTable
# INTERFACES: get_data(request, callback), submit(request) -> Future, fetch(request) -> dict
# PYDANTIC_MODELS: ProviderRequest, DatasetReference, MetadataEnvelope
# DEPENDENCIES: concurrent.futures, services.socrata_client, util_logger
# SOURCE: Socrata views, resource, metadata and migrations APIs
# SCOPE: Business logic for one FeatureServer data request
# PATTERNS: Service Layer, explicit state machine for retries
# ENTRY_POINTS: service = SocrataFeatureService(); service.get_data(request, callback)
# ============================================================================

"""
Socrata Feature Service - Data Orchestrator

Pipeline for one request:

    RESOLVING -> FETCHING -> SUCCESS
                          -> RETRY_MIGRATION -> FETCHING (escalated table)
                          -> NOT_FOUND
                          -> FAILED

RESOLVING runs the Id Resolver once; its NotFound/Unreachable errors are
terminal. FETCHING requests the GeoJSON features and the column listing in
parallel. The upstream status of a failed fetch is looked up in the current
FailureTable:

    first attempt:    400 -> RETRY_MIGRATION, 404 -> NOT_FOUND, else FAILED
    after migration:  400 -> NOT_FOUND,       404 -> NOT_FOUND, else FAILED

RETRY_MIGRATION swaps the data id for the migration record's nbeId and
switches to the escalated table, so the migration path is taken at most once.

On SUCCESS the descriptive metadata and the extent are fetched in parallel.
Their failures degrade the response (no metadata, or a null extent) and are
never surfaced to the caller.

All state is request-scoped; the host travels inside the DatasetReference.
"""

import logging
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, List, Optional, Tuple, Callable, Union

from pydantic import ValidationError

from services.socrata_client import SocrataClient
from util_logger import ComponentType, LogContext, LoggerFactory
from .config import SocrataConfig, get_socrata_config, validate_host_value
from .exceptions import (
    SocrataProviderError,
    DatasetNotFoundError,
    UpstreamUnreachableError,
    InvalidQueryError
)
from .extent import compute_extent
from .metadata import fetch_columns, fetch_descriptive, geometry_columns, geometry_type
from .models import ProviderRequest, DatasetReference, MetadataEnvelope
from .query import format_query
from .resolver import resolve_dataset

logger = logging.getLogger(__name__)

Callback = Callable[[Optional[Exception], Optional[Dict[str, Any]]], None]


class FetchState(Enum):
    """States of the fetch pipeline."""
    RESOLVING = "resolving"
    FETCHING = "fetching"
    RETRY_MIGRATION = "retry_migration"
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class FailureTable:
    """Next state for a failed FETCHING attempt, keyed by upstream status."""
    on_400: FetchState
    on_404: FetchState = FetchState.NOT_FOUND

    def next_state(self, status_code: int) -> FetchState:
        if status_code == 400:
            return self.on_400
        if status_code == 404:
            return self.on_404
        return FetchState.FAILED


FIRST_ATTEMPT = FailureTable(on_400=FetchState.RETRY_MIGRATION)
AFTER_MIGRATION = FailureTable(on_400=FetchState.NOT_FOUND)


class SocrataFeatureService:
    """
    Fetch a Socrata dataset as a GeoJSON FeatureCollection with metadata.

    Usage:
        service = SocrataFeatureService()

        def done(err, geojson):
            ...

        service.get_data(
            {"params": {"id": "tmnf-yvry", "layer": "0", "method": "query"},
             "query": {"resultRecordCount": "100"}},
            done
        )

        service.close()
    """

    def __init__(
        self,
        config: Optional[SocrataConfig] = None,
        client: Optional[SocrataClient] = None
    ):
        """
        Initialize service.

        Args:
            config: Provider configuration (uses singleton if not provided)
            client: Socrata client (built from config if not provided)
        """
        self.config = config or get_socrata_config()
        self.client = client or SocrataClient(
            timeout=self.config.timeout_seconds,
            scheme=self.config.scheme,
            app_token=self.config.app_token
        )
        self._executor: Optional[ThreadPoolExecutor] = None
        logger.info("SocrataFeatureService initialized")

    def close(self):
        """Close the HTTP client and the request executor."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ========================================================================
    # ENTRY POINTS
    # ========================================================================

    def get_data(
        self,
        request: Union[ProviderRequest, Dict[str, Any]],
        callback: Callback
    ) -> None:
        """
        Fetch and call ``callback(None, geojson)`` or ``callback(error, None)``.

        Only provider errors are handed to the callback; anything else is a
        bug and propagates.
        """
        try:
            result = self.fetch(request)
        except SocrataProviderError as e:
            callback(e, None)
            return
        callback(None, result)

    def submit(self, request: Union[ProviderRequest, Dict[str, Any]]) -> Future:
        """Run ``fetch`` on the service executor; the Future yields the GeoJSON dict."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.config.max_workers,
                thread_name_prefix="socrata-request"
            )
        return self._executor.submit(self.fetch, request)

    def fetch(self, request: Union[ProviderRequest, Dict[str, Any]]) -> Dict[str, Any]:
        """
        Run the pipeline for one request.

        Returns:
            GeoJSON FeatureCollection dict, with a ``metadata`` key when the
            descriptive metadata could be fetched

        Raises:
            InvalidQueryError: Malformed request or query parameters
            DatasetNotFoundError: Dataset id not found (after migration if any)
            UpstreamUnreachableError: Any other upstream failure
        """
        request = self._coerce_request(request)
        host = self._request_host(request)
        log = LoggerFactory.create_logger(
            ComponentType.SERVICE,
            "SocrataFeatureService",
            LogContext(
                request_id=uuid.uuid4().hex[:12],
                dataset_id=request.params.id,
                host=host,
                layer=request.params.layer
            )
        )

        query_string = format_query(request.query)

        log.debug(f"State {FetchState.RESOLVING.value}")
        try:
            reference = resolve_dataset(self.client, host, request.params.id)
        except DatasetNotFoundError:
            log.warning(f"Dataset {request.params.id} not found on {host}")
            raise
        except UpstreamUnreachableError as e:
            log.error(f"Descriptor lookup failed with {e.upstream_status}: {e.detail}")
            raise

        table = FIRST_ATTEMPT
        while True:
            log.debug(f"State {FetchState.FETCHING.value} for {reference.primary_id}")
            try:
                geojson, columns = self._fetch_features(reference, query_string)
            except UpstreamUnreachableError as e:
                state = table.next_state(e.upstream_status)
                log.info(
                    f"Fetch of {reference.primary_id} failed with {e.upstream_status}, "
                    f"next state {state.value}"
                )
                if state is FetchState.RETRY_MIGRATION:
                    reference = self._migrate(reference)
                    table = AFTER_MIGRATION
                    continue
                if state is FetchState.NOT_FOUND:
                    raise DatasetNotFoundError(reference.primary_id) from e
                log.error(f"Unexpected upstream failure {e.upstream_status}: {e.detail}")
                raise

            result = self._enrich(reference, geojson, columns, log)
            log.info(
                f"State {FetchState.SUCCESS.value}: {len(result.get('features') or [])} features "
                f"from {reference.primary_id}"
            )
            return result

    # ========================================================================
    # PIPELINE STEPS
    # ========================================================================

    def _coerce_request(self, request: Union[ProviderRequest, Dict[str, Any]]) -> ProviderRequest:
        if isinstance(request, ProviderRequest):
            return request
        try:
            return ProviderRequest.from_parts(
                request.get("params") or {},
                request.get("query") or {}
            )
        except ValidationError as e:
            raise InvalidQueryError("request", str(request.get("params")), str(e)) from e

    def _request_host(self, request: ProviderRequest) -> str:
        """Host named on the request, else the configured default."""
        if not request.params.host:
            return self.config.default_host
        try:
            return validate_host_value(request.params.host)
        except ValueError as e:
            raise InvalidQueryError("host", request.params.host, str(e)) from e

    def _fetch_features(
        self,
        reference: DatasetReference,
        query_string: str
    ) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
        """
        Fetch features and the column listing in parallel.

        Raises:
            UpstreamUnreachableError: Carrying the failing upstream status; the
                feature request's status wins when both fail
        """
        with ThreadPoolExecutor(max_workers=2) as executor:
            features_future = executor.submit(
                self.client.get_geojson, reference.host, reference.primary_id, query_string
            )
            columns_future = executor.submit(
                fetch_columns, self.client, reference.host, reference.primary_id
            )

            features = features_future.result()
            if not features.success:
                raise UpstreamUnreachableError(features.status_code, features.error)
            if not isinstance(features.data, dict):
                raise UpstreamUnreachableError(502, "Resource response is not a FeatureCollection")

            columns = columns_future.result()

        return features.data, columns

    def _migrate(self, reference: DatasetReference) -> DatasetReference:
        """
        Replace the data id with its migration target (nbeId).

        Raises:
            DatasetNotFoundError: No migration record, or it names no nbeId
            UpstreamUnreachableError: Any other migration lookup failure, or a
                record that is not a JSON object
        """
        response = self.client.get_migration(reference.host, reference.primary_id)
        if not response.success:
            if response.status_code == 404:
                raise DatasetNotFoundError(reference.primary_id)
            raise UpstreamUnreachableError(response.status_code, response.error)

        if not isinstance(response.data, dict):
            raise UpstreamUnreachableError(502, "Migration record is not a JSON object")

        nbe_id = response.data.get("nbeId")
        if not nbe_id:
            raise DatasetNotFoundError(reference.primary_id)

        logger.info(f"Migrated {reference.primary_id} -> {nbe_id}")
        return reference.with_primary_id(nbe_id)

    def _enrich(
        self,
        reference: DatasetReference,
        geojson: Dict[str, Any],
        columns: List[Dict[str, Any]],
        log: logging.LoggerAdapter
    ) -> Dict[str, Any]:
        """
        Attach the metadata envelope.

        A descriptive metadata failure returns the FeatureCollection without
        metadata; an extent failure leaves ``extent`` null.
        """
        geometry_fields = geometry_columns(columns)

        with ThreadPoolExecutor(max_workers=2) as executor:
            descriptive_future = executor.submit(
                fetch_descriptive, self.client, reference.host, reference.metadata_id
            )
            extent_future = executor.submit(
                compute_extent, self.client, reference.host, reference.primary_id, geometry_fields
            )

            try:
                descriptive = descriptive_future.result()
            except Exception as e:
                log.warning(f"Metadata unavailable for {reference.metadata_id}, returning data only: {e}", exc_info=True)
                return geojson

            try:
                extent = extent_future.result()
            except Exception as e:
                log.warning(f"Extent unavailable for {reference.primary_id}: {e}", exc_info=True)
                extent = None

        envelope = MetadataEnvelope.build(
            descriptive,
            organization=self.config.organization,
            extent=extent,
            geometry_type=geometry_type(geometry_fields)
        )
        geojson["metadata"] = envelope.to_dict()
        return geojson
