# ============================================================================
# CLAUDE CONTEXT - SOCRATA HTTP CLIENT
# ============================================================================
# STATUS: Service Layer - Socrata open-data portal client
# PURPOSE: HTTP client for the Socrata views, resource, metadata and migrations APIs
# EXPORTS: SocrataClient, SocrataResponse
# DEPENDENCIES: httpx (sync), util_logger
# PORTABLE: Yes - no config imports, host is passed per call
# ============================================================================
"""
Socrata HTTP Client Service (SYNC VERSION).

Thin sync wrapper over the Socrata endpoints used by the feature provider:
- /api/views/{id}.json                 dataset descriptor
- /resource/{id}.geojson?...           feature data and extent probes
- /api/views.json?method=getByResourceName&name={id}   column listing
- /api/views/metadata/v1/{id}.json     descriptive metadata
- /api/migrations/{id}.json            legacy id -> NBE id lookup

The client never raises for HTTP status codes. Every call returns a
SocrataResponse; transport failures are reported with pseudo status codes
(504 timeout, 500 request error) so callers branch on status alone.

The host is a per-call argument. The client holds no default domain, which
keeps concurrent requests for different portals independent.
"""

import httpx
import logging
from urllib.parse import quote
from typing import Dict, Optional, Union
from dataclasses import dataclass

from util_logger import ComponentType, log_exceptions

logger = logging.getLogger(__name__)


def _segment(value: str) -> str:
    """Percent-encode a dataset id for use as a path or query segment."""
    return quote(str(value), safe="")


@dataclass
class SocrataResponse:
    """Response wrapper for Socrata API calls."""
    success: bool
    status_code: int
    data: Optional[Union[Dict, list]] = None
    url: Optional[str] = None
    error: Optional[str] = None


class SocrataClient:
    """
    Sync HTTP client for Socrata portals.

    Usage:
        client = SocrataClient(timeout=30.0)

        response = client.get_view("data.sfgov.org", "tmnf-yvry")
        if response.success:
            child_views = response.data.get("childViews")

        client.close()

    Tests inject an ``httpx.MockTransport`` through ``transport``.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        scheme: str = "https",
        app_token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize Socrata client.

        Args:
            timeout: Request timeout in seconds.
            scheme: URL scheme for upstream calls ("https" unless mirrored locally).
            app_token: Optional Socrata application token (sent as X-App-Token).
            transport: Optional httpx transport override.
        """
        self.timeout = timeout
        self.scheme = scheme
        self.app_token = app_token
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def _get_client(self) -> httpx.Client:
        """Get or create sync HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {
                "Accept": "application/json",
                "Accept-Encoding": "gzip, deflate"
            }
            if self.app_token:
                headers["X-App-Token"] = self.app_token
            self._client = httpx.Client(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                headers=headers,
                transport=self._transport
            )
        return self._client

    def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            self._client.close()

    def _url(self, host: str, path: str, query_string: Optional[str] = None) -> str:
        url = f"{self.scheme}://{host}{path}"
        if query_string:
            url = f"{url}?{query_string}"
        return url

    @log_exceptions(ComponentType.ADAPTER, "SocrataClient")
    def _get(self, url: str) -> SocrataResponse:
        """
        GET a JSON document.

        Args:
            url: Fully built upstream URL (query string already encoded)

        Returns:
            SocrataResponse with parsed JSON or error
        """
        client = self._get_client()
        logger.debug(f"Calling {url}")

        try:
            response = client.get(url)

            if response.status_code >= 400:
                error_text = response.text[:500] if response.text else "Unknown error"
                return SocrataResponse(
                    success=False,
                    status_code=response.status_code,
                    url=url,
                    error=f"Socrata error: {error_text}"
                )

            return SocrataResponse(
                success=True,
                status_code=response.status_code,
                data=response.json(),
                url=url
            )

        except httpx.TimeoutException:
            return SocrataResponse(
                success=False,
                status_code=504,
                url=url,
                error=f"Socrata request timeout after {self.timeout}s"
            )
        except httpx.RequestError as e:
            return SocrataResponse(
                success=False,
                status_code=500,
                url=url,
                error=f"Socrata request error: {str(e)}"
            )
        except ValueError as e:
            # Body was not JSON (json.JSONDecodeError is a ValueError)
            return SocrataResponse(
                success=False,
                status_code=502,
                url=url,
                error=f"Socrata returned invalid JSON: {str(e)}"
            )

    # =========================================================================
    # Views API
    # =========================================================================

    def get_view(self, host: str, dataset_id: str) -> SocrataResponse:
        """Get the dataset descriptor (child views, parent linkage)."""
        return self._get(self._url(host, f"/api/views/{_segment(dataset_id)}.json"))

    def get_columns(self, host: str, dataset_id: str) -> SocrataResponse:
        """Get the view listing that carries the column definitions."""
        return self._get(self._url(
            host,
            "/api/views.json",
            f"method=getByResourceName&name={_segment(dataset_id)}"
        ))

    def get_metadata(self, host: str, dataset_id: str) -> SocrataResponse:
        """Get descriptive metadata (name, description, license)."""
        return self._get(self._url(host, f"/api/views/metadata/v1/{_segment(dataset_id)}.json"))

    def get_migration(self, host: str, dataset_id: str) -> SocrataResponse:
        """Look up the NBE id a legacy dataset id migrated to."""
        return self._get(self._url(host, f"/api/migrations/{_segment(dataset_id)}.json"))

    # =========================================================================
    # Resource (SODA) API
    # =========================================================================

    def get_geojson(self, host: str, dataset_id: str, query_string: str) -> SocrataResponse:
        """
        Query the resource endpoint in GeoJSON form.

        Args:
            host: Socrata domain
            dataset_id: Resource (data) id
            query_string: SoQL query string, already URL-encoded
        """
        return self._get(self._url(host, f"/resource/{_segment(dataset_id)}.geojson", query_string))
