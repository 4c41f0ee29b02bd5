# ============================================================================
# CLAUDE CONTEXT - SOCRATA PROVIDER EXCEPTIONS
# ============================================================================
# STATUS: Standalone Exceptions - Socrata feature provider
# PURPOSE: Terminal failure kinds surfaced to the provider caller
# EXPORTS: SocrataProviderError, DatasetNotFoundError, UpstreamUnreachableError, InvalidQueryError
# DEPENDENCIES: None (standard library only)
# ============================================================================

"""
Socrata Provider Exception Hierarchy

Two terminal failure kinds reach the caller:

1. DatasetNotFoundError - the id could not be resolved or the dataset is
   missing on the domain (also used once a migrated id still fails).
2. UpstreamUnreachableError - any other upstream status or transport failure.

A third kind, InvalidQueryError, rejects untranslatable query parameters
before any upstream call.

Metadata and extent failures are not represented here: they degrade the
response instead of failing it.
"""

from typing import Optional


class SocrataProviderError(Exception):
    """
    Base class for terminal provider failures.

    Attributes:
        status_code: HTTP status the host should answer with
    """
    status_code: int = 500


class DatasetNotFoundError(SocrataProviderError):
    """
    The dataset id is unknown on this domain.

    Raised when the descriptor lookup returns 404, when the feature fetch
    returns 404, and when a migrated id is rejected again.
    """
    status_code = 404

    def __init__(self, dataset_id: str):
        self.dataset_id = dataset_id
        super().__init__(f"404 - Dataset for id {dataset_id} not found on this domain")


class UpstreamUnreachableError(SocrataProviderError):
    """
    Unexpected upstream status or transport failure.

    The upstream status (or the client's pseudo status for timeouts and
    connection errors) is kept on ``upstream_status``.
    """
    status_code = 502

    def __init__(self, upstream_status: int, detail: Optional[str] = None):
        self.upstream_status = upstream_status
        self.detail = detail
        super().__init__(f"{upstream_status} - Unexpected problem, cannot reach server")


class InvalidQueryError(SocrataProviderError):
    """
    A query parameter cannot be translated to SoQL.

    Raised before any upstream call is made.
    """
    status_code = 400

    def __init__(self, parameter: str, value: str, reason: str):
        self.parameter = parameter
        self.value = value
        super().__init__(f"400 - Invalid {parameter} '{value}': {reason}")
