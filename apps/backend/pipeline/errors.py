"""
Enrichment error taxonomy.

Only conditions that abort an operation are exceptions. Expected per-job
results (auth wall, missing description, missing URL) are outcome values,
see pipeline.outcomes.
"""


class EnrichmentError(Exception):
    """Base class for enrichment pipeline errors."""


class BatchTooLarge(EnrichmentError):
    """Raised before any work when a batch exceeds the configured cap."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"Maximum {limit} jobs per enrichment batch (got {size})")


class FetchError(EnrichmentError):
    """Server-side page fetch failed (timeout, DNS, connection, non-2xx)."""

    def __init__(self, reason: str, url: str = "", status_code: int = 0):
        self.reason = reason
        self.url = url
        self.status_code = status_code
        super().__init__(reason)


class RenderSurfaceUnavailable(EnrichmentError):
    """The rendered-browser surface is missing or not started."""


class LeaseExpired(EnrichmentError):
    """A surface lease was used after it was released."""


class CleanupFailed(EnrichmentError):
    """Model-assisted cleanup failed. Never leaves DescriptionCleaner."""


class JobStoreError(EnrichmentError):
    """Reading or writing the job store failed."""
