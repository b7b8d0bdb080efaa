"""PostHog analytics for batch extraction.

One event is captured per finished batch, carrying timing and per-code
result counts. Nothing is sent unless PostHog is enabled and configured.
"""

import logging
import time
from typing import Any

from tag_extractor.config import settings

logger = logging.getLogger(__name__)

BATCH_EVENT = "extraction_batch"

# Singleton PostHog client
_posthog_client = None


def get_posthog_client():
    """Return the shared PostHog client, or None when analytics are off."""
    global _posthog_client
    if not (settings.posthog_enabled and settings.posthog_api_key):
        return None
    if _posthog_client is None:
        from posthog import Posthog

        _posthog_client = Posthog(settings.posthog_api_key, host=settings.posthog_host)
    return _posthog_client


def shutdown_posthog() -> None:
    """Flush queued events and drop the client. Called on app shutdown."""
    global _posthog_client
    if _posthog_client is not None:
        _posthog_client.shutdown()
        _posthog_client = None


class StepTimer:
    """Context manager measuring wall time with perf_counter."""

    def __init__(self):
        self.start_time: float = 0
        self.end_time: float = 0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.end_time = time.perf_counter()

    @property
    def elapsed_ms(self) -> float:
        return (self.end_time - self.start_time) * 1000


def track_batch(
    distinct_id: str,
    batch_id: str,
    document_count: int,
    error_counts: dict[str, int] | None = None,
    latency_ms: float | None = None,
    is_error: bool = False,
    properties: dict[str, Any] | None = None,
) -> None:
    """
    Capture one batch extraction in PostHog.

    Args:
        distinct_id: Caller identifier or "system"
        batch_id: Identifier grouping this batch's events
        document_count: Documents in the batch
        error_counts: Result counts keyed by error code
        latency_ms: Batch duration in milliseconds
        is_error: Whether any document failed outright
        properties: Additional custom properties
    """
    client = get_posthog_client()
    if client is None:
        return

    event_properties: dict[str, Any] = {
        "batch_id": batch_id,
        "document_count": document_count,
        "is_error": is_error,
    }

    if error_counts:
        event_properties["error_counts"] = error_counts

    if latency_ms is not None:
        event_properties["latency_s"] = latency_ms / 1000.0

    if properties:
        event_properties.update(properties)

    client.capture(distinct_id=distinct_id, event=BATCH_EVENT, properties=event_properties)
    logger.info(f"PostHog: tracked {BATCH_EVENT} ({document_count} documents, batch {batch_id[:8]})")
