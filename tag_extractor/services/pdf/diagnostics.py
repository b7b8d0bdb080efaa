"""Optional diagnostics for batch extraction.

The orchestrator reports each step and a final summary to whatever
ExtractionDiagnostics it was given. Nothing in the engine depends on what
the collaborator does with them.
"""

import uuid
from collections import Counter
from typing import Protocol

from tag_extractor.enums import ExtractionErrorCode
from tag_extractor.services.pdf.models import ExtractionSummary, StepEvent
from tag_extractor.services.posthog import track_batch

# Codes that mean something went wrong, as opposed to "nothing to extract"
ERROR_CODES = {
    ExtractionErrorCode.BUFFER_DETACHED,
    ExtractionErrorCode.PROCESSING_ERROR,
    ExtractionErrorCode.BATCH_PROCESSING_ERROR,
}


class ExtractionDiagnostics(Protocol):
    def on_step(self, event: StepEvent) -> None: ...

    def on_complete(self, summary: ExtractionSummary) -> None: ...


class NullDiagnostics:
    """Discards all events."""

    def on_step(self, event: StepEvent) -> None:
        pass

    def on_complete(self, summary: ExtractionSummary) -> None:
        pass


class RecordingDiagnostics:
    """Keeps steps and the final summary in memory, e.g. for a debug panel."""

    def __init__(self):
        self.steps: list[StepEvent] = []
        self.summary: ExtractionSummary | None = None

    def on_step(self, event: StepEvent) -> None:
        self.steps.append(event)

    def on_complete(self, summary: ExtractionSummary) -> None:
        self.summary = summary

    def step_names(self) -> list[str]:
        return [event.step for event in self.steps]

    def reset(self) -> None:
        self.steps = []
        self.summary = None


class PostHogDiagnostics:
    """Reports each finished batch to PostHog as a single event."""

    def __init__(self, distinct_id: str = "system"):
        self.distinct_id = distinct_id
        self.batch_id = str(uuid.uuid4())
        self._error_codes: Counter[str] = Counter()
        self._documents = 0

    def on_step(self, event: StepEvent) -> None:
        if event.step == "Processing document":
            self._documents += 1
        error_code = event.details.get("error_code")
        if error_code:
            self._error_codes[str(error_code)] += 1

    def on_complete(self, summary: ExtractionSummary) -> None:
        track_batch(
            distinct_id=self.distinct_id,
            batch_id=self.batch_id,
            document_count=self._documents,
            error_counts=dict(self._error_codes),
            latency_ms=summary.elapsed_ms,
            is_error=any(code in ERROR_CODES for code in self._error_codes),
            properties={
                "results_with_elements": len(summary.extracted_elements),
                "steps": summary.steps_count,
            },
        )
