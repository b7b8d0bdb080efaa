"""Data models for region text extraction."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tag_extractor.enums import ExtractionErrorCode

if TYPE_CHECKING:
    from tag_extractor.services.pdf.buffer import PageBuffer


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Region:
    """A rectangle in page-pixel space, origin top-left."""

    x: float
    y: float
    width: float
    height: float

    def contains(self, point: Point) -> bool:
        """Anchor-point containment, edges included."""
        return (
            self.x <= point.x <= self.x + self.width
            and self.y <= point.y <= self.y + self.height
        )


@dataclass(frozen=True)
class TextElement:
    """One decoded glyph run positioned on the page."""

    text: str
    position: Point
    width: float
    height: float
    font_size: int
    font_name: str = "unknown"


@dataclass(frozen=True)
class Tag:
    """A user-drawn rectangle that names what to extract."""

    id: str
    name: str
    region: Region
    color: str = ""


@dataclass
class PDFDocument:
    """An uploaded document awaiting extraction."""

    id: str
    name: str
    data: PageBuffer | None = None
    is_scanned: bool | None = None


@dataclass(frozen=True)
class ExtractionResult:
    """Result of extracting one tag from one document.

    error_code is None on success. extracted_text is never empty: failure
    states carry a bracketed placeholder instead.
    """

    id: str
    document_id: str
    file_name: str
    page_number: int
    tag_id: str
    tag_name: str
    extracted_text: str
    text_elements: list[TextElement] | None = None
    error_code: ExtractionErrorCode | None = None

    @property
    def succeeded(self) -> bool:
        return self.error_code is None


@dataclass(frozen=True)
class DocumentValidation:
    """Outcome of checking a document before extraction."""

    is_valid: bool
    error_message: str | None = None
    error_code: ExtractionErrorCode | None = None


@dataclass
class TextProcessingOptions:
    """Options for single-region extraction."""

    preserve_formatting: bool = True  # Reading-order reconstruction with line breaks
    cleanup_text: bool = True  # Normalize whitespace
    ocr_fallback: bool = True  # Emit the OCR placeholder when nothing matched
    preserve_line_breaks: bool = False


@dataclass
class StepEvent:
    """A single diagnostic step reported during extraction."""

    step: str
    timestamp: float
    details: dict = field(default_factory=dict)


@dataclass
class ExtractionSummary:
    """Timing and per-result elements for a finished batch."""

    start_time: float
    end_time: float
    steps_count: int = 0
    extracted_elements: dict[str, list[TextElement]] = field(default_factory=dict)

    @property
    def elapsed_ms(self) -> float:
        return (self.end_time - self.start_time) * 1000
