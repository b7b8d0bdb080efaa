"""Region text extraction from PDF pages."""

from tag_extractor.services.pdf.batch import (
    BatchExtractionService,
    extract_text_from_all_documents,
    validate_document_data,
)
from tag_extractor.services.pdf.buffer import PageBuffer, clone_buffer, is_detached
from tag_extractor.services.pdf.classifier import is_likely_scanned, is_probably_scanned_pdf
from tag_extractor.services.pdf.decoder import Fragment, PageDecoder, PyMuPDFDecoder, Viewport
from tag_extractor.services.pdf.diagnostics import (
    ExtractionDiagnostics,
    NullDiagnostics,
    PostHogDiagnostics,
    RecordingDiagnostics,
)
from tag_extractor.services.pdf.elements import (
    extract_text_elements_from_page,
    get_text_elements_with_metadata,
)
from tag_extractor.services.pdf.models import (
    ExtractionResult,
    PDFDocument,
    Point,
    Region,
    Tag,
    TextElement,
    TextProcessingOptions,
)
from tag_extractor.services.pdf.normalize import normalize_text
from tag_extractor.services.pdf.reading_order import (
    format_text_elements,
    group_into_lines,
    sort_reading_order,
)
from tag_extractor.services.pdf.region import extract_text_from_region, filter_elements_by_region

__all__ = [
    # Buffers
    "PageBuffer",
    "clone_buffer",
    "is_detached",
    # Decoding
    "Fragment",
    "PageDecoder",
    "PyMuPDFDecoder",
    "Viewport",
    "extract_text_elements_from_page",
    "get_text_elements_with_metadata",
    # Models
    "ExtractionResult",
    "PDFDocument",
    "Point",
    "Region",
    "Tag",
    "TextElement",
    "TextProcessingOptions",
    # Text reconstruction
    "filter_elements_by_region",
    "format_text_elements",
    "group_into_lines",
    "normalize_text",
    "sort_reading_order",
    "extract_text_from_region",
    # Classification
    "is_likely_scanned",
    "is_probably_scanned_pdf",
    # Batch
    "BatchExtractionService",
    "extract_text_from_all_documents",
    "validate_document_data",
    # Diagnostics
    "ExtractionDiagnostics",
    "NullDiagnostics",
    "PostHogDiagnostics",
    "RecordingDiagnostics",
]
