"""Text extraction from a rectangular region of a page."""

import logging

from tag_extractor.services.pdf.buffer import PageBuffer, clone_buffer
from tag_extractor.services.pdf.decoder import PageDecoder
from tag_extractor.services.pdf.elements import extract_text_elements_from_page
from tag_extractor.services.pdf.models import Region, TextElement, TextProcessingOptions
from tag_extractor.services.pdf.normalize import normalize_text
from tag_extractor.services.pdf.reading_order import format_text_elements

logger = logging.getLogger(__name__)

OCR_PLACEHOLDER = "[OCR processing would be applied here for scanned documents]"


def filter_elements_by_region(elements: list[TextElement], region: Region) -> list[TextElement]:
    """
    Keep elements whose anchor point lies inside the region.

    An element belongs to the region only by its top-left position, not by
    overlap, so text starting just outside the rectangle is excluded.
    """
    return [element for element in elements if region.contains(element.position)]


async def extract_text_from_region(
    buffer: PageBuffer,
    page_number: int,
    region: Region,
    options: TextProcessingOptions | None = None,
    decoder: PageDecoder | None = None,
) -> str:
    """
    Extract the text inside a region of a page.

    Args:
        buffer: Document bytes; cloned before decoding
        page_number: 1-based page number
        region: Rectangle in page-pixel space
        options: Formatting and cleanup options
        decoder: Page decoder; defaults to PyMuPDF

    Returns:
        The region's text, the OCR placeholder if nothing matched, or a
        bracketed error message
    """
    options = options or TextProcessingOptions()

    try:
        elements = await extract_text_elements_from_page(
            clone_buffer(buffer), page_number, decoder
        )
        elements_in_region = filter_elements_by_region(elements, region)

        if not elements_in_region:
            return OCR_PLACEHOLDER if options.ocr_fallback else ""

        if options.preserve_formatting:
            text = format_text_elements(elements_in_region)
        else:
            text = " ".join(element.text for element in elements_in_region)

        if options.cleanup_text:
            text = normalize_text(text, preserve_line_breaks=options.preserve_line_breaks)

        return text.strip()
    except Exception as e:
        logger.error(f"Error extracting text from region: {e}")
        return f"[Error extracting text: {e}]"
