"""Positioned text elements from a decoded page."""

import logging

from tag_extractor.services.pdf.buffer import PageBuffer, clone_buffer
from tag_extractor.services.pdf.decoder import (
    Fragment,
    PageDecoder,
    font_size_from_transform,
    get_decoder,
)
from tag_extractor.services.pdf.models import Point, TextElement

logger = logging.getLogger(__name__)


def fragment_to_element(fragment: Fragment, page_height: float) -> TextElement:
    """Map a decoder fragment into top-left-origin page space."""
    tx = fragment.transform
    font_size = font_size_from_transform(tx)
    return TextElement(
        text=fragment.text,
        position=Point(x=tx[4], y=page_height - tx[5]),
        width=fragment.width or 0,
        height=font_size,
        font_size=round(font_size),
        font_name=fragment.font_name or "unknown",
    )


async def read_text_elements(
    buffer: PageBuffer,
    page_number: int,
    decoder: PageDecoder | None = None,
) -> list[TextElement]:
    """
    Decode a page and convert its fragments into text elements.

    The buffer passed in is consumed; callers hand over a fresh clone.

    Raises:
        BufferDetachedError: if buffer was already consumed
        PageDecodeError: if the page cannot be decoded
    """
    decoder = decoder or get_decoder()
    page = await decoder.decode(buffer, page_number)
    try:
        fragments = await page.get_text_content(include_marked_content=True)
        viewport = page.get_viewport(scale=1.0)
        return [
            fragment_to_element(fragment, viewport.height)
            for fragment in fragments
            if fragment.text
        ]
    finally:
        page.close()


async def extract_text_elements_from_page(
    buffer: PageBuffer,
    page_number: int,
    decoder: PageDecoder | None = None,
) -> list[TextElement]:
    """
    Extract positioned text elements from one page.

    The buffer is cloned before decoding, so the caller's buffer stays usable.

    Args:
        buffer: Document bytes
        page_number: 1-based page number
        decoder: Page decoder; defaults to PyMuPDF

    Returns:
        Text elements in decoder order, or an empty list if decoding fails
    """
    try:
        return await read_text_elements(clone_buffer(buffer), page_number, decoder)
    except Exception as e:
        logger.error(f"Error extracting text elements from page {page_number}: {e}")
        return []


async def get_text_elements_with_metadata(
    buffer: PageBuffer,
    page_number: int,
    decoder: PageDecoder | None = None,
) -> list[TextElement]:
    """Get all text elements with their metadata from a page."""
    return await extract_text_elements_from_page(buffer, page_number, decoder)
