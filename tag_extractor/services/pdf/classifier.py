"""Heuristic detection of scanned (image-only) documents."""

import logging

from tag_extractor.config import settings
from tag_extractor.services.pdf.buffer import PageBuffer, clone_buffer
from tag_extractor.services.pdf.decoder import PageDecoder, get_decoder

logger = logging.getLogger(__name__)


def is_likely_scanned(fragment_count: int, threshold: int | None = None) -> bool:
    """A page with very few text fragments has no real text layer."""
    threshold = threshold if threshold is not None else settings.scanned_fragment_threshold
    return fragment_count < threshold


async def is_probably_scanned_pdf(
    buffer: PageBuffer,
    decoder: PageDecoder | None = None,
) -> bool:
    """
    Check whether the first page of a document is likely scanned.

    Returns:
        True if page 1 yields too few text fragments; False on any decode error
    """
    decoder = decoder or get_decoder()

    try:
        page = await decoder.decode(clone_buffer(buffer), 1)
    except Exception as e:
        logger.error(f"Error checking if PDF is scanned: {e}")
        return False

    try:
        fragments = await page.get_text_content()
        return is_likely_scanned(len(fragments))
    except Exception as e:
        logger.error(f"Error checking if PDF is scanned: {e}")
        return False
    finally:
        page.close()
