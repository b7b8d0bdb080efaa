"""Health check endpoints including PDF decoder availability."""

import pymupdf
from fastapi import APIRouter

from tag_extractor.config import settings

router = APIRouter()


@router.get("")
async def health():
    """Basic health check."""
    return {"status": "healthy"}


@router.get("/decoder")
async def decoder_health():
    """Report the PDF decoder version and the extraction settings in effect."""
    return {
        "status": "healthy",
        "decoder": "pymupdf",
        "version": pymupdf.VersionBind,
        "page_number": settings.extraction_page_number,
        "scanned_fragment_threshold": settings.scanned_fragment_threshold,
    }
