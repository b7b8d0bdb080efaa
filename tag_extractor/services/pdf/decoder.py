"""Page decoding boundary backed by PyMuPDF.

The rest of the engine only sees the PageDecoder protocol: a decode call
consumes a PageBuffer and yields a DecodedPage, whose text content is a list
of Fragments with PDF-style affine transforms (origin bottom-left).
"""

import asyncio
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Protocol

import pymupdf

from tag_extractor.exceptions import PageDecodeError
from tag_extractor.services.pdf.buffer import PageBuffer

logger = logging.getLogger(__name__)

# MuPDF is not thread-safe, even across documents; all calls share one thread
_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pymupdf")


@dataclass(frozen=True)
class Fragment:
    """A run of text as reported by the decoder."""

    text: str
    transform: tuple[float, float, float, float, float, float]
    width: float = 0.0
    font_name: str | None = None
    dir: str | None = None


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float


class DecodedPage(Protocol):
    async def get_text_content(self, include_marked_content: bool = False) -> list[Fragment]: ...

    def get_viewport(self, scale: float = 1.0) -> Viewport: ...

    def close(self) -> None: ...


class PageDecoder(Protocol):
    async def decode(self, buffer: PageBuffer, page_number: int = 1) -> DecodedPage:
        """Decode a page. Consumes (detaches) the buffer."""
        ...


class PyMuPDFPage:
    """A single page of an open PyMuPDF document.

    Every MuPDF call, including close(), runs on the decoder's single worker
    thread.
    """

    def __init__(self, document: pymupdf.Document, page: pymupdf.Page):
        self._document = document
        self._page = page
        self._width = page.rect.width
        self._height = page.rect.height

    async def get_text_content(self, include_marked_content: bool = False) -> list[Fragment]:
        # PyMuPDF reports no marked-content markers; spans inside marked
        # content are always part of the text dict.
        loop = asyncio.get_running_loop()
        try:
            text_dict = await loop.run_in_executor(_executor, self._page.get_text, "dict")
        except Exception as e:
            raise PageDecodeError(f"Failed to read text content: {e}") from e
        return self._fragments_from_dict(text_dict)

    def get_viewport(self, scale: float = 1.0) -> Viewport:
        return Viewport(width=self._width * scale, height=self._height * scale)

    def close(self) -> None:
        _executor.submit(self._document.close)

    def _fragments_from_dict(self, text_dict: dict) -> list[Fragment]:
        """Convert PyMuPDF spans into bottom-left-origin fragments."""
        page_height = self._height
        fragments: list[Fragment] = []

        for block in text_dict.get("blocks", []):
            if block.get("type") != 0:  # 0 = text block
                continue

            for line in block.get("lines", []):
                cos, sin = line.get("dir", (1.0, 0.0))
                for span in line.get("spans", []):
                    text = span.get("text", "")
                    if not text:
                        continue

                    size = span.get("size", 0.0)
                    origin_x, origin_y = span.get("origin", (0.0, 0.0))
                    x0, y0, x1, y1 = span.get("bbox", (0.0, 0.0, 0.0, 0.0))
                    # Advance along the writing direction
                    width = abs(x1 - x0) if abs(cos) >= abs(sin) else abs(y1 - y0)

                    # PyMuPDF's y axis points down; flip the direction vector
                    # and the baseline into PDF user space.
                    transform = (
                        size * cos,
                        -size * sin,
                        size * sin,
                        size * cos,
                        origin_x,
                        page_height - origin_y,
                    )
                    fragments.append(
                        Fragment(
                            text=text,
                            transform=transform,
                            width=width,
                            font_name=span.get("font") or None,
                            dir="ltr" if cos >= 0 else "rtl",
                        )
                    )

        return fragments


class PyMuPDFDecoder:
    """Decode PDF bytes into pages using PyMuPDF."""

    async def decode(self, buffer: PageBuffer, page_number: int = 1) -> PyMuPDFPage:
        """
        Open the document held by buffer and load one page.

        Args:
            buffer: Document bytes. Consumed by this call.
            page_number: 1-based page number

        Returns:
            The decoded page; the caller must close() it

        Raises:
            BufferDetachedError: if buffer was already consumed
            PageDecodeError: if the bytes are not a readable PDF or the page does not exist
        """
        data = buffer.consume()
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(_executor, self._open_page, data, page_number)

    @staticmethod
    def _open_page(data: bytes, page_number: int) -> PyMuPDFPage:
        try:
            document = pymupdf.open(stream=data, filetype="pdf")
        except Exception as e:
            raise PageDecodeError(f"Failed to open document: {e}") from e

        if not 1 <= page_number <= document.page_count:
            page_count = document.page_count
            document.close()
            raise PageDecodeError(
                f"Page {page_number} out of range (document has {page_count} pages)"
            )

        try:
            page = PyMuPDFPage(document, document.load_page(page_number - 1))
        except Exception as e:
            document.close()
            raise PageDecodeError(f"Failed to load page {page_number}: {e}") from e

        logger.debug(f"Loaded page {page_number} of {document.page_count}")
        return page


def font_size_from_transform(transform: tuple[float, ...] | list[float]) -> float:
    """Font size is the length of the transform's y basis vector."""
    return math.sqrt(transform[2] * transform[2] + transform[3] * transform[3])


_default_decoder: PyMuPDFDecoder | None = None


def get_decoder() -> PyMuPDFDecoder:
    """Get or create the shared PyMuPDF decoder."""
    global _default_decoder
    if _default_decoder is None:
        _default_decoder = PyMuPDFDecoder()
    return _default_decoder
