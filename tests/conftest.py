"""Test configuration and shared fixtures."""

import os

import pymupdf
import pytest

# Override settings before importing app modules
os.environ["POSTHOG_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DIAGNOSTICS_ENABLED"] = "false"

from tag_extractor.exceptions import PageDecodeError
from tag_extractor.services.pdf import Fragment, PageBuffer, Point, TextElement, Viewport

PAGE_WIDTH = 612.0
PAGE_HEIGHT = 792.0


def make_element(
    text: str,
    x: float,
    y: float,
    width: float = 5.0,
    height: float = 10.0,
    font_name: str = "Helvetica",
) -> TextElement:
    """Build a text element directly in top-left page space."""
    return TextElement(
        text=text,
        position=Point(x=x, y=y),
        width=width,
        height=height,
        font_size=round(height),
        font_name=font_name,
    )


def make_fragment(
    text: str,
    x: float,
    y: float,
    width: float = 5.0,
    size: float = 10.0,
    font_name: str | None = "Helvetica",
) -> Fragment:
    """Build a decoder fragment whose element lands at (x, y) in top-left space."""
    return Fragment(
        text=text,
        transform=(size, 0.0, 0.0, size, x, PAGE_HEIGHT - y),
        width=width,
        font_name=font_name,
    )


class FakePage:
    def __init__(self, fragments: list[Fragment]):
        self.fragments = fragments
        self.closed = False

    async def get_text_content(self, include_marked_content: bool = False) -> list[Fragment]:
        return list(self.fragments)

    def get_viewport(self, scale: float = 1.0) -> Viewport:
        return Viewport(width=PAGE_WIDTH * scale, height=PAGE_HEIGHT * scale)

    def close(self) -> None:
        self.closed = True


class FakeDecoder:
    """Serves canned fragments keyed by the document bytes.

    Consumes buffers like a real decoder. Bytes starting with b"corrupt"
    fail to decode; bytes starting with b"explode" fail with an error from
    outside the decoding contract.
    """

    def __init__(self, pages: dict[bytes, list[Fragment]] | None = None):
        self.pages = pages or {}
        self.decode_calls = 0
        self.consumed: list[PageBuffer] = []

    async def decode(self, buffer: PageBuffer, page_number: int = 1) -> FakePage:
        self.decode_calls += 1
        self.consumed.append(buffer)
        data = buffer.consume()
        if data.startswith(b"corrupt"):
            raise PageDecodeError("Failed to open document: corrupt data")
        if data.startswith(b"explode"):
            raise RuntimeError("decoder crashed")
        return FakePage(self.pages.get(data, []))


def text_page_fragments() -> list[Fragment]:
    """A page with a heading, a two-line body and a footer."""
    return [
        make_fragment("Invoice", 50, 40, width=40, size=12),
        make_fragment("Number:", 50, 100, width=40),
        make_fragment("12345", 100, 100, width=30),
        make_fragment("Total", 50, 115, width=25),
        make_fragment("99.00", 100, 115, width=25),
        make_fragment("Footer", 50, 700, width=30),
    ]


@pytest.fixture
def fake_decoder() -> FakeDecoder:
    return FakeDecoder({b"text-page": text_page_fragments()})


def build_pdf(lines: list[tuple[float, float, str]], fontsize: float = 12) -> bytes:
    """Build a one-page PDF with text placed at baseline points (x, y), top-left origin."""
    doc = pymupdf.open()
    page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
    for x, y, text in lines:
        page.insert_text((x, y), text, fontsize=fontsize)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def text_pdf_bytes() -> bytes:
    """A real PDF with six text lines, each on its own baseline."""
    return build_pdf(
        [
            (72, 72, "ACME Corporation"),
            (72, 130, "Drawing Number"),
            (300, 150, "DWG-0042"),
            (72, 200, "Revision"),
            (300, 220, "C"),
            (72, 700, "Page footer"),
        ]
    )


@pytest.fixture
def blank_pdf_bytes() -> bytes:
    """A real PDF with no text layer."""
    return build_pdf([])
