"""Tests for the PyMuPDF decoder adapter."""

import asyncio
import threading
from unittest.mock import MagicMock, patch

import pytest
from conftest import PAGE_HEIGHT, PAGE_WIDTH, build_pdf

from tag_extractor.exceptions import BufferDetachedError, PageDecodeError
from tag_extractor.services.pdf import PageBuffer, PyMuPDFDecoder
from tag_extractor.services.pdf import decoder as decoder_module
from tag_extractor.services.pdf.decoder import PyMuPDFPage, font_size_from_transform, get_decoder


class TestPyMuPDFDecoder:
    @pytest.mark.asyncio
    async def test_decode_consumes_buffer(self, text_pdf_bytes):
        buffer = PageBuffer(text_pdf_bytes)

        page = await PyMuPDFDecoder().decode(buffer, 1)
        page.close()

        assert buffer.is_detached

    @pytest.mark.asyncio
    async def test_decoding_twice_raises(self, text_pdf_bytes):
        decoder = PyMuPDFDecoder()
        buffer = PageBuffer(text_pdf_bytes)
        (await decoder.decode(buffer, 1)).close()

        with pytest.raises(BufferDetachedError):
            await decoder.decode(buffer, 1)

    @pytest.mark.asyncio
    async def test_invalid_bytes_raise_decode_error(self):
        with pytest.raises(PageDecodeError):
            await PyMuPDFDecoder().decode(PageBuffer(b"not a pdf"), 1)

    @pytest.mark.asyncio
    async def test_page_out_of_range(self, text_pdf_bytes):
        with pytest.raises(PageDecodeError, match="out of range"):
            await PyMuPDFDecoder().decode(PageBuffer(text_pdf_bytes), 2)

    @pytest.mark.asyncio
    async def test_viewport_matches_page_size(self, text_pdf_bytes):
        page = await PyMuPDFDecoder().decode(PageBuffer(text_pdf_bytes), 1)
        try:
            viewport = page.get_viewport(scale=1.0)
            scaled = page.get_viewport(scale=2.0)
        finally:
            page.close()

        assert viewport.width == pytest.approx(PAGE_WIDTH)
        assert viewport.height == pytest.approx(PAGE_HEIGHT)
        assert scaled.height == pytest.approx(PAGE_HEIGHT * 2)

    @pytest.mark.asyncio
    async def test_fragments_use_bottom_left_transform(self):
        data = build_pdf([(100, 200, "Baseline")], fontsize=10)
        page = await PyMuPDFDecoder().decode(PageBuffer(data), 1)
        try:
            fragments = await page.get_text_content(include_marked_content=True)
        finally:
            page.close()

        assert [f.text for f in fragments] == ["Baseline"]
        fragment = fragments[0]
        assert fragment.transform[4] == pytest.approx(100, abs=0.5)
        assert fragment.transform[5] == pytest.approx(PAGE_HEIGHT - 200, abs=0.5)
        assert font_size_from_transform(fragment.transform) == pytest.approx(10, abs=0.1)
        assert fragment.font_name
        assert fragment.dir == "ltr"


def test_font_size_from_transform():
    assert font_size_from_transform((1, 0, 3, 4, 0, 0)) == 5


def test_get_decoder_is_shared():
    assert get_decoder() is get_decoder()


class TestDecoderThreading:
    @pytest.mark.asyncio
    async def test_all_calls_run_on_one_worker_thread(self, text_pdf_bytes):
        threads = []
        real_open_page = PyMuPDFDecoder._open_page

        def recording_open_page(data, page_number):
            threads.append(threading.current_thread().name)
            return real_open_page(data, page_number)

        with patch.object(PyMuPDFDecoder, "_open_page", side_effect=recording_open_page):
            pages = await asyncio.gather(
                *(PyMuPDFDecoder().decode(PageBuffer(text_pdf_bytes), 1) for _ in range(4))
            )
        for page in pages:
            page.close()

        assert decoder_module._executor._max_workers == 1
        assert len(threads) == 4
        assert all(name.startswith("pymupdf") for name in threads)

    @pytest.mark.asyncio
    async def test_concurrent_decodes_are_consistent(self, text_pdf_bytes):
        async def read(buffer):
            page = await PyMuPDFDecoder().decode(buffer, 1)
            try:
                return [f.text for f in await page.get_text_content()]
            finally:
                page.close()

        texts = await asyncio.gather(*(read(PageBuffer(text_pdf_bytes)) for _ in range(5)))

        assert all(t == texts[0] for t in texts)
        assert "DWG-0042" in texts[0]


class TestDecoderCleanup:
    def test_load_page_failure_closes_document(self):
        document = MagicMock(page_count=1)
        document.load_page.side_effect = RuntimeError("broken page tree")

        with patch.object(decoder_module.pymupdf, "open", return_value=document):
            with pytest.raises(PageDecodeError, match="Failed to load page 1"):
                PyMuPDFDecoder._open_page(b"%PDF", 1)

        document.close.assert_called_once()

    def test_page_out_of_range_closes_document(self):
        document = MagicMock(page_count=1)

        with patch.object(decoder_module.pymupdf, "open", return_value=document):
            with pytest.raises(PageDecodeError):
                PyMuPDFDecoder._open_page(b"%PDF", 5)

        document.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_text_read_failure_is_decode_error(self):
        page = MagicMock()
        page.rect.width = PAGE_WIDTH
        page.rect.height = PAGE_HEIGHT
        page.get_text.side_effect = RuntimeError("bad content stream")

        with pytest.raises(PageDecodeError, match="bad content stream"):
            await PyMuPDFPage(MagicMock(), page).get_text_content()
