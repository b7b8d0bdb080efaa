"""Batch extraction of tagged regions across many documents.

Documents are processed one at a time and tags one at a time within a
document, so results come back in (document, tag) order. Failures are turned
into placeholder results; a batch always completes.
"""

import logging
import time
from dataclasses import asdict

from tag_extractor.config import settings
from tag_extractor.enums import ExtractionErrorCode
from tag_extractor.exceptions import BufferDetachedError, PageDecodeError
from tag_extractor.services.pdf.buffer import clone_buffer, is_detached
from tag_extractor.services.pdf.classifier import is_likely_scanned
from tag_extractor.services.pdf.decoder import PageDecoder
from tag_extractor.services.pdf.diagnostics import ExtractionDiagnostics, NullDiagnostics
from tag_extractor.services.pdf.elements import read_text_elements
from tag_extractor.services.pdf.models import (
    DocumentValidation,
    ExtractionResult,
    ExtractionSummary,
    PDFDocument,
    StepEvent,
    Tag,
    TextElement,
)
from tag_extractor.services.pdf.normalize import normalize_text
from tag_extractor.services.pdf.reading_order import format_text_elements, sort_reading_order
from tag_extractor.services.pdf.region import filter_elements_by_region
from tag_extractor.services.posthog import StepTimer
from tag_extractor.utils import build_result_id, preview_text

logger = logging.getLogger(__name__)

NO_DATA_TEXT = "[Error processing document: No data available]"
BUFFER_DETACHED_TEXT = "[Error processing document: Buffer was detached]"
NO_TEXT_CONTENT_TEXT = "[No text found in document - may be scanned/image-based PDF]"
EMPTY_REGION_TEXT = "[No text found in this region]"
NO_TEXT_FOUND_TEXT = "[No text found]"


def validate_document_data(document: PDFDocument) -> DocumentValidation:
    """Check that a document has bytes that have not been consumed yet."""
    if document.data is None:
        return DocumentValidation(
            is_valid=False,
            error_message="Document has no data",
            error_code=ExtractionErrorCode.NO_DATA,
        )

    if is_detached(document.data):
        return DocumentValidation(
            is_valid=False,
            error_message="Document data is detached",
            error_code=ExtractionErrorCode.BUFFER_DETACHED,
        )

    return DocumentValidation(is_valid=True)


class BatchExtractionService:
    """Extract every tag from the first page of every document."""

    def __init__(
        self,
        decoder: PageDecoder | None = None,
        diagnostics: ExtractionDiagnostics | None = None,
        page_number: int | None = None,
        preserve_line_breaks: bool | None = None,
    ):
        self.decoder = decoder
        self.diagnostics = diagnostics or NullDiagnostics()
        self.page_number = (
            settings.extraction_page_number if page_number is None else page_number
        )
        self.preserve_line_breaks = (
            settings.preserve_line_breaks if preserve_line_breaks is None else preserve_line_breaks
        )
        self._steps_count = 0

    async def extract_all(
        self,
        documents: list[PDFDocument],
        tags: list[Tag],
    ) -> list[ExtractionResult]:
        """
        Extract all tags from all documents.

        Args:
            documents: Documents to process, in output order
            tags: Tags to extract from each document

        Returns:
            One result per (document, tag) pair, in document then tag order
        """
        results: list[ExtractionResult] = []
        extracted_elements: dict[str, list[TextElement]] = {}
        self._steps_count = 0

        with StepTimer() as timer:
            self._log_step(
                "Extraction process started",
                document_count=len(documents),
                tag_count=len(tags),
            )

            for document in documents:
                try:
                    results.extend(
                        await self.process_document(document, tags, extracted_elements)
                    )
                except Exception as e:
                    logger.error(f"Error processing document {document.name} in batch: {e}")
                    self._log_step(
                        "Batch error for document",
                        document_name=document.name,
                        error=str(e),
                        error_code=ExtractionErrorCode.BATCH_PROCESSING_ERROR,
                    )
                    results.extend(
                        self._placeholders(
                            document,
                            tags,
                            f"[Error processing batch: {e}]",
                            ExtractionErrorCode.BATCH_PROCESSING_ERROR,
                        )
                    )

        self._log_step(
            "Extraction process finished",
            total_time_ms=timer.elapsed_ms,
            result_count=len(results),
        )
        summary = ExtractionSummary(
            start_time=timer.start_time,
            end_time=timer.end_time,
            steps_count=self._steps_count,
            extracted_elements=extracted_elements,
        )
        try:
            self.diagnostics.on_complete(summary)
        except Exception as e:
            logger.warning(f"Diagnostics failed on completion: {e}")
        logger.info(
            f"Extracted {len(results)} results from {len(documents)} documents "
            f"in {timer.elapsed_ms:.0f}ms"
        )
        return results

    async def process_document(
        self,
        document: PDFDocument,
        tags: list[Tag],
        extracted_elements: dict[str, list[TextElement]] | None = None,
    ) -> list[ExtractionResult]:
        """
        Process one document for all tags.

        The page is decoded once and its elements are reused for every tag.
        """
        extracted_elements = extracted_elements if extracted_elements is not None else {}
        self._log_step(
            "Processing document", document_name=document.name, document_id=document.id
        )

        validation = validate_document_data(document)
        if not validation.is_valid:
            logger.warning(f"Skipping document {document.name}: {validation.error_message}")
            self._log_step(
                "Document skipped",
                document_name=document.name,
                reason=validation.error_message,
                error_code=validation.error_code,
            )
            text = (
                NO_DATA_TEXT
                if validation.error_code == ExtractionErrorCode.NO_DATA
                else BUFFER_DETACHED_TEXT
            )
            return self._placeholders(document, tags, text, validation.error_code)

        try:
            try:
                document_data = clone_buffer(document.data)
            except BufferDetachedError as e:
                logger.warning(f"Failed to clone buffer for {document.name}: {e}")
                self._log_step(
                    "Buffer cloning failed",
                    document_name=document.name,
                    error=str(e),
                    error_code=ExtractionErrorCode.BUFFER_DETACHED,
                )
                return self._placeholders(
                    document, tags, BUFFER_DETACHED_TEXT, ExtractionErrorCode.BUFFER_DETACHED
                )

            self._log_step(
                "Extracting text elements from page",
                document_name=document.name,
                page_number=self.page_number,
            )
            try:
                elements = await read_text_elements(
                    document_data, self.page_number, self.decoder
                )
            except PageDecodeError as e:
                # Treated like a page without a text layer
                logger.error(f"Error extracting text elements from {document.name}: {e}")
                self._log_step(
                    "Page decoding failed",
                    document_name=document.name,
                    page_number=self.page_number,
                    error=str(e),
                )
                elements = []
            self._log_step(
                "Text elements extracted",
                document_name=document.name,
                element_count=len(elements),
            )

            document.is_scanned = is_likely_scanned(len(elements))
            if document.is_scanned:
                self._log_step(
                    "No text elements found in document",
                    document_name=document.name,
                    reason="May be scanned/image-based PDF",
                    error_code=ExtractionErrorCode.NO_TEXT_CONTENT,
                )
                return self._placeholders(
                    document, tags, NO_TEXT_CONTENT_TEXT, ExtractionErrorCode.NO_TEXT_CONTENT
                )

            results: list[ExtractionResult] = []
            for tag in tags:
                try:
                    results.append(self.process_tag(document, tag, elements, extracted_elements))
                except Exception as e:
                    logger.warning(f"Error extracting tag {tag.name} from {document.name}: {e}")
                    self._log_step(
                        "Error processing tag",
                        tag_name=tag.name,
                        error=str(e),
                        error_code=ExtractionErrorCode.PROCESSING_ERROR,
                    )
                    results.append(
                        self._placeholder(
                            document,
                            tag,
                            f"[Error processing document: {e}]",
                            ExtractionErrorCode.PROCESSING_ERROR,
                        )
                    )
            return results
        except Exception as e:
            logger.error(f"Error processing document {document.name}: {e}")
            self._log_step(
                "Error processing document",
                document_name=document.name,
                error=str(e),
                error_code=ExtractionErrorCode.PROCESSING_ERROR,
            )
            return self._placeholders(
                document,
                tags,
                f"[Error processing document: {e}]",
                ExtractionErrorCode.PROCESSING_ERROR,
            )

    def process_tag(
        self,
        document: PDFDocument,
        tag: Tag,
        elements: list[TextElement],
        extracted_elements: dict[str, list[TextElement]] | None = None,
    ) -> ExtractionResult:
        """Extract one tag from already-decoded page elements."""
        result_id = build_result_id(document.id, self.page_number, tag.id)
        self._log_step("Processing tag", tag_name=tag.name, tag_region=asdict(tag.region))

        elements_in_region = filter_elements_by_region(elements, tag.region)
        self._log_step(
            "Filtered text elements in region",
            tag_name=tag.name,
            element_count=len(elements_in_region),
        )

        if not elements_in_region:
            if extracted_elements is not None:
                extracted_elements[result_id] = []
            self._log_step(
                "No text elements found in tag region",
                tag_name=tag.name,
                error_code=ExtractionErrorCode.EMPTY_REGION,
            )
            return self._placeholder(
                document, tag, EMPTY_REGION_TEXT, ExtractionErrorCode.EMPTY_REGION, text_elements=[]
            )

        sorted_elements = sort_reading_order(elements_in_region)
        if extracted_elements is not None:
            extracted_elements[result_id] = sorted_elements

        text = normalize_text(
            format_text_elements(sorted_elements),
            preserve_line_breaks=self.preserve_line_breaks,
        )
        self._log_step(
            "Text assembled and cleaned",
            tag_name=tag.name,
            text_length=len(text),
            text_preview=preview_text(text),
        )

        return ExtractionResult(
            id=result_id,
            document_id=document.id,
            file_name=document.name,
            page_number=self.page_number,
            tag_id=tag.id,
            tag_name=tag.name,
            extracted_text=text or NO_TEXT_FOUND_TEXT,
            text_elements=sorted_elements,
        )

    def _placeholder(
        self,
        document: PDFDocument,
        tag: Tag,
        text: str,
        error_code: ExtractionErrorCode,
        text_elements: list[TextElement] | None = None,
    ) -> ExtractionResult:
        return ExtractionResult(
            id=build_result_id(document.id, self.page_number, tag.id),
            document_id=document.id,
            file_name=document.name,
            page_number=self.page_number,
            tag_id=tag.id,
            tag_name=tag.name,
            extracted_text=text,
            text_elements=text_elements,
            error_code=error_code,
        )

    def _placeholders(
        self,
        document: PDFDocument,
        tags: list[Tag],
        text: str,
        error_code: ExtractionErrorCode,
    ) -> list[ExtractionResult]:
        return [self._placeholder(document, tag, text, error_code) for tag in tags]

    def _log_step(self, step: str, **details) -> None:
        self._steps_count += 1
        event = StepEvent(step=step, timestamp=time.perf_counter(), details=details)
        try:
            self.diagnostics.on_step(event)
        except Exception as e:
            logger.warning(f"Diagnostics failed on step '{step}': {e}")


async def extract_text_from_all_documents(
    documents: list[PDFDocument],
    tags: list[Tag],
    decoder: PageDecoder | None = None,
    diagnostics: ExtractionDiagnostics | None = None,
) -> list[ExtractionResult]:
    """Extract all tags from the first page of every document."""
    service = BatchExtractionService(decoder=decoder, diagnostics=diagnostics)
    return await service.extract_all(documents, tags)
