import logging
import uuid
from dataclasses import asdict

from fastapi import APIRouter, File, Form, HTTPException, Request, Response, UploadFile
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from tag_extractor.config import settings
from tag_extractor.middleware import rate_limit_extract
from tag_extractor.services.pdf import (
    BatchExtractionService,
    ExtractionDiagnostics,
    ExtractionResult,
    NullDiagnostics,
    PageBuffer,
    PDFDocument,
    PostHogDiagnostics,
    RecordingDiagnostics,
    Region,
    Tag,
    TextElement,
    TextProcessingOptions,
    extract_text_elements_from_page,
    extract_text_from_region,
    is_probably_scanned_pdf,
)
from tag_extractor.utils import parse_json_field

logger = logging.getLogger(__name__)

router = APIRouter()


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegionModel(BaseModel):
    x: float
    y: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)


class TagModel(BaseModel):
    id: str
    name: str
    color: str = ""
    region: RegionModel


class PositionResponse(BaseModel):
    x: float
    y: float


class TextElementResponse(CamelModel):
    text: str
    position: PositionResponse
    width: float
    height: float
    font_size: int
    font_name: str


class ExtractionResultResponse(CamelModel):
    id: str
    document_id: str
    file_name: str
    page_number: int
    tag_id: str
    tag_name: str
    extracted_text: str
    text_elements: list[TextElementResponse] | None = None
    error_code: str | None = None


class StepEventResponse(BaseModel):
    step: str
    timestamp: float
    details: dict


class DiagnosticsResponse(CamelModel):
    steps: list[StepEventResponse]
    elapsed_ms: float | None = None


class BatchExtractionResponse(BaseModel):
    results: list[ExtractionResultResponse]
    diagnostics: DiagnosticsResponse | None = None


class RegionTextResponse(BaseModel):
    text: str


class TextElementsResponse(BaseModel):
    elements: list[TextElementResponse]


class ScannedResponse(BaseModel):
    is_scanned: bool


_tags_adapter = TypeAdapter(list[TagModel])


def _parse_tags(raw: str) -> list[Tag]:
    try:
        tag_models = _tags_adapter.validate_python(parse_json_field(raw, "tags"))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid tags: {e.error_count()} errors") from e
    return [
        Tag(id=t.id, name=t.name, color=t.color, region=Region(**t.region.model_dump()))
        for t in tag_models
    ]


def _parse_region(raw: str) -> Region:
    try:
        region_model = RegionModel.model_validate(parse_json_field(raw, "region"))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail="Invalid region") from e
    return Region(**region_model.model_dump())


async def _read_buffer(upload: UploadFile) -> PageBuffer:
    content = await upload.read()
    if not content:
        raise HTTPException(status_code=400, detail=f"Empty file: {upload.filename}")
    return PageBuffer(content)


def _element_response(element: TextElement) -> TextElementResponse:
    return TextElementResponse(
        text=element.text,
        position=PositionResponse(x=element.position.x, y=element.position.y),
        width=element.width,
        height=element.height,
        font_size=element.font_size,
        font_name=element.font_name,
    )


def _result_response(result: ExtractionResult) -> ExtractionResultResponse:
    return ExtractionResultResponse(
        id=result.id,
        document_id=result.document_id,
        file_name=result.file_name,
        page_number=result.page_number,
        tag_id=result.tag_id,
        tag_name=result.tag_name,
        extracted_text=result.extracted_text,
        text_elements=(
            [_element_response(e) for e in result.text_elements]
            if result.text_elements is not None
            else None
        ),
        error_code=result.error_code,
    )


def _diagnostics_for_request(include_diagnostics: bool) -> ExtractionDiagnostics:
    if include_diagnostics:
        return RecordingDiagnostics()
    if settings.diagnostics_enabled:
        return PostHogDiagnostics()
    return NullDiagnostics()


@router.post("", response_model=BatchExtractionResponse)
@rate_limit_extract()
async def extract_batch(
    request: Request,
    response: Response,
    files: list[UploadFile] = File(...),
    tags: str = Form(...),
    include_diagnostics: bool = Form(False),
):
    """Extract every tag from the first page of every uploaded PDF.

    Empty uploads are kept in the batch and come back as NO_DATA results.
    """
    if len(files) > settings.max_documents_per_batch:
        raise HTTPException(
            status_code=400,
            detail=f"Too many documents (max: {settings.max_documents_per_batch})",
        )

    parsed_tags = _parse_tags(tags)

    documents: list[PDFDocument] = []
    for upload in files:
        content = await upload.read()
        documents.append(
            PDFDocument(
                id=str(uuid.uuid4()),
                name=upload.filename or "document.pdf",
                data=PageBuffer(content) if content else None,
            )
        )

    logger.info(f"Batch extraction: {len(documents)} documents, {len(parsed_tags)} tags")
    diagnostics = _diagnostics_for_request(include_diagnostics)
    service = BatchExtractionService(diagnostics=diagnostics)
    results = await service.extract_all(documents, parsed_tags)

    diagnostics_response = None
    if isinstance(diagnostics, RecordingDiagnostics):
        diagnostics_response = DiagnosticsResponse(
            steps=[StepEventResponse(**asdict(event)) for event in diagnostics.steps],
            elapsed_ms=diagnostics.summary.elapsed_ms if diagnostics.summary else None,
        )

    return BatchExtractionResponse(
        results=[_result_response(r) for r in results],
        diagnostics=diagnostics_response,
    )


@router.post("/region", response_model=RegionTextResponse)
async def extract_region(
    file: UploadFile = File(...),
    region: str = Form(...),
    page_number: int = Form(1, ge=1),
    preserve_formatting: bool = Form(True),
    cleanup_text: bool = Form(True),
    ocr_fallback: bool = Form(True),
    preserve_line_breaks: bool = Form(False),
):
    """Extract the text inside one region of one page."""
    parsed_region = _parse_region(region)
    buffer = await _read_buffer(file)
    options = TextProcessingOptions(
        preserve_formatting=preserve_formatting,
        cleanup_text=cleanup_text,
        ocr_fallback=ocr_fallback,
        preserve_line_breaks=preserve_line_breaks,
    )
    text = await extract_text_from_region(buffer, page_number, parsed_region, options)
    return RegionTextResponse(text=text)


@router.post("/elements", response_model=TextElementsResponse)
async def extract_elements(
    file: UploadFile = File(...),
    page_number: int = Form(1, ge=1),
):
    """List the positioned text elements of a page."""
    buffer = await _read_buffer(file)
    elements = await extract_text_elements_from_page(buffer, page_number)
    return TextElementsResponse(elements=[_element_response(e) for e in elements])


@router.post("/scanned", response_model=ScannedResponse)
async def check_scanned(file: UploadFile = File(...)):
    """Check whether a document's first page looks image-only."""
    buffer = await _read_buffer(file)
    return ScannedResponse(is_scanned=await is_probably_scanned_pdf(buffer))
