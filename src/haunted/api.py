# fastapi web api for syllabus upload and haunted text generation
import asyncio
from fastapi import FastAPI, HTTPException, UploadFile, File
from fastapi.responses import Response
from fastapi.middleware.cors import CORSMiddleware
import logging

from .config import get_settings
from .exceptions import ExtractionError, LLMServiceError, UploadValidationError
from .export import MEDIA_TYPES, render_export, safe_filename
from .haunting_service import HauntingService, is_rate_limit_message
from .models import (
    ExportFormat, ExportRequest, HauntRequest, HauntResponse, PaginateRequest,
    PaginateResponse, TopicRequest, UploadResponse, UploadType, ValidationResult
)
from .pagination import divide_into_pages
from .pdf_parser import PDFParser
from .syllabus_extractor import SyllabusExtractor
from .validation import is_image_upload, validate_image_file, validate_pdf_file

# configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# initialize fastapi application
app = FastAPI(
    title="Haunted Syllabus API",
    description="Turn syllabi and documents into haunted study material using AI",
    version="1.0.0"
)

# add cors middleware to allow cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# initialize processing services
settings = get_settings()
haunting_service = HauntingService()
syllabus_extractor = SyllabusExtractor()
pdf_parser = PDFParser()


def _ensure_valid(result: ValidationResult, filename: str) -> None:
    if not result.is_valid:
        # size failures get their own status
        status = 413 if "limit" in (result.error or "") else 400
        raise UploadValidationError(result.error, filename=filename, status_code=status)


def _haunt_result(response: HauntResponse) -> HauntResponse:
    if response.success:
        return response
    status = 429 if is_rate_limit_message(response.message) else 500
    raise HTTPException(status_code=status, detail=response.message)


# endpoint to upload a syllabus image or a pdf document
@app.post("/upload", response_model=UploadResponse)
async def upload(file: UploadFile = File(...)):
    """Extract units from a syllabus image or text from a PDF"""
    content = await file.read()
    logger.info(f"File uploaded: {file.filename} ({len(content)} bytes)")

    try:
        if is_image_upload(file.filename, file.content_type):
            result = validate_image_file(file.filename, file.content_type, len(content), settings.max_upload_mb)
            _ensure_valid(result, file.filename)

            syllabus = await syllabus_extractor.extract(content)
            return UploadResponse(
                success=True,
                type=UploadType.SYLLABUS,
                message=f"Successfully analyzed syllabus and extracted {len(syllabus.units)} units",
                syllabus_data=syllabus
            )

        result = validate_pdf_file(file.filename, file.content_type, len(content), settings.max_upload_mb)
        _ensure_valid(result, file.filename)

        # pymupdf work is blocking, keep it off the event loop
        document = await asyncio.to_thread(pdf_parser.extract_text, content)
        return UploadResponse(
            success=True,
            type=UploadType.DOCUMENT,
            message=f"Extracted {document.character_count} characters from {document.page_count} pages",
            extracted_text=document.text,
            page_count=document.page_count,
            character_count=document.character_count
        )

    except UploadValidationError as e:
        logger.warning(f"Rejected upload {file.filename}: {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except ExtractionError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except LLMServiceError as e:
        logger.error(f"AI processing error: {e.message}")
        status = 429 if is_rate_limit_message(e.message) else 502
        raise HTTPException(status_code=status, detail=f"AI processing failed: {e.message}")
    except Exception as e:
        logger.error(f"Error uploading file: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Upload failed: {str(e)}")

# endpoint to regenerate text in the haunted style
@app.post("/haunt", response_model=HauntResponse)
async def haunt(request: HauntRequest):
    """Chunk, regenerate, merge and paginate text"""
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="No text provided")
    return _haunt_result(await haunting_service.haunt(request))

# endpoint to generate study material for one syllabus topic
@app.post("/haunt/topic", response_model=HauntResponse)
async def haunt_topic(request: TopicRequest):
    """Generate an overview, in-depth explanation or takeaways for a topic"""
    if not request.topic.strip():
        raise HTTPException(status_code=400, detail="No topic provided")
    return _haunt_result(await haunting_service.haunt_topic(request))

# endpoint to re-paginate text when the page size changes
@app.post("/paginate", response_model=PaginateResponse)
async def paginate(request: PaginateRequest):
    pages = divide_into_pages(request.content, request.characters_per_page)
    return PaginateResponse(pages=pages, total_pages=len(pages))

# endpoint to download the final text as txt, markdown or pdf
@app.post("/export/{fmt}")
async def export(fmt: ExportFormat, request: ExportRequest):
    """Export haunted content as a file download"""
    if not request.content:
        raise HTTPException(status_code=400, detail="No content provided")

    try:
        rendered = render_export(request.content, fmt, title=request.filename)
    except Exception as e:
        logger.error(f"Export error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to generate {fmt.value} export")

    filename = f"{safe_filename(request.filename)}.{fmt.value}"
    return Response(
        content=rendered,
        media_type=MEDIA_TYPES[fmt],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )

@app.get("/api")
async def api_info():
    """API information endpoint"""
    return {
        "message": "Haunted Syllabus API",
        "version": "1.0.0",
        "endpoints": {
            "upload": "/upload",
            "haunt": "/haunt",
            "topic": "/haunt/topic",
            "paginate": "/paginate",
            "export": "/export/{txt|md|pdf}",
            "health": "/health"
        }
    }

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "haunted-syllabus"}
