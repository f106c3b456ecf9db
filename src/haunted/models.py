# pydantic models for data validation and structure
from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum

# kind of file accepted by the upload endpoint
class UploadType(str, Enum):
    SYLLABUS = "syllabus"
    DOCUMENT = "document"

# export formats for the final haunted text
class ExportFormat(str, Enum):
    TXT = "txt"
    MD = "md"
    PDF = "pdf"

# kinds of study material generated for a syllabus topic
class StudyMode(str, Enum):
    OVERVIEW = "overview"
    INDEPTH = "indepth"
    TAKEAWAYS = "takeaways"

# model for a bounded piece of text sent to the llm
class TextChunk(BaseModel):
    index: int = Field(ge=0)
    content: str
    character_count: int = Field(ge=0)
    is_processed: bool = False

# backoff settings for a single retried call
class RetryOptions(BaseModel):
    max_retries: int = Field(default=3, ge=0)
    base_delay_ms: int = Field(default=1000, gt=0)
    max_delay_ms: Optional[int] = Field(default=10000, gt=0)  # None means no cap

# result of an upload validation check
class ValidationResult(BaseModel):
    is_valid: bool
    error: Optional[str] = None

# model for one unit of a syllabus
class SyllabusUnit(BaseModel):
    id: str
    title: str
    topics: List[str] = []

# model for everything extracted from a syllabus image
class SyllabusData(BaseModel):
    units: List[SyllabusUnit] = []

# response model for uploads
class UploadResponse(BaseModel):
    success: bool
    type: UploadType
    message: str
    syllabus_data: Optional[SyllabusData] = None
    extracted_text: Optional[str] = None
    page_count: int = 0
    character_count: int = 0

# request model for regenerating text in the haunted style
class HauntRequest(BaseModel):
    text: str
    instructions: Optional[str] = None  # what to do with the text, prepended to every chunk prompt
    max_chunk_size: int = Field(default=30000, gt=0)
    overlap_size: int = Field(default=200, ge=0)
    characters_per_page: int = Field(default=2000, gt=0)

# request model for generating study material on one syllabus topic
class TopicRequest(BaseModel):
    unit_title: str
    topic: str
    mode: StudyMode = StudyMode.OVERVIEW
    characters_per_page: int = Field(default=2000, gt=0)

# response model for haunted text generation
class HauntResponse(BaseModel):
    success: bool
    message: str
    haunted_text: str = ""
    processed_chunks: int = 0
    pages: List[str] = []
    processing_time: float = 0.0

# request model for re-paginating text in the viewer
class PaginateRequest(BaseModel):
    content: str
    characters_per_page: int = Field(default=2000, gt=0)

# response model for pagination
class PaginateResponse(BaseModel):
    pages: List[str]
    total_pages: int

# request model for exporting the final text
class ExportRequest(BaseModel):
    content: str
    filename: str = "haunted"
