# pdf text extraction using pymupdf
import fitz  # PyMuPDF
from typing import Dict, Any, List, Union
from dataclasses import dataclass
import logging

from .exceptions import ExtractionError
from .text_sanitization import sanitize_extracted_text

logger = logging.getLogger(__name__)

# data structure for extracted pdf content
@dataclass
class ExtractedDocument:
    text: str
    page_count: int
    metadata: Dict[str, Any]

    @property
    def character_count(self) -> int:
        return len(self.text)

# class for pulling plain text out of pdf files
class PDFParser:
    # extract sanitized text from a pdf path or raw pdf bytes
    def extract_text(self, source: Union[str, bytes]) -> ExtractedDocument:
        """Extract text from every page, keeping a blank line between pages"""
        try:
            if isinstance(source, bytes):
                doc = fitz.open(stream=source, filetype="pdf")
            else:
                doc = fitz.open(source)
        except Exception as e:
            logger.error(f"Error opening PDF: {str(e)}")
            raise ExtractionError(f"Could not open PDF: {e}")

        try:
            page_texts: List[str] = [page.get_text() for page in doc]
            page_count = doc.page_count
            metadata = self._metadata(doc)
        finally:
            doc.close()

        text = sanitize_extracted_text("\n\n".join(page_texts))
        if not text:
            raise ExtractionError("No text found in PDF. Scanned documents need to be uploaded as images.")

        logger.info(f"Extracted {len(text)} characters from {page_count} pages")
        return ExtractedDocument(text=text, page_count=page_count, metadata=metadata)

    # pull the standard info dictionary out of an open document
    def _metadata(self, doc) -> Dict[str, Any]:
        metadata = doc.metadata or {}
        return {
            'title': metadata.get('title', ''),
            'author': metadata.get('author', ''),
            'subject': metadata.get('subject', ''),
            'creator': metadata.get('creator', ''),
            'producer': metadata.get('producer', ''),
            'creation_date': metadata.get('creationDate', ''),
            'modification_date': metadata.get('modDate', ''),
            'page_count': doc.page_count
        }
