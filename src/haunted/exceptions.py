"""
Error types raised by the haunted syllabus services
"""

from typing import Any, Dict, Optional


class HauntedError(Exception):
    """Base class for all application errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(HauntedError):
    """Invalid or missing configuration"""


class LLMServiceError(HauntedError):
    """The llm server failed or returned something unusable"""

    def __init__(self, message: str, model: Optional[str] = None, status_code: Optional[int] = None):
        details = {}
        if model:
            details["model"] = model
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)
        self.status_code = status_code


class UploadValidationError(HauntedError):
    """Uploaded file was rejected before processing"""

    def __init__(self, message: str, filename: Optional[str] = None, status_code: int = 400):
        super().__init__(message, {"filename": filename} if filename else {})
        self.status_code = status_code


class ExtractionError(HauntedError):
    """Text or syllabus units could not be extracted from an upload"""
