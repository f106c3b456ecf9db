# validation utilities for uploaded documents and syllabus images
from typing import Optional

from .models import ValidationResult

IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.gif', '.webp', '.bmp')


def validate_file_size(size_bytes: int, max_size_mb: int) -> ValidationResult:
    """Check file size against the upload limit"""
    if size_bytes > max_size_mb * 1024 * 1024:
        return ValidationResult(
            is_valid=False,
            error=f"File exceeds {max_size_mb} MB limit. Please upload a smaller file."
        )
    return ValidationResult(is_valid=True)


def validate_pdf_extension(filename: Optional[str]) -> ValidationResult:
    """Check the file name ends with .pdf (case-insensitive)"""
    if not filename or not filename.lower().endswith('.pdf'):
        return ValidationResult(is_valid=False, error="Please upload a valid PDF file.")
    return ValidationResult(is_valid=True)


def validate_pdf_type(content_type: Optional[str]) -> ValidationResult:
    # browsers sometimes send no mime type at all, that is allowed
    if content_type and content_type != 'application/pdf':
        return ValidationResult(is_valid=False, error="Please upload a valid PDF file.")
    return ValidationResult(is_valid=True)


def validate_pdf_file(filename: Optional[str], content_type: Optional[str], size_bytes: int,
                      max_size_mb: int) -> ValidationResult:
    """Run all pdf checks and return the first failure"""
    for result in (
        validate_pdf_extension(filename),
        validate_pdf_type(content_type),
        validate_file_size(size_bytes, max_size_mb),
    ):
        if not result.is_valid:
            return result
    return ValidationResult(is_valid=True)


def is_image_upload(filename: Optional[str], content_type: Optional[str]) -> bool:
    if content_type:
        return content_type.startswith('image/')
    return bool(filename) and filename.lower().endswith(IMAGE_EXTENSIONS)


def validate_image_file(filename: Optional[str], content_type: Optional[str], size_bytes: int,
                        max_size_mb: int) -> ValidationResult:
    if not is_image_upload(filename, content_type):
        return ValidationResult(is_valid=False, error="Only image files are supported (JPG, PNG, etc.)")
    if size_bytes == 0:
        return ValidationResult(is_valid=False, error="Uploaded image is empty.")
    return validate_file_size(size_bytes, max_size_mb)
