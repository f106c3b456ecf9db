"""
Tests for upload validation
"""
import pytest

from src.haunted.validation import (
    is_image_upload, validate_file_size, validate_image_file, validate_pdf_extension,
    validate_pdf_file, validate_pdf_type
)

MB = 1024 * 1024


class TestPdfValidation:

    @pytest.mark.parametrize("name", ["notes.pdf", "NOTES.PDF", "a.b.Pdf"])
    def test_accepts_pdf_extension(self, name):
        assert validate_pdf_extension(name).is_valid

    @pytest.mark.parametrize("name", ["notes.txt", "pdf", "", None, "notes.pdf.exe"])
    def test_rejects_other_extensions(self, name):
        result = validate_pdf_extension(name)
        assert not result.is_valid
        assert result.error == "Please upload a valid PDF file."

    @pytest.mark.parametrize("content_type", ["application/pdf", "", None])
    def test_accepts_pdf_or_missing_mime(self, content_type):
        assert validate_pdf_type(content_type).is_valid

    def test_rejects_other_mime(self):
        assert not validate_pdf_type("text/plain").is_valid

    def test_size_limit(self):
        assert validate_file_size(10 * MB, 10).is_valid
        result = validate_file_size(10 * MB + 1, 10)
        assert not result.is_valid
        assert "10 MB limit" in result.error

    def test_first_failure_wins(self):
        result = validate_pdf_file("notes.txt", "text/plain", 50 * MB, 10)
        assert result.error == "Please upload a valid PDF file."
        assert validate_pdf_file("notes.pdf", "application/pdf", MB, 10).is_valid


class TestImageValidation:

    def test_detects_images_by_mime_or_name(self):
        assert is_image_upload("scan.bin", "image/png")
        assert is_image_upload("syllabus.JPG", None)
        assert not is_image_upload("notes.pdf", "application/pdf")
        assert not is_image_upload(None, None)

    def test_rejects_non_images(self):
        result = validate_image_file("notes.pdf", "application/pdf", 100, 10)
        assert result.error == "Only image files are supported (JPG, PNG, etc.)"

    def test_rejects_empty_and_oversized_images(self):
        assert not validate_image_file("a.png", "image/png", 0, 10).is_valid
        assert not validate_image_file("a.png", "image/png", 11 * MB, 10).is_valid
        assert validate_image_file("a.png", "image/png", MB, 10).is_valid
