"""Unit tests for upload validation"""

from datetime import datetime

import pytest

from document_service.core.errors import DocumentValidationError
from document_service.core.validation import (
    get_file_extension,
    is_safe_filename,
    validate_mime_type,
    validate_upload,
)
from document_service.models import DocumentCategorie

MB = 1024 * 1024


def make_categorie(extensions="pdf,jpg", max_mb=10):
    return DocumentCategorie(
        id=1,
        naam="bewijs",
        toegestane_extensies=extensions,
        max_bestandsgrootte_mb=max_mb,
        aangemaakt_op=datetime(2026, 1, 1),
    )


@pytest.mark.unit
class TestHelpers:
    @pytest.mark.parametrize(
        "filename, extension",
        [("scan.PDF", "pdf"), ("archive.tar.gz", "gz"), ("README", ""), ("trailing.", "")],
    )
    def test_get_file_extension(self, filename, extension):
        assert get_file_extension(filename) == extension

    def test_mime_type_must_match_known_extension(self):
        assert validate_mime_type("application/pdf", "pdf")
        assert validate_mime_type("IMAGE/JPEG", "jpg")
        assert not validate_mime_type("image/png", "pdf")

    def test_unknown_extension_passes_mime_check(self):
        assert validate_mime_type("application/octet-stream", "heic")

    @pytest.mark.parametrize(
        "filename", ["", "a" * 256, "../etc/passwd", "a<b.pdf", 'quote".pdf', "tab\t.pdf", "pipe|.pdf"]
    )
    def test_unsafe_filenames(self, filename):
        assert not is_safe_filename(filename)

    def test_safe_filename(self):
        assert is_safe_filename("Verklaring ouderschap (2026).pdf")


@pytest.mark.unit
class TestValidateUpload:
    def test_accepts_valid_file(self):
        assert validate_upload(make_categorie(), "Scan.PDF", 2 * MB, "application/pdf") == "pdf"

    @pytest.mark.parametrize(
        "filename, size, mime, message",
        [
            ("a/b.pdf", 1, "application/pdf", "Invalid filename"),
            ("noext", 1, "application/pdf", "File must have an extension"),
            ("a.docx", 1, "application/msword", "File type not allowed for this category. Allowed: pdf,jpg"),
            ("a.pdf", 10 * MB + 1, "application/pdf", "File too large. Maximum size: 10 MB"),
            ("a.pdf", 1, "image/png", "File MIME type does not match extension"),
        ],
    )
    def test_rejections_carry_actionable_messages(self, filename, size, mime, message):
        with pytest.raises(DocumentValidationError) as exc_info:
            validate_upload(make_categorie(), filename, size, mime)

        assert str(exc_info.value) == message

    def test_extension_allow_list_uses_category_normalization(self):
        categorie = make_categorie(extensions=" .pdf , XLSX ")
        xlsx = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

        assert validate_upload(categorie, "a.xlsx", 1, xlsx) == "xlsx"
        with pytest.raises(DocumentValidationError):
            validate_upload(categorie, "a.exe", 1, "application/octet-stream")

    def test_size_limit_is_inclusive(self):
        assert validate_upload(make_categorie(), "a.pdf", 10 * MB, "application/pdf") == "pdf"
        with pytest.raises(DocumentValidationError):
            validate_upload(make_categorie(), "a.pdf", 10 * MB + 1, "application/pdf")

    def test_category_without_extensions_accepts_nothing(self):
        with pytest.raises(DocumentValidationError):
            validate_upload(make_categorie(extensions=None), "a.pdf", 1, "application/pdf")

    def test_validation_error_is_value_error(self):
        assert issubclass(DocumentValidationError, ValueError)
