"""
Tests for upload validation and object storage paths.
"""
import pytest

from samit.errors import ValidationError
from samit.services.storage import (
    RESUMES_BUCKET,
    ObjectStorage,
    StorageError,
    build_object_path,
    safe_filename,
)
from samit.services.uploads import LEGAL_DOCUMENT_RULES, RESUME_RULES, validate_upload

MB = 1024 * 1024


@pytest.mark.parametrize("filename,content_type", [
    ("cv.pdf", "application/pdf"),
    ("CV.PDF", "application/pdf"),
    ("cv.doc", "application/msword"),
    ("cv.docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
])
def test_resume_accepts_pdf_and_word(filename, content_type):
    validate_upload(filename, content_type, 100 * 1024, RESUME_RULES)


@pytest.mark.parametrize("filename,content_type", [
    ("cv.png", "image/png"),
    ("cv.pdf", "image/png"),
    ("cv.exe", "application/pdf"),
    ("cv", "application/pdf"),
])
def test_resume_rejects_other_types(filename, content_type):
    with pytest.raises(ValidationError, match="Invalid file type"):
        validate_upload(filename, content_type, 100 * 1024, RESUME_RULES)


def test_size_limits():
    validate_upload("cv.pdf", "application/pdf", 5 * MB, RESUME_RULES)
    with pytest.raises(ValidationError, match="5MB"):
        validate_upload("cv.pdf", "application/pdf", 5 * MB + 1, RESUME_RULES)
    
    validate_upload("siup.jpg", "image/jpeg", 10 * MB, LEGAL_DOCUMENT_RULES)
    with pytest.raises(ValidationError, match="10MB"):
        validate_upload("siup.jpg", "image/jpeg", 10 * MB + 1, LEGAL_DOCUMENT_RULES)


def test_empty_file_is_rejected():
    with pytest.raises(ValidationError, match="empty"):
        validate_upload("cv.pdf", "application/pdf", 0, RESUME_RULES)


def test_object_paths_are_safe():
    assert safe_filename("my cv (final).pdf") == "my_cv__final_.pdf"
    
    path = build_object_path("owner-1", "my cv.pdf", prefix="npwp_")
    owner, name = path.split("/")
    assert owner == "owner-1"
    assert name.startswith("npwp_")
    assert name.endswith("_my_cv.pdf")


@pytest.mark.asyncio
async def test_storage_refuses_escaping_paths(tmp_path):
    storage = ObjectStorage(tmp_path, "http://test/")
    
    with pytest.raises(StorageError):
        await storage.upload(RESUMES_BUCKET, "../outside.pdf", b"x")
    with pytest.raises(StorageError):
        await storage.upload("unknown-bucket", "owner/cv.pdf", b"x")
    
    url = await storage.upload(RESUMES_BUCKET, "owner/cv.pdf", b"x")
    assert url == "http://test/storage/resumes/owner/cv.pdf"
    await storage.delete(RESUMES_BUCKET, "owner/cv.pdf")
    assert not (tmp_path / RESUMES_BUCKET / "owner" / "cv.pdf").exists()
