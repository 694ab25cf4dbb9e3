"""Validation of uploaded files before anything is stored."""
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet

from fastapi import UploadFile

from samit.errors import ValidationError


@dataclass(frozen=True)
class UploadRules:
    content_types: FrozenSet[str]
    extensions: FrozenSet[str]
    max_size_mb: int
    description: str

    @property
    def max_size_bytes(self) -> int:
        return self.max_size_mb * 1024 * 1024


RESUME_RULES = UploadRules(
    content_types=frozenset({
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }),
    extensions=frozenset({".pdf", ".doc", ".docx"}),
    max_size_mb=5,
    description="PDF or Word",
)

LEGAL_DOCUMENT_RULES = UploadRules(
    content_types=frozenset({"application/pdf", "image/jpeg", "image/jpg", "image/png"}),
    extensions=frozenset({".pdf", ".jpg", ".jpeg", ".png"}),
    max_size_mb=10,
    description="PDF, JPG or PNG",
)


def validate_upload(filename: str, content_type: str, size: int, rules: UploadRules) -> None:
    """
    Check type and size of an upload.
    
    Raises:
        ValidationError: wrong type, empty file or too large
    """
    ext = Path(filename or "").suffix.lower()
    if ext not in rules.extensions or (content_type or "").lower() not in rules.content_types:
        raise ValidationError(f"Invalid file type. Only {rules.description} files are allowed")
    if size <= 0:
        raise ValidationError("Uploaded file is empty")
    if size > rules.max_size_bytes:
        raise ValidationError(f"File too large. Maximum size: {rules.max_size_mb}MB")


async def read_upload(file: UploadFile, rules: UploadRules) -> bytes:
    """Read an UploadFile and validate it, returning its bytes."""
    # Reject on declared size first so oversized bodies are not read
    if file.size is not None:
        validate_upload(file.filename, file.content_type, file.size, rules)
    data = await file.read()
    validate_upload(file.filename, file.content_type, len(data), rules)
    return data
