"""Slug generation and validation for organizations, jobs and classes."""
import re
import time

from samit.errors import ValidationError

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


def slugify(text: str) -> str:
    """Lowercase, runs of other characters become one dash, no edge dashes."""
    return re.sub(r"[^a-z0-9]+", "-", (text or "").lower()).strip("-")


def unique_slug(text: str) -> str:
    """Slug with a millisecond timestamp suffix, as used for new jobs."""
    base = slugify(text) or "item"
    return f"{base}-{int(time.time() * 1000)}"


def validate_slug(slug: str) -> str:
    if not slug or not SLUG_PATTERN.match(slug):
        raise ValidationError("Slug may only contain lowercase letters, digits and dashes")
    return slug
