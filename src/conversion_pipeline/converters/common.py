"""Helpers shared by the converter modules."""

from typing import Optional

from pydantic import BaseModel, Field

from ..core.image_utils import FORMAT_MEDIA_TYPES, MEDIA_TYPE_FORMATS
from ..core.models import InputFile

MB = 1024 * 1024


class QualityOptions(BaseModel):
    """Lossy encoder quality on a 0-1 scale."""

    quality: float = Field(default=0.92, ge=0.0, le=1.0)


# Pillow formats that are containers around a format it can re-encode
FORMAT_ALIASES = {"MPO": "JPEG"}


def source_format(file: InputFile, detected: Optional[str]) -> str:
    """Pillow format of an input: what the decoder saw, else the declared type."""
    if detected:
        return FORMAT_ALIASES.get(detected, detected)
    return MEDIA_TYPE_FORMATS.get(file.normalized_type, "PNG")


def media_type_for(fmt: str) -> str:
    return FORMAT_MEDIA_TYPES.get(fmt, f"image/{fmt.lower()}")
