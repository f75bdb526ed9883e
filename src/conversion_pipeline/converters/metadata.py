"""Image metadata viewer: EXIF grouped into sections, exported as JSON."""

import json
from typing import Any, Dict

from pydantic import BaseModel

from ..core.image_utils import extract_exif_data, load_image, split_name
from ..core.models import ConversionOutput, ConversionPolicy, InputFile, ToolSpec
from .common import MB

SECTIONS = {
    "camera": ("Make", "Model", "LensMake", "LensModel", "Software"),
    "settings": (
        "ISOSpeedRatings",
        "ExposureTime",
        "FNumber",
        "FocalLength",
        "Flash",
        "WhiteBalance",
        "ExposureMode",
        "MeteringMode",
    ),
    "dates": ("DateTimeOriginal", "DateTimeDigitized", "DateTime"),
    "location": (
        "GPSLatitudeRef",
        "GPSLatitude",
        "GPSLongitudeRef",
        "GPSLongitude",
        "GPSAltitude",
        "GPSDateStamp",
        "GPSSpeed",
        "GPSImgDirection",
    ),
}


class MetadataOptions(BaseModel):
    include_gps: bool = False


def organize_metadata(exif: Dict[str, Any], file: InputFile) -> Dict[str, Dict[str, Any]]:
    """Split a flat tag mapping into display sections; leftovers go to "other"."""
    remaining = dict(exif)
    sections: Dict[str, Dict[str, Any]] = {
        "basic": {
            "file_name": file.name,
            "file_size": file.size,
            "media_type": file.normalized_type or "unknown",
            "width": remaining.pop("width"),
            "height": remaining.pop("height"),
            "format": remaining.pop("format"),
            "mode": remaining.pop("mode"),
        }
    }
    for section, keys in SECTIONS.items():
        found = {key: remaining.pop(key) for key in keys if key in remaining}
        if found:
            sections[section] = found
    if remaining:
        sections["other"] = remaining
    return sections


async def extract_metadata(file: InputFile, options: MetadataOptions) -> ConversionOutput:
    image = load_image(file.data, transpose=False)
    exif = extract_exif_data(image, include_gps=options.include_gps)
    sections = organize_metadata(exif, file)
    stem, _ = split_name(file.name)
    return ConversionOutput(
        data=json.dumps(sections, indent=2, ensure_ascii=False, default=str).encode("utf-8"),
        name=f"{stem}.metadata.json",
        media_type="application/json",
        metadata={"tag_count": len(exif) - 4, "sections": list(sections)},
    )


METADATA_VIEWER = ToolSpec(
    name="metadata-viewer",
    description="Export EXIF metadata of images as JSON (GPS stripped by default)",
    policy=ConversionPolicy(
        accepted_type_patterns=("image/*",),
        max_item_count=10,
        max_item_size_bytes=20 * MB,
    ),
    convert=extract_metadata,
    options_model=MetadataOptions,
)
