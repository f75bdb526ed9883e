"""Image compressor with optional palette reduction."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from ..core.image_utils import (
    FORMAT_EXTENSIONS,
    encode_image,
    load_image,
    quantize_colors,
    with_suffix,
)
from ..core.models import ConversionOutput, ConversionPolicy, InputFile, ToolSpec
from .common import MB, media_type_for

TargetFormat = Literal["auto", "jpeg", "webp", "png"]


class CompressOptions(BaseModel):
    quality: float = Field(default=0.8, ge=0.0, le=1.0)
    target_format: TargetFormat = "auto"
    colors: Optional[int] = Field(default=None, ge=2, le=256)


def resolve_target(file: InputFile, target: str) -> str:
    """Pillow format to write; "auto" keeps PNG and WebP, everything else is JPEG."""
    if target != "auto":
        return target.upper()
    declared = file.normalized_type
    if "png" in declared:
        return "PNG"
    if "webp" in declared:
        return "WEBP"
    return "JPEG"


async def compress_image(file: InputFile, options: CompressOptions) -> ConversionOutput:
    """Re-encode at the given quality, optionally reducing to ``colors`` colours first."""
    fmt = resolve_target(file, options.target_format)
    image = load_image(file.data)
    if options.colors:
        image = quantize_colors(image, options.colors)

    data = encode_image(image, fmt, options.quality)
    original_size = file.size
    return ConversionOutput(
        data=data,
        name=with_suffix(file.name, "-compressed", FORMAT_EXTENSIONS[fmt]),
        media_type=media_type_for(fmt),
        metadata={
            "width": image.width,
            "height": image.height,
            "original_size": original_size,
            "compressed_size": len(data),
            "savings_percent": round((1 - len(data) / original_size) * 100, 1)
            if original_size
            else 0.0,
        },
    )


IMAGE_COMPRESSOR = ToolSpec(
    name="image-compressor",
    description="Compress images to JPEG, WebP or PNG at a chosen quality",
    policy=ConversionPolicy(
        accepted_type_patterns=("image/*",),
        max_item_count=20,
        max_item_size_bytes=25 * MB,
    ),
    convert=compress_image,
    options_model=CompressOptions,
)
