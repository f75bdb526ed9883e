"""Image resizer."""

from typing import Literal

from pydantic import BaseModel, Field
from PIL import Image

from ..core.image_utils import (
    FORMAT_EXTENSIONS,
    calculate_dimensions,
    encode_image,
    encoder_available,
    load_image,
    split_name,
    with_suffix,
)
from ..core.models import ConversionOutput, ConversionPolicy, InputFile, ToolSpec
from .common import MB, media_type_for, source_format

ResizeMode = Literal["exact", "maintain-aspect", "fit-to-dimensions"]


class ResizeOptions(BaseModel):
    width: int = Field(default=800, gt=0)
    height: int = Field(default=600, gt=0)
    mode: ResizeMode = "maintain-aspect"
    quality: float = Field(default=0.9, ge=0.0, le=1.0)


async def resize_image(file: InputFile, options: ResizeOptions) -> ConversionOutput:
    """Resize to the requested box and re-encode in the source format."""
    image = load_image(file.data)
    fmt = source_format(file, image.format)
    _, ext = split_name(file.name)
    if not encoder_available(fmt):
        fmt, ext = "PNG", "png"

    width, height = calculate_dimensions(
        image.width, image.height, options.width, options.height, options.mode
    )
    resized = image.resize((width, height), Image.Resampling.LANCZOS)
    data = encode_image(resized, fmt, options.quality)

    ext = ext or FORMAT_EXTENSIONS.get(fmt, "png")
    return ConversionOutput(
        data=data,
        name=with_suffix(file.name, f"_{width}x{height}", ext),
        media_type=media_type_for(fmt),
        metadata={
            "original_width": image.width,
            "original_height": image.height,
            "width": width,
            "height": height,
        },
    )


IMAGE_RESIZER = ToolSpec(
    name="image-resizer",
    description="Resize images exactly, keeping aspect ratio, or to fit a box",
    policy=ConversionPolicy(
        accepted_type_patterns=("image/*",),
        max_item_count=10,
        max_item_size_bytes=20 * MB,
    ),
    convert=resize_image,
    options_model=ResizeOptions,
)
