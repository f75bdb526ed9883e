"""Single-format converters: WebP/PNG/AVIF/HEIC to JPG and JPG to AVIF."""

from typing import Optional

from pydantic import Field

from ..core.image_utils import (
    encode_image,
    load_image,
    replace_extension,
    require_decoder,
    require_encoder,
)
from ..core.models import ConversionOutput, ConversionPolicy, InputFile, ToolSpec
from .common import MB, QualityOptions


class AvifOptions(QualityOptions):
    quality: float = Field(default=0.8, ge=0.0, le=1.0)


def make_raster_converter(
    target_format: str,
    target_extension: str,
    target_media_type: str,
    decode_format: Optional[str] = None,
    label: Optional[str] = None,
):
    """
    Build a convert function that decodes one raster format and re-encodes it.

    ``decode_format`` names a Pillow format whose decoder must be present;
    a missing decoder or encoder is reported as an unsupported codec rather
    than a broken file.
    """

    async def convert(file: InputFile, options: QualityOptions) -> ConversionOutput:
        if decode_format:
            require_decoder(decode_format, label)
        require_encoder(target_format)
        image = load_image(file.data)
        data = encode_image(image, target_format, options.quality)
        return ConversionOutput(
            data=data,
            name=replace_extension(file.name, target_extension),
            media_type=target_media_type,
            metadata={"width": image.width, "height": image.height},
        )

    return convert


WEBP_TO_JPG = ToolSpec(
    name="webp-to-jpg",
    description="Convert WebP images to JPG on a white background",
    policy=ConversionPolicy(
        accepted_type_patterns=("image/webp",),
        max_item_count=20,
        max_item_size_bytes=20 * MB,
    ),
    convert=make_raster_converter("JPEG", "jpg", "image/jpeg", decode_format="WEBP", label="WebP"),
    options_model=QualityOptions,
)

PNG_TO_JPG = ToolSpec(
    name="png-to-jpg",
    description="Convert PNG images to JPG on a white background",
    policy=ConversionPolicy(
        accepted_type_patterns=("image/png",),
        max_item_count=20,
        max_item_size_bytes=20 * MB,
    ),
    convert=make_raster_converter("JPEG", "jpg", "image/jpeg"),
    options_model=QualityOptions,
)

AVIF_TO_JPG = ToolSpec(
    name="avif-to-jpg",
    description="Convert AVIF images to JPG",
    policy=ConversionPolicy(
        accepted_type_patterns=("image/avif",),
        max_item_count=10,
        max_item_size_bytes=20 * MB,
    ),
    convert=make_raster_converter("JPEG", "jpg", "image/jpeg", decode_format="AVIF", label="AVIF"),
    options_model=QualityOptions,
)

JPG_TO_AVIF = ToolSpec(
    name="jpg-to-avif",
    description="Encode JPEG images as AVIF",
    policy=ConversionPolicy(
        accepted_type_patterns=("image/jpeg", "image/jpg"),
        max_item_count=10,
        max_item_size_bytes=20 * MB,
    ),
    convert=make_raster_converter("AVIF", "avif", "image/avif"),
    options_model=AvifOptions,
)

HEIC_TO_JPG = ToolSpec(
    name="heic-to-jpg",
    description="Convert HEIC/HEIF photos to JPG (needs a HEIF decoder plugin)",
    policy=ConversionPolicy(
        accepted_type_patterns=("image/heic", "image/heif", ".heic", ".heif"),
        max_item_count=10,
        max_item_size_bytes=30 * MB,
    ),
    convert=make_raster_converter("JPEG", "jpg", "image/jpeg", decode_format="HEIF", label="HEIC"),
    options_model=QualityOptions,
)
