"""Raster to SVG by embedding the original bytes."""

from ..core.image_utils import load_image, raster_to_svg, replace_extension
from ..core.models import ConversionOutput, ConversionPolicy, InputFile, NoOptions, ToolSpec
from .common import MB, media_type_for


async def image_to_svg(file: InputFile, options: NoOptions) -> ConversionOutput:
    """Wrap the image 1:1 in an SVG ``<image>`` element; pixels are not traced."""
    image = load_image(file.data, transpose=False)
    media_type = file.normalized_type
    if not media_type.startswith("image/"):
        media_type = media_type_for(image.format or "PNG")

    svg = raster_to_svg(file.data, media_type, image.width, image.height)
    return ConversionOutput(
        data=svg.encode("utf-8"),
        name=replace_extension(file.name, "svg"),
        media_type="image/svg+xml",
        metadata={"width": image.width, "height": image.height},
    )


IMAGE_TO_SVG = ToolSpec(
    name="image-to-svg",
    description="Wrap raster images in an SVG container",
    policy=ConversionPolicy(
        accepted_type_patterns=("image/*",),
        max_item_count=10,
        max_item_size_bytes=8 * MB,
    ),
    convert=image_to_svg,
)
