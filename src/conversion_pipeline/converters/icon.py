"""PNG to ICO: wraps the PNG payload in an ICO container."""

from ..core.exceptions import DecodeFailedError
from ..core.image_utils import build_ico, load_image, replace_extension
from ..core.models import ConversionOutput, ConversionPolicy, InputFile, NoOptions, ToolSpec
from .common import MB


async def png_to_ico(file: InputFile, options: NoOptions) -> ConversionOutput:
    image = load_image(file.data, transpose=False)
    if image.format != "PNG":
        raise DecodeFailedError(f"Expected PNG data, found {image.format or 'unknown'}")
    return ConversionOutput(
        data=build_ico(file.data, image.width, image.height),
        name=replace_extension(file.name, "ico"),
        media_type="image/x-icon",
        metadata={"width": image.width, "height": image.height},
    )


PNG_TO_ICO = ToolSpec(
    name="png-to-ico",
    description="Package PNG images as .ico favicons",
    policy=ConversionPolicy(
        accepted_type_patterns=("image/png",),
        max_item_count=20,
        max_item_size_bytes=5 * MB,
    ),
    convert=png_to_ico,
)
