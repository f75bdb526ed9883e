"""SVG to WebP through cairosvg."""

from pydantic import Field

from ..core.exceptions import DecodeFailedError, EncodeUnsupportedError
from ..core.image_utils import encode_image, load_image, replace_extension, require_encoder
from ..core.models import ConversionOutput, ConversionPolicy, InputFile, ToolSpec
from .common import MB, QualityOptions


class WebpOptions(QualityOptions):
    quality: float = Field(default=0.8, ge=0.0, le=1.0)


def render_svg(data: bytes) -> bytes:
    """
    Rasterise SVG markup to PNG bytes.

    cairosvg binds the native cairo library at import time, so it is loaded
    here and a missing library surfaces as an unsupported codec.

    Raises:
        EncodeUnsupportedError: If cairo is not available
        DecodeFailedError: If the markup cannot be parsed or rendered
    """
    try:
        import cairosvg
    except (ImportError, OSError) as exc:
        raise EncodeUnsupportedError("SVG rendering not supported in this environment") from exc

    try:
        return cairosvg.svg2png(bytestring=data)
    except (ValueError, SyntaxError) as exc:
        raise DecodeFailedError(f"Invalid SVG: {exc}") from exc


async def svg_to_webp(file: InputFile, options: WebpOptions) -> ConversionOutput:
    require_encoder("WEBP")
    image = load_image(render_svg(file.data), transpose=False)
    data = encode_image(image, "WEBP", options.quality)
    return ConversionOutput(
        data=data,
        name=replace_extension(file.name, "webp"),
        media_type="image/webp",
        metadata={"width": image.width, "height": image.height},
    )


SVG_TO_WEBP = ToolSpec(
    name="svg-to-webp",
    description="Render SVG drawings to WebP",
    policy=ConversionPolicy(
        accepted_type_patterns=("image/svg+xml", ".svg"),
        max_item_count=20,
        max_item_size_bytes=5 * MB,
    ),
    convert=svg_to_webp,
    options_model=WebpOptions,
)
