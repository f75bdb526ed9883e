"""QR code generation from text files."""

import io
from typing import Literal

import segno
from PIL import Image
from pydantic import BaseModel, Field

from ..core.exceptions import ConversionError, DecodeFailedError
from ..core.image_utils import encode_image, split_name
from ..core.models import ConversionOutput, ConversionPolicy, InputFile, ToolSpec

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"

# Modules of quiet zone around the symbol when the margin is on
QUIET_ZONE = 4


class QrOptions(BaseModel):
    size: int = Field(default=256, ge=100, le=1000)
    error_correction: Literal["L", "M", "Q", "H"] = "M"
    foreground: str = Field(default="#000000", pattern=HEX_COLOR)
    background: str = Field(default="#FFFFFF", pattern=HEX_COLOR)
    include_margin: bool = True
    output_format: Literal["png", "svg"] = "png"


def _render_png(qr: segno.QRCode, options: QrOptions, border: int) -> bytes:
    modules = qr.symbol_size(scale=1, border=border)[0]
    buffer = io.BytesIO()
    qr.save(
        buffer,
        kind="png",
        scale=max(1, options.size // modules),
        border=border,
        dark=options.foreground,
        light=options.background,
    )
    image = Image.open(io.BytesIO(buffer.getvalue())).convert("RGB")
    if image.size != (options.size, options.size):
        image = image.resize((options.size, options.size), Image.Resampling.NEAREST)
    return encode_image(image, "PNG")


def _render_svg(qr: segno.QRCode, options: QrOptions, border: int) -> bytes:
    modules = qr.symbol_size(scale=1, border=border)[0]
    buffer = io.BytesIO()
    qr.save(
        buffer,
        kind="svg",
        scale=options.size / modules,
        border=border,
        dark=options.foreground,
        light=options.background,
    )
    return buffer.getvalue()


async def generate_qr(file: InputFile, options: QrOptions) -> ConversionOutput:
    """Encode the file's text as a square QR code of ``size`` pixels."""
    try:
        text = file.data.decode("utf-8-sig").strip()
    except UnicodeDecodeError as exc:
        raise DecodeFailedError(f"Text is not valid UTF-8: {exc}") from exc
    if not text:
        raise DecodeFailedError("Text file is empty")

    try:
        qr = segno.make_qr(text, error=options.error_correction, boost_error=False)
    except segno.DataOverflowError as exc:
        raise ConversionError(
            f"Text too long for a QR code at error correction {options.error_correction}"
        ) from exc

    border = QUIET_ZONE if options.include_margin else 0
    if options.output_format == "svg":
        data, media_type = _render_svg(qr, options, border), "image/svg+xml"
    else:
        data, media_type = _render_png(qr, options, border), "image/png"

    stem, _ = split_name(file.name)
    return ConversionOutput(
        data=data,
        name=f"{stem}-qr.{options.output_format}",
        media_type=media_type,
        metadata={
            "version": qr.designator,
            "error_correction": options.error_correction,
            "characters": len(text),
        },
    )


QR_GENERATOR = ToolSpec(
    name="qr-code-generator",
    description="Generate QR codes from text files",
    policy=ConversionPolicy(
        accepted_type_patterns=("text/plain", ".txt"),
        max_item_count=10,
        max_item_size_bytes=4 * 1024,
    ),
    convert=generate_qr,
    options_model=QrOptions,
)
