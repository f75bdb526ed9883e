"""Image helpers shared by the raster tools."""

import base64
import io
import math
import struct
from collections.abc import Iterable
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np
from PIL import Image, ImageOps, features
from PIL.ExifTags import GPSTAGS, IFD, TAGS
from sklearn.cluster import KMeans

from .exceptions import EncodeUnsupportedError, with_error_handling

FORMAT_MEDIA_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "AVIF": "image/avif",
    "GIF": "image/gif",
    "BMP": "image/bmp",
    "TIFF": "image/tiff",
    "HEIF": "image/heif",
    "MPO": "image/jpeg",
}

FORMAT_EXTENSIONS = {
    "JPEG": "jpg",
    "PNG": "png",
    "WEBP": "webp",
    "AVIF": "avif",
    "GIF": "gif",
    "BMP": "bmp",
    "TIFF": "tiff",
    "HEIF": "heic",
    "MPO": "jpg",
}

MEDIA_TYPE_FORMATS = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
    "image/webp": "WEBP",
    "image/avif": "AVIF",
}

# Formats whose Pillow plugin exists but depends on an optional native library.
_FEATURE_BACKED = {"WEBP": "webp", "AVIF": "avif"}

WHITE = (255, 255, 255)


def _feature_present(fmt: str) -> bool:
    feature = _FEATURE_BACKED.get(fmt)
    if feature is None:
        return True
    return bool(features.check(feature))


def decoder_available(fmt: str) -> bool:
    """Whether this Pillow build can open ``fmt`` (e.g. "HEIF" needs a plugin)."""
    Image.init()
    return fmt in Image.OPEN and _feature_present(fmt)


def encoder_available(fmt: str) -> bool:
    """Whether this Pillow build can save ``fmt``."""
    Image.init()
    return fmt in Image.SAVE and _feature_present(fmt)


def require_decoder(fmt: str, label: Optional[str] = None) -> None:
    if not decoder_available(fmt):
        raise EncodeUnsupportedError(
            f"{label or fmt} decoding not supported in this environment"
        )


def require_encoder(fmt: str, label: Optional[str] = None) -> None:
    if not encoder_available(fmt):
        raise EncodeUnsupportedError(
            f"{label or fmt} encoding not supported in this environment"
        )


@with_error_handling
def load_image(data: bytes, transpose: bool = True) -> Image.Image:
    """
    Decode image bytes, applying the EXIF orientation unless ``transpose`` is off.

    Raises:
        DecodeFailedError: If the bytes are not a decodable image
    """
    image = Image.open(io.BytesIO(data))
    image.load()
    if not transpose:
        return image
    source_format = image.format
    image = ImageOps.exif_transpose(image)
    image.format = source_format
    return image


def flatten_onto_background(
    img: Image.Image, color: Tuple[int, int, int] = WHITE
) -> Image.Image:
    """Composite transparency onto a solid background and return RGB."""
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, color)
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


def to_pillow_quality(quality: float) -> int:
    """Map a 0-1 quality to Pillow's 1-100 scale."""
    return max(1, min(100, round(quality * 100)))


def encode_image(img: Image.Image, fmt: str, quality: Optional[float] = None) -> bytes:
    """
    Encode an image with the platform encoder.

    Quality applies to lossy formats only; PNG ignores it.

    Raises:
        EncodeUnsupportedError: If this environment cannot write ``fmt``
    """
    require_encoder(fmt)

    if fmt == "JPEG":
        img = flatten_onto_background(img)
    elif fmt in ("WEBP", "AVIF") and img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA" if "A" in img.getbands() else "RGB")

    params: Dict[str, Any] = {}
    if quality is not None and fmt in ("JPEG", "WEBP", "AVIF"):
        params["quality"] = to_pillow_quality(quality)
    if fmt == "PNG":
        params["optimize"] = True

    buffer = io.BytesIO()
    img.save(buffer, format=fmt, **params)
    return buffer.getvalue()


def calculate_dimensions(
    original_width: int,
    original_height: int,
    target_width: int,
    target_height: int,
    mode: str,
) -> Tuple[int, int]:
    """
    Compute output dimensions for a resize.

    Args:
        original_width: Source width in pixels
        original_height: Source height in pixels
        target_width: Requested width
        target_height: Requested height
        mode: "exact", "maintain-aspect" or "fit-to-dimensions"

    Returns:
        (width, height), each at least 1
    """
    if mode == "maintain-aspect":
        aspect_ratio = original_width / original_height
        if target_width / target_height > aspect_ratio:
            width, height = target_height * aspect_ratio, target_height
        else:
            width, height = target_width, target_width / aspect_ratio
    elif mode == "fit-to-dimensions":
        scale = min(target_width / original_width, target_height / original_height)
        width, height = original_width * scale, original_height * scale
    else:
        width, height = target_width, target_height

    return max(1, round(width)), max(1, round(height))


def split_name(filename: str) -> Tuple[str, str]:
    """Split a file name into stem and extension (without the dot)."""
    if "." in filename.strip(".") and not filename.startswith("."):
        stem, ext = filename.rsplit(".", 1)
        return stem, ext
    return filename, ""


def replace_extension(filename: str, new_ext: str) -> str:
    stem, _ = split_name(filename)
    return f"{stem}.{new_ext}"


def with_suffix(filename: str, suffix: str, new_ext: Optional[str] = None) -> str:
    """Insert ``suffix`` before the extension, optionally swapping it."""
    stem, ext = split_name(filename)
    ext = new_ext or ext
    return f"{stem}{suffix}.{ext}" if ext else f"{stem}{suffix}"


def quantize_colors(img: Image.Image, k: int = 8) -> Image.Image:
    """
    Reduce an image to ``k`` colours with scikit-learn K-means.

    Alpha, when present, is kept as-is; only the colour channels are
    clustered.
    """
    has_alpha = "A" in img.getbands()
    rgb = img.convert("RGB")
    img_array = np.array(rgb)
    pixels = img_array.reshape(-1, 3)

    unique_colors = len(np.unique(pixels, axis=0))
    clusters = max(1, min(k, unique_colors))

    kmeans = KMeans(n_clusters=clusters, random_state=42, n_init="auto")
    kmeans.fit(pixels)  # type: ignore[reportUnknownMemberType]
    quantized_pixels = kmeans.cluster_centers_[kmeans.labels_]  # type: ignore[reportUnknownMemberType]
    quantized_array = quantized_pixels.reshape(img_array.shape).astype(np.uint8)

    result = Image.fromarray(quantized_array)
    if has_alpha:
        result.putalpha(img.convert("RGBA").getchannel("A"))
    return result


def _exif_value(value: Any) -> Union[str, int, float, None]:
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8").rstrip("\x00")
        except UnicodeDecodeError:
            return f"<{len(value)} bytes>"
    if isinstance(value, (str, int)):
        return value
    if isinstance(value, Iterable):
        return str(tuple(value))
    # IFDRational and friends; a zero denominator gives NaN, which JSON cannot carry
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)
    return number if math.isfinite(number) else None


def extract_exif_data(img: Image.Image, include_gps: bool = False) -> Dict[str, Any]:
    """
    Extract basic image info and EXIF tags.

    GPS tags are skipped unless ``include_gps`` is set.

    Args:
        img: Decoded image
        include_gps: Keep location tags

    Returns:
        Flat mapping of tag name to a JSON-serializable value
    """
    exif_dict: Dict[str, Any] = {
        "width": img.width,
        "height": img.height,
        "format": img.format or "unknown",
        "mode": img.mode,
    }

    exif = img.getexif()
    tags: Dict[Any, Any] = dict(exif.items())
    tags.update(exif.get_ifd(IFD.Exif))
    if include_gps:
        gps = exif.get_ifd(IFD.GPSInfo)
        tags.update({GPSTAGS.get(key, f"GPS{key}"): value for key, value in gps.items()})

    for tag_id, value in tags.items():
        tag = tag_id if isinstance(tag_id, str) else TAGS.get(tag_id, tag_id)
        if not include_gps and "gps" in str(tag).lower():
            continue
        if tag in ("MakerNote", "UserComment", "ExifOffset", "GPSInfo"):
            continue
        exif_dict[str(tag)] = _exif_value(value)

    return exif_dict


def build_ico(png_bytes: bytes, width: int, height: int) -> bytes:
    """
    Wrap PNG bytes in a single-image ICO container.

    Layout: 6-byte ICONDIR (reserved, type=1, count=1) followed by one
    16-byte ICONDIRENTRY, then the PNG payload at offset 22. A dimension of
    256 or more is stored as 0.
    """
    header = struct.pack("<HHH", 0, 1, 1)
    entry = struct.pack(
        "<BBBBHHII",
        width if width < 256 else 0,
        height if height < 256 else 0,
        0,  # palette size
        0,  # reserved
        1,  # colour planes
        32,  # bits per pixel
        len(png_bytes),
        len(header) + 16,
    )
    return header + entry + png_bytes


def raster_to_svg(data: bytes, media_type: str, width: int, height: int) -> str:
    """Embed a raster image 1:1 in an SVG document as a data URI."""
    width, height = max(1, width), max(1, height)
    data_uri = f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}"'
        f' viewBox="0 0 {width} {height}">'
        f'<image href="{data_uri}" x="0" y="0" width="{width}" height="{height}"'
        ' preserveAspectRatio="none"/>'
        "</svg>"
    )
