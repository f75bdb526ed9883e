"""Registry of the available conversion tools."""

from typing import Dict, List

from ..core.exceptions import UnknownToolError
from ..core.models import ToolSpec
from .compress import IMAGE_COMPRESSOR
from .digest import HASH_GENERATOR
from .formats import AVIF_TO_JPG, HEIC_TO_JPG, JPG_TO_AVIF, PNG_TO_JPG, WEBP_TO_JPG
from .icon import PNG_TO_ICO
from .json_format import JSON_FORMATTER
from .metadata import METADATA_VIEWER
from .qr import QR_GENERATOR
from .resize import IMAGE_RESIZER
from .svg import IMAGE_TO_SVG
from .svg_raster import SVG_TO_WEBP

TOOLS: Dict[str, ToolSpec] = {
    spec.name: spec
    for spec in (
        WEBP_TO_JPG,
        PNG_TO_JPG,
        AVIF_TO_JPG,
        JPG_TO_AVIF,
        HEIC_TO_JPG,
        IMAGE_COMPRESSOR,
        IMAGE_RESIZER,
        PNG_TO_ICO,
        IMAGE_TO_SVG,
        SVG_TO_WEBP,
        HASH_GENERATOR,
        METADATA_VIEWER,
        JSON_FORMATTER,
        QR_GENERATOR,
    )
}


def get_tool(name: str) -> ToolSpec:
    try:
        return TOOLS[name]
    except KeyError:
        known = ", ".join(sorted(TOOLS))
        raise UnknownToolError(f"Unknown tool '{name}'. Available: {known}")


def list_tools() -> List[ToolSpec]:
    return list(TOOLS.values())
