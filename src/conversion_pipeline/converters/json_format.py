"""JSON prettify/minify."""

import json
from typing import Literal, Union

from pydantic import BaseModel

from ..core.exceptions import DecodeFailedError
from ..core.image_utils import split_name
from ..core.models import ConversionOutput, ConversionPolicy, InputFile, ToolSpec
from .common import MB


class JsonFormatOptions(BaseModel):
    mode: Literal["prettify", "minify"] = "prettify"
    indent: Union[int, Literal["tab"]] = 2
    sort_keys: bool = False


async def format_json(file: InputFile, options: JsonFormatOptions) -> ConversionOutput:
    try:
        document = json.loads(file.data.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DecodeFailedError(f"Invalid JSON: {exc}") from exc

    if options.mode == "minify":
        text = json.dumps(document, separators=(",", ":"), ensure_ascii=False, sort_keys=options.sort_keys)
        suffix = ".min.json"
    else:
        indent = "\t" if options.indent == "tab" else options.indent
        text = json.dumps(document, indent=indent, ensure_ascii=False, sort_keys=options.sort_keys) + "\n"
        suffix = ".formatted.json"

    stem, _ = split_name(file.name)
    return ConversionOutput(
        data=text.encode("utf-8"),
        name=f"{stem}{suffix}",
        media_type="application/json",
        metadata={"original_size": file.size, "formatted_size": len(text.encode("utf-8"))},
    )


JSON_FORMATTER = ToolSpec(
    name="json-formatter",
    description="Prettify or minify JSON documents",
    policy=ConversionPolicy(
        accepted_type_patterns=("application/json", ".json"),
        max_item_count=10,
        max_item_size_bytes=5 * MB,
    ),
    convert=format_json,
    options_model=JsonFormatOptions,
)
