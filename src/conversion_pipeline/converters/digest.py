"""File hashing."""

import hashlib
from typing import List, Literal

from pydantic import BaseModel, Field, field_validator

from ..core.models import ConversionOutput, ConversionPolicy, InputFile, ToolSpec
from .common import MB

HashAlgorithm = Literal["md5", "sha1", "sha256", "sha512"]


class HashOptions(BaseModel):
    algorithms: List[HashAlgorithm] = Field(default_factory=lambda: ["sha256"], min_length=1)

    @field_validator("algorithms", mode="before")
    @classmethod
    def _split_algorithms(cls, value):
        if isinstance(value, str):
            return [part.strip().lower() for part in value.split(",") if part.strip()]
        return value


async def hash_file(file: InputFile, options: HashOptions) -> ConversionOutput:
    """Digest the file with each selected algorithm, in checksum-file format."""
    digests = {}
    for algorithm in dict.fromkeys(options.algorithms):
        digests[algorithm] = hashlib.new(algorithm, file.data).hexdigest()

    lines = [f"{algorithm.upper()} ({file.name}) = {digest}" for algorithm, digest in digests.items()]
    return ConversionOutput(
        data=("\n".join(lines) + "\n").encode("utf-8"),
        name=f"{file.name}.hashes.txt",
        media_type="text/plain",
        metadata=digests,
    )


HASH_GENERATOR = ToolSpec(
    name="hash-generator",
    description="MD5, SHA-1, SHA-256 and SHA-512 checksums of any file",
    policy=ConversionPolicy(
        accepted_type_patterns=("*/*",),
        max_item_count=10,
        max_item_size_bytes=100 * MB,
    ),
    convert=hash_file,
    options_model=HashOptions,
)
