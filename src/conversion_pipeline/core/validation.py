"""Admission checks applied to every candidate file before it is queued."""

from typing import Iterable, Optional, Sequence

from pydantic import BaseModel

from .models import ConversionPolicy, FailureKind, InputFile, normalize_media_type

# Declared types that say nothing about the payload; the file name decides.
UNRELIABLE_MEDIA_TYPES = frozenset({"", "application/octet-stream"})


class ValidationResult(BaseModel):
    """Outcome of validating one candidate."""

    accepted: bool
    kind: Optional[FailureKind] = None
    message: str = ""

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(accepted=True)

    @classmethod
    def rejected(cls, kind: FailureKind, message: str) -> "ValidationResult":
        return cls(accepted=False, kind=kind, message=message)


def media_type_matches(media_type: str, patterns: Sequence[str]) -> bool:
    """Match a media type against exact, ``type/*`` and ``*/*`` patterns."""
    media_type = normalize_media_type(media_type)
    if "*/*" in patterns:
        return True
    if not media_type:
        return False
    major = media_type.split("/", 1)[0]
    for pattern in patterns:
        if pattern == media_type:
            return True
        if pattern.endswith("/*") and pattern[:-2] == major:
            return True
    return False


def extension_matches(filename: str, patterns: Iterable[str]) -> bool:
    lowered = filename.lower()
    return any(lowered.endswith(ext) for ext in patterns)


def is_type_accepted(file: InputFile, policy: ConversionPolicy) -> bool:
    if media_type_matches(file.media_type, policy.media_type_patterns):
        return True
    if file.normalized_type in UNRELIABLE_MEDIA_TYPES:
        return extension_matches(file.name, policy.extension_patterns)
    return False


def format_size_limit(size_bytes: int) -> str:
    megabytes = size_bytes / (1024 * 1024)
    if megabytes >= 1 and megabytes == int(megabytes):
        return f"{int(megabytes)}MB"
    if megabytes >= 1:
        return f"{megabytes:.1f}MB"
    return f"{size_bytes} bytes"


def validate(file: InputFile, policy: ConversionPolicy) -> ValidationResult:
    """
    Decide whether a candidate is admissible under a policy.

    Only the declared type, name and size are inspected, never the contents;
    a mislabelled file is caught later as a decode failure.

    Args:
        file: Candidate input
        policy: Admission rules of the tool

    Returns:
        ``ValidationResult`` with ``UNSUPPORTED_TYPE`` or ``TOO_LARGE`` on rejection
    """
    if not is_type_accepted(file, policy):
        return ValidationResult.rejected(
            FailureKind.UNSUPPORTED_TYPE,
            f"Only {policy.describe_types()} files are supported",
        )
    if file.size > policy.max_item_size_bytes:
        return ValidationResult.rejected(
            FailureKind.TOO_LARGE,
            f"Max size is {format_size_limit(policy.max_item_size_bytes)}",
        )
    return ValidationResult.ok()
