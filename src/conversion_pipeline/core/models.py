"""Shared data models for the conversion pipeline."""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import InvalidTransitionError


class ItemStatus(str, Enum):
    """Lifecycle state of a queued item."""

    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"


class FailureKind(str, Enum):
    """Why an item did not produce an output."""

    UNSUPPORTED_TYPE = "unsupported_type"
    TOO_LARGE = "too_large"
    DECODE_FAILED = "decode_failed"
    ENCODE_UNSUPPORTED = "encode_unsupported"
    CONVERSION_FAILED = "conversion_failed"


def normalize_media_type(media_type: str) -> str:
    """Lower-case a media type and drop any ``;`` parameters."""
    return media_type.split(";", 1)[0].strip().lower()


class InputFile(BaseModel):
    """Raw input payload: bytes plus declared media type and display name."""

    model_config = ConfigDict(frozen=True)

    name: str
    media_type: str = ""
    data: bytes = Field(default=b"", repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def normalized_type(self) -> str:
        return normalize_media_type(self.media_type)


class ConversionOutput(BaseModel):
    """Result produced by a convert function, before a store owns it."""

    data: bytes = Field(repr=False)
    name: str
    media_type: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


class OutputArtifact(BaseModel):
    """An output resource held by a queue item until released."""

    name: str
    media_type: str
    size: int = 0
    metadata: Dict[str, Any] = Field(default_factory=dict)
    handle: str
    released: bool = False


class Failure(BaseModel):
    """Classified failure of a single item."""

    model_config = ConfigDict(frozen=True)

    kind: FailureKind
    message: str


class QueueItem(BaseModel):
    """One admitted unit of conversion work."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    input: InputFile
    status: ItemStatus = ItemStatus.PENDING
    artifact: Optional[OutputArtifact] = None
    failure: Optional[Failure] = None

    @property
    def is_pending(self) -> bool:
        return self.status is ItemStatus.PENDING

    @property
    def failure_reason(self) -> Optional[str]:
        return self.failure.message if self.failure else None

    def _leave_pending(self, target: ItemStatus) -> None:
        if self.status is not ItemStatus.PENDING:
            raise InvalidTransitionError(
                f"Item {self.id} is {self.status.value}, cannot become {target.value}"
            )

    def mark_done(self, artifact: OutputArtifact) -> None:
        """Attach the output and move to DONE."""
        self._leave_pending(ItemStatus.DONE)
        self.artifact = artifact
        self.status = ItemStatus.DONE

    def mark_failed(self, kind: FailureKind, message: str) -> None:
        """Record the failure and move to FAILED."""
        self._leave_pending(ItemStatus.FAILED)
        self.failure = Failure(kind=kind, message=message)
        self.status = ItemStatus.FAILED


class ConversionPolicy(BaseModel):
    """Admission rules for one tool.

    ``accepted_type_patterns`` holds exact media types (``image/png``),
    subtype wildcards (``image/*``), the match-all ``*/*`` and dot-extension
    fallbacks (``.heic``) that apply when the declared type is unreliable.
    """

    model_config = ConfigDict(frozen=True)

    accepted_type_patterns: Tuple[str, ...]
    max_item_count: int = Field(gt=0)
    max_item_size_bytes: int = Field(gt=0)

    @field_validator("accepted_type_patterns")
    @classmethod
    def _normalize_patterns(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        patterns = tuple(p.strip().lower() for p in value if p.strip())
        if not patterns:
            raise ValueError("at least one accepted type pattern is required")
        return patterns

    @property
    def media_type_patterns(self) -> Tuple[str, ...]:
        return tuple(p for p in self.accepted_type_patterns if "/" in p)

    @property
    def extension_patterns(self) -> Tuple[str, ...]:
        return tuple(p for p in self.accepted_type_patterns if p.startswith("."))

    def describe_types(self) -> str:
        """Human-readable list of accepted types for messages."""
        labels = []
        for pattern in self.accepted_type_patterns:
            if pattern == "*/*":
                return "any"
            if pattern.endswith("/*"):
                label = pattern[:-2]
            elif pattern.startswith("."):
                label = pattern[1:]
            else:
                label = pattern.split("/", 1)[1]
            label = label.upper()
            if label not in labels:
                labels.append(label)
        return "/".join(labels)


class BatchSummary(BaseModel):
    """Outcome of one convert_all run."""

    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    cancelled: int = 0
    processing_time: float = 0.0


class NoOptions(BaseModel):
    """Options model for tools without parameters."""


@dataclass(frozen=True)
class ToolSpec:
    """A conversion tool: admission policy, convert function and its options."""

    name: str
    description: str
    policy: ConversionPolicy
    convert: Callable[[InputFile, Any], Awaitable[ConversionOutput]]
    options_model: Type[BaseModel] = NoOptions
