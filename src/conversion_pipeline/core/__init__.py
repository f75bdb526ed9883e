"""Core pipeline: validation, queue, processing and shared components."""

from .logging_config import get_logger, setup_logger
from .exceptions import (
    ArtifactStoreError,
    ConfigurationError,
    ConversionError,
    ConversionPipelineError,
    DecodeFailedError,
    EncodeUnsupportedError,
    InvalidTransitionError,
    NetworkFailedError,
    RemoteFetchError,
    RemoteTooLargeError,
    RemoteTypeMismatchError,
    UnknownToolError,
    with_error_handling,
)
from .models import (
    BatchSummary,
    ConversionOutput,
    ConversionPolicy,
    Failure,
    FailureKind,
    InputFile,
    ItemStatus,
    NoOptions,
    OutputArtifact,
    QueueItem,
    ToolSpec,
)
from .validation import ValidationResult, validate
from .queue import ConversionQueue
from .artifacts import MemoryArtifactStore, S3ArtifactStore, TempFileArtifactStore
from .remote import RemoteFetchAdapter
from .services import BatchOrchestrator, ItemProcessor
from .settings import PipelineSettings

__all__ = [
    "get_logger",
    "setup_logger",
    "ArtifactStoreError",
    "ConfigurationError",
    "ConversionError",
    "ConversionPipelineError",
    "DecodeFailedError",
    "EncodeUnsupportedError",
    "InvalidTransitionError",
    "NetworkFailedError",
    "RemoteFetchError",
    "RemoteTooLargeError",
    "RemoteTypeMismatchError",
    "UnknownToolError",
    "with_error_handling",
    "BatchSummary",
    "ConversionOutput",
    "ConversionPolicy",
    "Failure",
    "FailureKind",
    "InputFile",
    "ItemStatus",
    "NoOptions",
    "OutputArtifact",
    "QueueItem",
    "ToolSpec",
    "ValidationResult",
    "validate",
    "ConversionQueue",
    "MemoryArtifactStore",
    "S3ArtifactStore",
    "TempFileArtifactStore",
    "RemoteFetchAdapter",
    "BatchOrchestrator",
    "ItemProcessor",
    "PipelineSettings",
]
