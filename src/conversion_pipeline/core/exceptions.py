"""Custom exceptions and error handling utilities for the conversion pipeline."""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, TypeVar

from PIL import Image, UnidentifiedImageError

from .logging_config import get_logger


class ConversionPipelineError(Exception):
    """Base exception for all conversion pipeline errors."""


class ConfigurationError(ConversionPipelineError):
    """Error raised for invalid configuration options."""


class UnknownToolError(ConfigurationError):
    """Error raised when a tool name is not registered."""


class InvalidTransitionError(ConversionPipelineError):
    """Error raised when a queue item leaves a terminal state."""


class ArtifactStoreError(ConversionPipelineError):
    """Error raised when an output resource cannot be stored or read."""


class ConversionError(ConversionPipelineError):
    """Error raised when converting a single item fails."""


class DecodeFailedError(ConversionError):
    """The input bytes could not be interpreted as the expected format."""


class EncodeUnsupportedError(ConversionError):
    """The running environment has no codec for the requested format."""


class RemoteFetchError(ConversionPipelineError):
    """Base error for URL inputs that could not be admitted."""


class NetworkFailedError(RemoteFetchError):
    """The remote request failed, timed out or returned a non-success status."""


class RemoteTypeMismatchError(RemoteFetchError):
    """The remote content type is not accepted by the tool."""


class RemoteTooLargeError(RemoteFetchError):
    """The remote payload exceeds the tool's size limit."""


F = TypeVar("F", bound=Callable[..., Any])


def with_error_handling(func: F) -> F:
    """Wrap a decode/encode helper so codec failures surface as pipeline errors.

    Pillow raises ``UnidentifiedImageError`` for unknown bytes and ``OSError``
    (or ``SyntaxError`` for some malformed files) for truncated or corrupt
    data. Those become ``DecodeFailedError``; pipeline errors pass through.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:  # type: ignore[override]
        logger = get_logger("converters")
        try:
            return func(*args, **kwargs)
        except ConversionPipelineError:
            raise
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            SyntaxError,
        ) as exc:
            logger.debug(f"Decode error in {func.__name__}: {exc}", exc_info=True)
            raise DecodeFailedError(f"Could not decode input: {exc}") from exc

    return wrapper  # type: ignore[return-value]
