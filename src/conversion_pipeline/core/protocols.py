"""Protocol definitions for dependency injection and testability."""

from typing import Any, Dict, Protocol

from .models import ConversionOutput, OutputArtifact


class S3ClientProtocol(Protocol):
    """Protocol for S3 client operations."""

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object from S3."""
        ...

    def put_object(
        self, Bucket: str, Key: str, Body: bytes, ContentType: str
    ) -> Dict[str, Any]:
        """Put object to S3."""
        ...

    def delete_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Delete object from S3."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        ...


class ArtifactStore(Protocol):
    """Owner of the external resources behind output artifacts."""

    def allocate(self, output: ConversionOutput) -> OutputArtifact:
        """Persist an output and return the artifact referencing it."""
        ...

    def read(self, artifact: OutputArtifact) -> bytes:
        """Return the bytes of a live artifact."""
        ...

    def release(self, artifact: OutputArtifact) -> None:
        """Free the resource; releasing twice is a no-op."""
        ...

    def close(self) -> None:
        """Drop whatever the store holds for the session once all artifacts are released."""
        ...
