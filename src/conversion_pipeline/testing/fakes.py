"""Fake implementations for testing purposes."""

import io
import time
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from PIL import Image

from ..core.artifacts import MemoryArtifactStore
from ..core.models import ConversionOutput, InputFile, OutputArtifact


@dataclass
class S3Object:
    """Fake S3 object for testing."""

    key: str
    body: bytes
    content_type: str = "application/octet-stream"
    size: int = 0

    def __post_init__(self):
        if self.size == 0:
            self.size = len(self.body)


@dataclass
class S3Bucket:
    """Fake S3 bucket for testing."""

    name: str
    objects: Dict[str, S3Object] = field(default_factory=dict)

    def add_object(
        self, key: str, body: bytes, content_type: str = "application/octet-stream"
    ) -> None:
        self.objects[key] = S3Object(key=key, body=body, content_type=content_type)

    def get_object(self, key: str) -> Optional[S3Object]:
        return self.objects.get(key)

    def delete_object(self, key: str) -> None:
        self.objects.pop(key, None)


class FakeS3Client:
    """Fake S3 client covering the calls the S3 artifact store makes."""

    def __init__(self):
        self.buckets: Dict[str, S3Bucket] = {}
        self.operation_count = 0
        self.deleted_keys: List[str] = []
        self.should_fail = False
        self.failure_message = "Simulated S3 failure"

    def create_bucket(self, name: str) -> S3Bucket:
        bucket = S3Bucket(name=name)
        self.buckets[name] = bucket
        return bucket

    def get_bucket(self, name: str) -> Optional[S3Bucket]:
        return self.buckets.get(name)

    def set_failure_mode(
        self, should_fail: bool, message: str = "Simulated failure"
    ) -> None:
        """Configure failure mode for testing error handling."""
        self.should_fail = should_fail
        self.failure_message = message

    def _bucket(self, name: str) -> S3Bucket:
        self.operation_count += 1
        if self.should_fail:
            raise Exception(self.failure_message)
        bucket = self.buckets.get(name)
        if not bucket:
            raise Exception(f"Bucket {name} not found")
        return bucket

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        obj = self._bucket(Bucket).get_object(Key)
        if not obj:
            raise Exception(f"Object {Key} not found in bucket {Bucket}")
        return {
            "Body": io.BytesIO(obj.body),
            "ContentType": obj.content_type,
            "ContentLength": obj.size,
        }

    def put_object(
        self, Bucket: str, Key: str, Body: bytes, ContentType: str
    ) -> Dict[str, Any]:
        self._bucket(Bucket).add_object(Key, Body, ContentType)
        return {
            "ETag": f'"fake-etag-{Key}"',
            "ResponseMetadata": {"HTTPStatusCode": 200},
        }

    def delete_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        self._bucket(Bucket).delete_object(Key)
        self.deleted_keys.append(Key)
        return {"ResponseMetadata": {"HTTPStatusCode": 204}}


class RecordingArtifactStore(MemoryArtifactStore):
    """In-memory store that records every allocate and release call."""

    def __init__(self) -> None:
        super().__init__()
        self.allocated: List[OutputArtifact] = []
        self.released: List[OutputArtifact] = []
        self.close_count = 0

    def allocate(self, output: ConversionOutput) -> OutputArtifact:
        artifact = super().allocate(output)
        self.allocated.append(artifact)
        return artifact

    def release(self, artifact: OutputArtifact) -> None:
        self.released.append(artifact)
        super().release(artifact)

    def close(self) -> None:
        self.close_count += 1
        super().close()

    @property
    def live_count(self) -> int:
        return len(self)


class FakeLogger:
    """Fake logger for testing with support for LogContext."""

    def __init__(self, name: str = "test_logger"):
        self.name = name
        self.logs: List[Dict[str, Any]] = []

    def _log(
        self, level: str, message: str, context: Any = None, **kwargs: Any
    ) -> None:
        log_entry = {
            "level": level,
            "message": message,
            "timestamp": time.time(),
            **kwargs,
        }

        if context is not None:
            log_entry["correlation_id"] = getattr(context, "correlation_id", None)
            log_entry["operation"] = getattr(context, "operation", None)
            log_entry["tool"] = getattr(context, "tool", None)
            log_entry.update(getattr(context, "metadata", {}))

        self.logs.append(log_entry)

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        self._log("DEBUG", message, context, **kwargs)

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        self._log("INFO", message, context, **kwargs)

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        self._log("WARNING", message, context, **kwargs)

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        self._log("ERROR", message, context, **kwargs)

    def get_logs(self, level: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get logged messages, optionally filtered by level."""
        if level:
            return [log for log in self.logs if log["level"] == level]
        return self.logs.copy()

    def messages(self, level: Optional[str] = None) -> List[str]:
        return [log["message"] for log in self.get_logs(level)]


def create_test_image(
    width: int = 100,
    height: int = 100,
    fmt: str = "PNG",
    mode: str = "RGB",
    exif: Optional[Image.Exif] = None,
) -> bytes:
    """Create an encoded test image with a simple two-colour pattern."""
    fill = (255, 0, 0, 128) if mode == "RGBA" else "red"
    image = Image.new(mode, (width, height), color=fill)

    accent = (0, 0, 255, 255) if mode == "RGBA" else (0, 0, 255)
    for x in range(0, width, 20):
        for y in range(0, height, 20):
            if (x + y) % 40 == 0:
                image.paste(accent, (x, y, min(x + 10, width), min(y + 10, height)))

    params: Dict[str, Any] = {}
    if fmt in ("JPEG", "WEBP"):
        params["quality"] = 95
    if exif is not None:
        params["exif"] = exif

    img_bytes = io.BytesIO()
    image.save(img_bytes, format=fmt, **params)
    return img_bytes.getvalue()


def make_input_file(
    name: str,
    media_type: str,
    data: Optional[bytes] = None,
    size: Optional[int] = None,
) -> InputFile:
    """Input file with explicit data, or ``size`` zero bytes."""
    if data is None:
        data = b"\x00" * (size or 0)
    return InputFile(name=name, media_type=media_type, data=data)


def setup_test_s3_environment(bucket: str = "test-artifacts") -> FakeS3Client:
    """Fake S3 with one empty bucket for artifact uploads."""
    s3_client = FakeS3Client()
    s3_client.create_bucket(bucket)
    return s3_client
