"""Artifact stores: the resources behind converted outputs and their release."""

import os
import tempfile
import uuid
from pathlib import Path
from typing import Dict, Optional

from .exceptions import ArtifactStoreError
from .logging_config import get_logger
from .models import ConversionOutput, OutputArtifact
from .protocols import S3ClientProtocol


def _build_artifact(output: ConversionOutput, handle: str) -> OutputArtifact:
    return OutputArtifact(
        name=output.name,
        media_type=output.media_type,
        size=len(output.data),
        metadata=dict(output.metadata),
        handle=handle,
    )


class MemoryArtifactStore:
    """Keeps output bytes in process memory, keyed by handle."""

    def __init__(self) -> None:
        self._blobs: Dict[str, bytes] = {}

    def __len__(self) -> int:
        return len(self._blobs)

    def allocate(self, output: ConversionOutput) -> OutputArtifact:
        handle = f"mem:{uuid.uuid4().hex}"
        self._blobs[handle] = output.data
        return _build_artifact(output, handle)

    def read(self, artifact: OutputArtifact) -> bytes:
        try:
            return self._blobs[artifact.handle]
        except KeyError:
            raise ArtifactStoreError(f"Artifact {artifact.name} has been released")

    def release(self, artifact: OutputArtifact) -> None:
        self._blobs.pop(artifact.handle, None)
        artifact.released = True

    def close(self) -> None:
        self._blobs.clear()


class TempFileArtifactStore:
    """Writes each output to its own file under a private temp directory."""

    def __init__(self, root: Optional[str] = None) -> None:
        self._dir = Path(tempfile.mkdtemp(prefix="conversion-", dir=root))
        self._logger = get_logger("artifacts")

    @property
    def directory(self) -> Path:
        return self._dir

    def allocate(self, output: ConversionOutput) -> OutputArtifact:
        fd, path = tempfile.mkstemp(
            dir=self._dir, suffix=Path(output.name).suffix or None
        )
        with os.fdopen(fd, "wb") as fh:
            fh.write(output.data)
        return _build_artifact(output, path)

    def read(self, artifact: OutputArtifact) -> bytes:
        try:
            return Path(artifact.handle).read_bytes()
        except FileNotFoundError:
            raise ArtifactStoreError(f"Artifact {artifact.name} has been released")

    def release(self, artifact: OutputArtifact) -> None:
        try:
            Path(artifact.handle).unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise ArtifactStoreError(f"Could not remove {artifact.handle}: {exc}") from exc
        artifact.released = True
        self._logger.debug(f"Released {artifact.handle}")

    def close(self) -> None:
        """Remove the temp directory once it is empty."""
        try:
            self._dir.rmdir()
        except OSError as exc:
            self._logger.warning(f"Artifact directory {self._dir} not removed: {exc}")


class S3ArtifactStore:
    """Uploads outputs to an S3 bucket and deletes them on release."""

    def __init__(self, s3_client: S3ClientProtocol, bucket: str, prefix: str = "") -> None:
        self._s3_client = s3_client
        self._bucket = bucket
        self._prefix = prefix.strip("/")
        self._logger = get_logger("artifacts")

    def _key_for(self, output: ConversionOutput) -> str:
        key = f"{uuid.uuid4().hex}/{output.name}"
        return f"{self._prefix}/{key}" if self._prefix else key

    def allocate(self, output: ConversionOutput) -> OutputArtifact:
        key = self._key_for(output)
        try:
            self._s3_client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=output.data,
                ContentType=output.media_type,
            )
        except Exception as exc:
            raise ArtifactStoreError(
                f"Upload to s3://{self._bucket}/{key} failed: {exc}"
            ) from exc
        return _build_artifact(output, key)

    def read(self, artifact: OutputArtifact) -> bytes:
        if artifact.released:
            raise ArtifactStoreError(f"Artifact {artifact.name} has been released")
        response = self._s3_client.get_object(Bucket=self._bucket, Key=artifact.handle)
        return response["Body"].read()

    def release(self, artifact: OutputArtifact) -> None:
        if artifact.released:
            return
        try:
            self._s3_client.delete_object(Bucket=self._bucket, Key=artifact.handle)
        except Exception as exc:
            raise ArtifactStoreError(
                f"Delete of s3://{self._bucket}/{artifact.handle} failed: {exc}"
            ) from exc
        artifact.released = True
        self._logger.debug(f"Deleted s3://{self._bucket}/{artifact.handle}")

    def close(self) -> None:
        """Nothing is held locally; objects go away on release."""
