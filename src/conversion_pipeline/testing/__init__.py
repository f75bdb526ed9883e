"""Testing utilities and fakes for the conversion pipeline."""

from .fakes import (
    FakeS3Client,
    FakeLogger,
    RecordingArtifactStore,
    S3Object,
    S3Bucket,
    create_test_image,
    make_input_file,
    setup_test_s3_environment,
)

__all__ = [
    "FakeS3Client",
    "FakeLogger",
    "RecordingArtifactStore",
    "S3Object",
    "S3Bucket",
    "create_test_image",
    "make_input_file",
    "setup_test_s3_environment",
]
