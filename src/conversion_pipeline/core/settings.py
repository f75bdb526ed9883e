"""Process-wide settings read from the environment."""

import os
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError


class PipelineSettings(BaseModel):
    """Settings shared by every tool session."""

    fetch_timeout: float = Field(default=15.0, gt=0)
    artifact_backend: Literal["memory", "tempfile", "s3"] = "memory"
    artifact_dir: Optional[str] = None
    s3_bucket: Optional[str] = None
    s3_prefix: str = "conversions"
    log_level: str = "INFO"
    log_format: Literal["structured", "simple"] = "structured"

    @classmethod
    def from_env(cls) -> "PipelineSettings":
        """
        Build settings from environment variables.

        Environment Variables:
            CONVERSION_FETCH_TIMEOUT: Seconds before a URL fetch is abandoned
            CONVERSION_ARTIFACT_BACKEND: memory, tempfile or s3
            CONVERSION_ARTIFACT_DIR: Parent directory for the tempfile backend
            CONVERSION_S3_BUCKET: Bucket for the s3 backend
            CONVERSION_S3_PREFIX: Key prefix for the s3 backend
            LOG_LEVEL: Logging level
            LOG_FORMAT: structured or simple log records
        """
        values = {
            "fetch_timeout": os.getenv("CONVERSION_FETCH_TIMEOUT"),
            "artifact_backend": os.getenv("CONVERSION_ARTIFACT_BACKEND"),
            "artifact_dir": os.getenv("CONVERSION_ARTIFACT_DIR"),
            "s3_bucket": os.getenv("CONVERSION_S3_BUCKET"),
            "s3_prefix": os.getenv("CONVERSION_S3_PREFIX"),
            "log_level": os.getenv("LOG_LEVEL"),
            "log_format": os.getenv("LOG_FORMAT", "").lower() or None,
        }
        try:
            return cls(**{k: v for k, v in values.items() if v is not None})
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid pipeline settings: {exc}") from exc
