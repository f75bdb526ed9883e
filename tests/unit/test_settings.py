"""Unit tests for environment-driven settings."""

import os
from unittest.mock import patch

import pytest

from conversion_pipeline.core.exceptions import ConfigurationError
from conversion_pipeline.core.settings import PipelineSettings

ENV_KEYS = (
    "CONVERSION_FETCH_TIMEOUT",
    "CONVERSION_ARTIFACT_BACKEND",
    "CONVERSION_ARTIFACT_DIR",
    "CONVERSION_S3_BUCKET",
    "CONVERSION_S3_PREFIX",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture
def clean_env():
    with patch.dict(os.environ, {}, clear=False):
        for key in ENV_KEYS:
            os.environ.pop(key, None)
        yield os.environ


class TestPipelineSettings:
    """Tests for PipelineSettings.from_env."""

    def test_defaults(self, clean_env):
        settings = PipelineSettings.from_env()
        assert settings.fetch_timeout == 15.0
        assert settings.artifact_backend == "memory"
        assert settings.s3_prefix == "conversions"
        assert settings.log_level == "INFO"
        assert settings.log_format == "structured"

    def test_reads_environment(self, clean_env):
        clean_env.update({
            "CONVERSION_FETCH_TIMEOUT": "3.5",
            "CONVERSION_ARTIFACT_BACKEND": "s3",
            "CONVERSION_S3_BUCKET": "outputs",
            "CONVERSION_S3_PREFIX": "tmp",
            "LOG_LEVEL": "DEBUG",
            "LOG_FORMAT": "Simple",
        })

        settings = PipelineSettings.from_env()

        assert settings.fetch_timeout == 3.5
        assert settings.artifact_backend == "s3"
        assert settings.s3_bucket == "outputs"
        assert settings.s3_prefix == "tmp"
        assert settings.log_level == "DEBUG"
        assert settings.log_format == "simple"

    @pytest.mark.parametrize(
        "key,value",
        [
            ("CONVERSION_FETCH_TIMEOUT", "soon"),
            ("CONVERSION_FETCH_TIMEOUT", "0"),
            ("CONVERSION_ARTIFACT_BACKEND", "ftp"),
            ("LOG_FORMAT", "xml"),
        ],
    )
    def test_invalid_values(self, clean_env, key, value):
        clean_env[key] = value
        with pytest.raises(ConfigurationError, match="Invalid pipeline settings"):
            PipelineSettings.from_env()
