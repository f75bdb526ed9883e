"""Factory classes for creating configured service instances."""

from typing import Optional, Union

import boto3
import httpx

from .artifacts import MemoryArtifactStore, S3ArtifactStore, TempFileArtifactStore
from .exceptions import ConfigurationError
from .models import ToolSpec
from .observability import MetricsCollector, StructuredLogger
from .protocols import ArtifactStore, LoggerProtocol, S3ClientProtocol
from .remote import RemoteFetchAdapter
from .services import BatchOrchestrator, ItemProcessor
from .settings import PipelineSettings


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(
        name: str, level: Optional[str] = None, format_type: Optional[str] = None
    ) -> LoggerProtocol:
        return StructuredLogger(name, level, format_type)


class S3ClientFactory:
    """Factory for creating S3 client instances."""

    @staticmethod
    def create_s3_client(**kwargs) -> S3ClientProtocol:
        session = boto3.Session()
        return session.client("s3", **kwargs)  # type: ignore


class ArtifactStoreFactory:
    """Builds the artifact store selected by the settings."""

    @staticmethod
    def create_store(
        settings: PipelineSettings, s3_client: Optional[S3ClientProtocol] = None
    ) -> ArtifactStore:
        if settings.artifact_backend == "tempfile":
            return TempFileArtifactStore(settings.artifact_dir)
        if settings.artifact_backend == "s3":
            if not settings.s3_bucket:
                raise ConfigurationError("CONVERSION_S3_BUCKET is required for the s3 backend")
            client = s3_client or S3ClientFactory.create_s3_client()
            return S3ArtifactStore(client, settings.s3_bucket, settings.s3_prefix)
        return MemoryArtifactStore()


class PipelineFactory:
    """Factory for creating a complete tool session."""

    @staticmethod
    def create_pipeline(
        tool: Union[str, ToolSpec],
        store: Optional[ArtifactStore] = None,
        logger: Optional[LoggerProtocol] = None,
        settings: Optional[PipelineSettings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ) -> BatchOrchestrator:
        """
        Create a batch orchestrator for one tool.

        Args:
            tool: Registered tool name or a ``ToolSpec``
            store: Artifact store; chosen from settings when omitted
            logger: Logger; a ``StructuredLogger`` when omitted
            settings: Pipeline settings; read from the environment when omitted
            http_client: Client for URL inputs (tests inject a mock transport)
            metrics_collector: Optional per-item timing sink

        Returns:
            A fresh session with an empty queue
        """
        from ..converters import get_tool

        spec = get_tool(tool) if isinstance(tool, str) else tool

        if settings is None:
            settings = PipelineSettings.from_env()

        if logger is None:
            logger = LoggerFactory.create_logger(
                "conversion-pipeline", settings.log_level, settings.log_format
            )

        if store is None:
            store = ArtifactStoreFactory.create_store(settings)

        processor = ItemProcessor(store, logger, metrics_collector)
        fetcher = RemoteFetchAdapter(logger, client=http_client, timeout=settings.fetch_timeout)

        return BatchOrchestrator(
            spec=spec,
            store=store,
            processor=processor,
            logger=logger,
            fetcher=fetcher,
        )
