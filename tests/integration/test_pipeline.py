"""Integration tests for the complete pipeline."""

import io
import json

import httpx
import pytest
from PIL import Image

from conversion_pipeline.core.artifacts import MemoryArtifactStore, S3ArtifactStore, TempFileArtifactStore
from conversion_pipeline.core.exceptions import ConfigurationError, UnknownToolError
from conversion_pipeline.core.factories import ArtifactStoreFactory, PipelineFactory
from conversion_pipeline.core.models import FailureKind, ItemStatus
from conversion_pipeline.core.observability import MetricsCollector
from conversion_pipeline.core.settings import PipelineSettings
from conversion_pipeline.testing.fakes import (
    FakeLogger,
    RecordingArtifactStore,
    create_test_image,
    make_input_file,
    setup_test_s3_environment,
)


class TestPipelineIntegration:
    """End-to-end sessions built through PipelineFactory."""

    @pytest.mark.asyncio
    async def test_resize_session_end_to_end(self):
        """Files are admitted, converted in order and released on exit."""
        store = RecordingArtifactStore()
        logger = FakeLogger()
        metrics = MetricsCollector()

        async with PipelineFactory.create_pipeline(
            "image-resizer",
            store=store,
            logger=logger,
            settings=PipelineSettings(),
            metrics_collector=metrics,
        ) as pipeline:
            pipeline.add_files([
                make_input_file("a.png", "image/png", create_test_image(200, 100)),
                make_input_file("notes.txt", "text/plain", b"hello"),
                make_input_file("b.jpg", "image/jpeg", b"not a jpeg"),
                make_input_file("c.jpg", "image/jpeg", create_test_image(100, 200, fmt="JPEG")),
            ])

            summary = await pipeline.convert_all({"width": 50, "height": 50, "mode": "fit-to-dimensions"})

            statuses = [item.status for item in pipeline.snapshot()]
            assert statuses == [
                ItemStatus.DONE,
                ItemStatus.FAILED,
                ItemStatus.FAILED,
                ItemStatus.DONE,
            ]
            assert pipeline.failures_by_kind() == {
                FailureKind.UNSUPPORTED_TYPE: 1,
                FailureKind.DECODE_FAILED: 1,
            }
            assert (summary.processed, summary.succeeded, summary.failed) == (3, 2, 1)

            first = pipeline.snapshot()[0]
            assert first.artifact.name == "a_50x25.png"
            assert Image.open(io.BytesIO(store.read(first.artifact))).size == (50, 25)
            assert pipeline.snapshot()[3].artifact.name == "c_25x50.jpg"

        assert store.live_count == 0
        assert len(store.released) == 2
        assert metrics.get_summary("image-resizer")["total_operations"] == 3
        assert logger.get_logs("ERROR")

    @pytest.mark.asyncio
    async def test_url_input_session(self):
        png = create_test_image(16, 16)

        def handler(request):
            if request.url.path == "/ok.png":
                return httpx.Response(200, headers={"content-type": "image/png"}, content=png)
            return httpx.Response(200, headers={"content-type": "image/gif"}, content=b"GIF89a")

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        pipeline = PipelineFactory.create_pipeline(
            "png-to-ico",
            store=MemoryArtifactStore(),
            logger=FakeLogger(),
            settings=PipelineSettings(),
            http_client=client,
        )

        await pipeline.add_from_url("https://cdn.example.com/ok.png")
        await pipeline.convert_all()

        (item,) = pipeline.snapshot()
        assert item.status is ItemStatus.DONE
        assert item.artifact.name == "from-url.ico"
        pipeline.clear_all()

    @pytest.mark.asyncio
    async def test_json_formatter_with_s3_store(self):
        s3 = setup_test_s3_environment("outputs")
        settings = PipelineSettings(artifact_backend="s3", s3_bucket="outputs")
        store = ArtifactStoreFactory.create_store(settings, s3_client=s3)

        async with PipelineFactory.create_pipeline(
            "json-formatter", store=store, logger=FakeLogger(), settings=settings
        ) as pipeline:
            pipeline.add_files([make_input_file("cfg.json", "", b'{"b":1,"a":2}')])
            await pipeline.convert_all({"mode": "minify", "sort_keys": True})

            (item,) = pipeline.snapshot()
            assert item.artifact.handle.startswith("conversions/")
            assert json.loads(store.read(item.artifact)) == {"a": 2, "b": 1}

        assert s3.deleted_keys == [item.artifact.handle]

    @pytest.mark.asyncio
    async def test_tempfile_session_leaves_no_files(self, tmp_path):
        """Closing a temp-file session removes its outputs and its private directory."""
        settings = PipelineSettings(artifact_backend="tempfile", artifact_dir=str(tmp_path))

        async with PipelineFactory.create_pipeline(
            "png-to-jpg", settings=settings, logger=FakeLogger()
        ) as pipeline:
            pipeline.add_files([
                make_input_file("a.png", "image/png", create_test_image(20, 20)),
                make_input_file("b.png", "image/png", create_test_image(30, 10)),
            ])
            summary = await pipeline.convert_all()
            assert summary.succeeded == 2
            assert len(list(pipeline.store.directory.iterdir())) == 2

        assert list(tmp_path.iterdir()) == []

    def test_unknown_tool(self):
        with pytest.raises(UnknownToolError):
            PipelineFactory.create_pipeline("gif-to-bmp", settings=PipelineSettings())


class TestArtifactStoreFactory:
    """Tests for choosing the artifact store from settings."""

    def test_memory_is_default(self):
        assert isinstance(ArtifactStoreFactory.create_store(PipelineSettings()), MemoryArtifactStore)

    def test_tempfile_backend(self, tmp_path):
        settings = PipelineSettings(artifact_backend="tempfile", artifact_dir=str(tmp_path))
        store = ArtifactStoreFactory.create_store(settings)
        assert isinstance(store, TempFileArtifactStore)
        assert store.directory.parent == tmp_path
        store.close()

    def test_s3_backend_requires_bucket(self):
        with pytest.raises(ConfigurationError, match="CONVERSION_S3_BUCKET"):
            ArtifactStoreFactory.create_store(PipelineSettings(artifact_backend="s3"))

    def test_s3_backend_uses_given_client(self):
        settings = PipelineSettings(artifact_backend="s3", s3_bucket="outputs")
        store = ArtifactStoreFactory.create_store(settings, s3_client=setup_test_s3_environment("outputs"))
        assert isinstance(store, S3ArtifactStore)
