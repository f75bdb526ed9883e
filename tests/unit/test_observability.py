"""Unit tests for structured logging and metrics."""

from unittest.mock import patch

from conversion_pipeline.core.factories import PipelineFactory
from conversion_pipeline.core.logging_config import FORMATS
from conversion_pipeline.core.observability import (
    LogContext,
    LogLevel,
    MetricsCollector,
    ObservabilityConfig,
    PerformanceMetrics,
    StructuredLogger,
    create_logger,
    create_metrics_collector,
)
from conversion_pipeline.core.settings import PipelineSettings


class TestLogContext:
    """Tests for LogContext."""

    def test_with_operation_keeps_identity(self):
        context = LogContext(correlation_id="abc", component="queue", tool="png-to-jpg")
        derived = context.with_operation("admit")
        assert derived.correlation_id == "abc"
        assert derived.operation == "admit"
        assert derived.tool == "png-to-jpg"
        assert context.operation == ""

    def test_with_metadata_does_not_mutate(self):
        context = LogContext(metadata={"file": "a.png"})
        derived = context.with_metadata(size=3)
        assert derived.metadata == {"file": "a.png", "size": 3}
        assert context.metadata == {"file": "a.png"}


class TestStructuredLogger:
    """Tests for StructuredLogger message rendering."""

    def test_message_with_context(self):
        logger = StructuredLogger("test-structured-logger", "DEBUG")
        context = LogContext(
            correlation_id="abc", operation="convert_item", tool="png-to-jpg"
        ).with_metadata(file="a.png")

        with patch.object(logger._logger, "info") as info:
            logger.info("Item converted", context, size=10)

        info.assert_called_once_with(
            "[png-to-jpg] [convert_item] [abc] Item converted (file=a.png, size=10)"
        )

    def test_message_without_context(self):
        logger = StructuredLogger("test-structured-plain")
        with patch.object(logger._logger, "warning") as warning:
            logger.warning("Conversion cancelled", remaining=2)
        warning.assert_called_once_with("Conversion cancelled (remaining=2)")

    def test_level_applied(self):
        logger = create_logger("test-structured-level", ObservabilityConfig(log_level=LogLevel.ERROR))
        assert logger._logger.level == 40

    def test_format_type_passed_to_handler(self):
        logger = StructuredLogger("test-structured-simple", format_type="simple")
        assert logger._logger.handlers[0].formatter._fmt == FORMATS["simple"]

    def test_factory_uses_settings_format(self):
        settings = PipelineSettings(log_format="simple")
        pipeline = PipelineFactory.create_pipeline("png-to-jpg", settings=settings)
        handler = pipeline._logger._logger.handlers[0]
        assert handler.formatter._fmt == FORMATS["simple"]


class TestMetricsCollector:
    """Tests for MetricsCollector."""

    def test_summary(self):
        collector = MetricsCollector()
        collector.record_metric(PerformanceMetrics("resize", 0.0, 1.0, True))
        collector.record_metric(PerformanceMetrics("resize", 1.0, 4.0, False, "boom"))
        collector.record_metric(PerformanceMetrics("hash", 0.0, 0.5, True))

        summary = collector.get_summary("resize")

        assert summary["total_operations"] == 2
        assert summary["failed_operations"] == 1
        assert summary["success_rate"] == 0.5
        assert summary["max_duration"] == 3.0
        assert collector.get_metrics()[2].duration_ms == 500.0

    def test_empty_summary(self):
        assert MetricsCollector().get_summary() == {}

    def test_disabled_by_config(self):
        assert create_metrics_collector(ObservabilityConfig(enable_metrics=False)) is None
        assert isinstance(create_metrics_collector(ObservabilityConfig()), MetricsCollector)
