"""Item processing and batch orchestration for one tool session."""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ValidationError

from .error_handling import BatchOperationContextManager, classify_failure
from .exceptions import ConfigurationError, InvalidTransitionError
from .models import (
    BatchSummary,
    FailureKind,
    InputFile,
    ItemStatus,
    QueueItem,
    ToolSpec,
)
from .observability import LogContext, MetricsCollector, PerformanceMetrics
from .protocols import ArtifactStore, LoggerProtocol
from .queue import ConversionQueue
from .remote import RemoteFetchAdapter

OptionsInput = Union[None, BaseModel, Mapping[str, Any]]


@dataclass
class ProcessingContext:
    """Context for one item conversion."""

    correlation_id: str
    start_time: float = field(default_factory=time.time)
    log_context: LogContext = field(default_factory=LogContext)


def resolve_options(spec: ToolSpec, options: OptionsInput) -> BaseModel:
    """Turn caller-supplied options into the tool's options model."""
    if options is None:
        return spec.options_model()
    if isinstance(options, spec.options_model):
        return options
    if isinstance(options, BaseModel):
        options = options.model_dump()
    try:
        return spec.options_model.model_validate(dict(options))
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid options for {spec.name}: {exc}") from exc


class ItemProcessor:
    """Runs a tool's convert function on one pending item."""

    def __init__(
        self,
        store: ArtifactStore,
        logger: LoggerProtocol,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        self._store = store
        self._logger = logger
        self._metrics_collector = metrics_collector

    async def process(self, item: QueueItem, spec: ToolSpec, options: BaseModel) -> QueueItem:
        """
        Convert ``item`` and move it to DONE or FAILED.

        Failures are recorded on the item, never raised. The input is left
        untouched and no retry is attempted.

        Raises:
            InvalidTransitionError: If the item is not pending
        """
        if not item.is_pending:
            raise InvalidTransitionError(f"Item {item.id} is already {item.status.value}")

        log_context = LogContext(
            correlation_id=item.id[:12],
            operation="convert_item",
            component="item_processor",
            tool=spec.name,
        ).with_metadata(file=item.input.name)
        context = ProcessingContext(correlation_id=item.id, log_context=log_context)

        self._logger.debug("Converting item", log_context)
        error_message: Optional[str] = None
        try:
            output = await spec.convert(item.input, options)
            if not output.data:
                raise ValueError("encoder produced empty output")
            artifact = self._store.allocate(output)
        except Exception as exc:
            kind = classify_failure(exc)
            error_message = str(exc) or kind.value
            item.mark_failed(kind, error_message)
            self._logger.error(
                "Item conversion failed", log_context, kind=kind.value, error=error_message
            )
        else:
            item.mark_done(artifact)
            self._logger.info(
                "Item converted",
                log_context,
                output=artifact.name,
                size=artifact.size,
                processing_time_ms=round((time.time() - context.start_time) * 1000, 2),
            )

        if self._metrics_collector is not None:
            self._metrics_collector.record_metric(
                PerformanceMetrics(
                    operation=spec.name,
                    start_time=context.start_time,
                    end_time=time.time(),
                    success=item.status is ItemStatus.DONE,
                    error_message=error_message,
                    metadata={"file": item.input.name},
                )
            )
        return item


class BatchOrchestrator:
    """
    Drives one tool session: admission, sequential conversion and teardown.

    Items are converted one at a time in insertion order; a failed item never
    stops the run. Use as an async context manager to guarantee every output
    is released when the session ends.
    """

    def __init__(
        self,
        spec: ToolSpec,
        store: ArtifactStore,
        processor: ItemProcessor,
        logger: LoggerProtocol,
        fetcher: Optional[RemoteFetchAdapter] = None,
    ):
        self._spec = spec
        self._store = store
        self._processor = processor
        self._logger = logger
        self._fetcher = fetcher
        self._queue = ConversionQueue(spec.policy, store)
        self._cancel_requested = False

    async def __aenter__(self) -> "BatchOrchestrator":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        try:
            self.clear_all()
        finally:
            self._store.close()
        return False

    @property
    def spec(self) -> ToolSpec:
        return self._spec

    @property
    def store(self) -> ArtifactStore:
        return self._store

    @property
    def queue(self) -> ConversionQueue:
        return self._queue

    @property
    def pending_count(self) -> int:
        return self._queue.pending_count

    def snapshot(self) -> Tuple[QueueItem, ...]:
        return self._queue.snapshot()

    def add_files(self, files: Iterable[InputFile]) -> List[QueueItem]:
        """Validate and enqueue local files; overflow beyond capacity is dropped."""
        admitted = self._queue.admit(files)
        rejected = sum(1 for item in admitted if item.status is ItemStatus.FAILED)
        self._logger.info(
            f"Admitted {len(admitted)} file(s) to {self._spec.name}",
            rejected=rejected,
            queued=len(self._queue),
        )
        return admitted

    async def add_from_url(self, url: str) -> List[QueueItem]:
        """
        Fetch ``url`` and admit it like a local file.

        Raises:
            RemoteFetchError: The URL was rejected; nothing is queued
            ConfigurationError: The session has no fetch adapter
        """
        if self._fetcher is None:
            raise ConfigurationError(f"{self._spec.name} session has no remote fetcher")
        file = await self._fetcher.fetch(url, self._spec.policy)
        return self.add_files([file])

    def cancel(self) -> None:
        """Stop the current run after the in-flight item finishes."""
        self._cancel_requested = True

    async def convert_all(self, options: OptionsInput = None) -> BatchSummary:
        """
        Convert every pending item, sequentially, in insertion order.

        Args:
            options: Tool parameters as a model instance or a mapping;
                defaults of the tool's options model when omitted

        Returns:
            Counts of the run; ``cancelled`` is the number left pending
        """
        resolved = resolve_options(self._spec, options)
        self._cancel_requested = False
        start_time = time.time()
        summary = BatchSummary()

        pending = self._queue.pending()
        if not pending:
            self._logger.debug(f"No pending items in {self._spec.name}")
            return summary

        with BatchOperationContextManager(f"{self._spec.name} conversion") as batch:
            for index, item in enumerate(pending):
                if self._cancel_requested:
                    summary.cancelled = len(pending) - index
                    self._logger.warning(
                        "Conversion cancelled", remaining=summary.cancelled
                    )
                    break
                await self._processor.process(item, self._spec, resolved)
                summary.processed += 1
                if item.status is ItemStatus.DONE:
                    summary.succeeded += 1
                else:
                    summary.failed += 1
                    batch.add_error(item.failure_reason or "", item.input.name)

        summary.processing_time = time.time() - start_time
        return summary

    def remove(self, item_id: str) -> bool:
        """Remove one item, releasing its output."""
        return self._queue.remove(lambda item: item.id == item_id) > 0

    def clear_all(self) -> int:
        """
        Release every output and empty the queue.

        Items are dropped even when a release fails; the failures then surface
        together as one ArtifactStoreError.
        """
        removed = self._queue.clear()
        if removed:
            self._logger.debug(f"Cleared {removed} item(s) from {self._spec.name}")
        return removed

    def results(self) -> Dict[str, List[QueueItem]]:
        """Items grouped by status, each group in insertion order."""
        grouped: Dict[str, List[QueueItem]] = {status.value: [] for status in ItemStatus}
        for item in self._queue.snapshot():
            grouped[item.status.value].append(item)
        return grouped

    def failures_by_kind(self) -> Dict[FailureKind, int]:
        counts: Dict[FailureKind, int] = {}
        for item in self._queue.snapshot():
            if item.failure is not None:
                counts[item.failure.kind] = counts.get(item.failure.kind, 0) + 1
        return counts
