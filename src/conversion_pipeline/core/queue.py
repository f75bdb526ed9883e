"""The conversion queue: admitted items in insertion order."""

from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from .exceptions import ArtifactStoreError
from .logging_config import get_logger
from .models import ConversionPolicy, InputFile, QueueItem
from .protocols import ArtifactStore
from .validation import validate


class ConversionQueue:
    """
    Mutable list of queue items owned by one tool session.

    Items never change position. Capacity is fixed by the policy; candidates
    beyond it are dropped without a trace in the queue. Removing an item
    releases its output artifact through the store first.
    """

    def __init__(self, policy: ConversionPolicy, store: ArtifactStore):
        self._policy = policy
        self._store = store
        self._items: List[QueueItem] = []
        self._logger = get_logger("queue")

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[QueueItem]:
        return iter(tuple(self._items))

    @property
    def policy(self) -> ConversionPolicy:
        return self._policy

    @property
    def remaining_capacity(self) -> int:
        return max(0, self._policy.max_item_count - len(self._items))

    @property
    def pending_count(self) -> int:
        return sum(1 for item in self._items if item.is_pending)

    def admit(self, files: Iterable[InputFile]) -> List[QueueItem]:
        """
        Validate and enqueue candidates in order while capacity remains.

        Rejected candidates are queued as FAILED with the validator's reason
        and use a slot like accepted ones.

        Returns:
            The newly queued items
        """
        admitted: List[QueueItem] = []
        dropped = 0
        for file in files:
            if self.remaining_capacity == 0:
                dropped += 1
                continue
            item = QueueItem(input=file)
            result = validate(file, self._policy)
            if not result.accepted:
                item.mark_failed(result.kind, result.message)
            self._items.append(item)
            admitted.append(item)

        if dropped:
            self._logger.debug(f"Queue full, dropped {dropped} candidate(s)")
        return admitted

    def snapshot(self) -> Tuple[QueueItem, ...]:
        """
        Ordered tuple of the queued items.

        The tuple is detached from the queue, the items are not: they are the
        live objects, and only the item processor moves them between states.
        """
        return tuple(self._items)

    def pending(self) -> List[QueueItem]:
        return [item for item in self._items if item.is_pending]

    def get(self, item_id: str) -> Optional[QueueItem]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def remove(self, predicate: Callable[[QueueItem], bool]) -> int:
        """
        Release and drop every item matching ``predicate``.

        Matching items leave the queue even when their release fails; the
        failures are reported together once every item has been handled.

        Raises:
            ArtifactStoreError: If one or more releases failed
        """
        kept: List[QueueItem] = []
        failures: List[str] = []
        removed = 0
        for item in self._items:
            if not predicate(item):
                kept.append(item)
                continue
            removed += 1
            try:
                self._release(item)
            except ArtifactStoreError as exc:
                failures.append(f"{item.input.name}: {exc}")
        self._items = kept

        if failures:
            self._logger.warning(f"{len(failures)} artifact release(s) failed")
            raise ArtifactStoreError(
                f"Released {removed - len(failures)} of {removed} item(s); failed: "
                + "; ".join(failures)
            )
        return removed

    def clear(self) -> int:
        """Release every item's resources and empty the queue."""
        return self.remove(lambda item: True)

    def _release(self, item: QueueItem) -> None:
        if item.artifact is not None and not item.artifact.released:
            self._store.release(item.artifact)
