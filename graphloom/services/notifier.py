"""
Update notifier - publishes snapshot notifications to observers.

Delivery is fire-and-forget: each observer call runs in its own task, and
an observer that fails is logged without affecting the publisher or the
other observers.
"""

import asyncio

from graphloom.models.events import SnapshotReplaced, SubsetHighlighted
from graphloom.models.graph import GraphSnapshot
from graphloom.utils.logger import get_logger

logger = get_logger(__name__)

Notification = SnapshotReplaced | SubsetHighlighted


class GraphObserver:
    """
    Consumer of engine notifications.

    Override the handlers you care about; the defaults ignore the event.
    """

    async def on_snapshot_replaced(self, event: SnapshotReplaced) -> None:
        pass

    async def on_subset_highlighted(self, event: SubsetHighlighted) -> None:
        pass


class QueueObserver(GraphObserver):
    """
    Observer that forwards notifications into a consumer-owned queue.

    When the queue is full the oldest notification is dropped.
    """

    def __init__(self, maxsize: int = 100):
        self.queue: asyncio.Queue[Notification] = asyncio.Queue(maxsize=maxsize)

    async def on_snapshot_replaced(self, event: SnapshotReplaced) -> None:
        self._put(event)

    async def on_subset_highlighted(self, event: SubsetHighlighted) -> None:
        self._put(event)

    def _put(self, event: Notification) -> None:
        if self.queue.full():
            self.queue.get_nowait()
        self.queue.put_nowait(event)


class UpdateNotifier:
    """Publishes "snapshot replaced" and "subset highlighted" notifications."""

    def __init__(self, highlight_limit: int = 50):
        """
        Initialize notifier.

        Args:
            highlight_limit: Maximum node IDs carried by a highlight notification
        """
        self.highlight_limit = highlight_limit
        self._observers: list[GraphObserver] = []
        self._pending: set[asyncio.Task] = set()

    def subscribe(self, observer: GraphObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: GraphObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def publish_snapshot(self, snapshot: GraphSnapshot, version: int = 0) -> None:
        """
        Notify observers that the full snapshot was replaced.

        Each observer receives its own copy of the snapshot.
        """
        for observer in list(self._observers):
            event = SnapshotReplaced(snapshot=snapshot.model_copy(deep=True), version=version)
            self._dispatch(observer, observer.on_snapshot_replaced, event)

        logger.debug(
            f"Published snapshot_replaced to {len(self._observers)} observers",
            extra={"version": version, "nodes": len(snapshot.nodes)},
        )

    def publish_highlight(self, node_ids: list[str], link_keys: list[str] | None = None) -> None:
        """Notify observers that a subset of nodes was looked up."""
        bounded = list(node_ids)[: self.highlight_limit]
        if len(bounded) < len(node_ids):
            logger.debug(
                f"Highlight truncated to {self.highlight_limit} of {len(node_ids)} nodes",
                extra={"requested": len(node_ids), "limit": self.highlight_limit},
            )

        for observer in list(self._observers):
            event = SubsetHighlighted(node_ids=list(bounded), link_keys=list(link_keys or []))
            self._dispatch(observer, observer.on_subset_highlighted, event)

    def _dispatch(self, observer: GraphObserver, handler, event: Notification) -> None:
        task = asyncio.create_task(self._deliver(observer, handler, event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, observer: GraphObserver, handler, event: Notification) -> None:
        try:
            await handler(event)
        except Exception as e:
            logger.error(
                f"Observer {type(observer).__name__} failed on {event.kind.value}: {e}",
                extra={
                    "observer": type(observer).__name__,
                    "event": event.kind.value,
                    "error_type": type(e).__name__,
                },
            )

    async def drain(self) -> None:
        """Wait until every pending delivery has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
