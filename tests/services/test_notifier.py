"""
Tests for the update notifier.
"""

import pytest

from graphloom.models.events import NotificationKind, SnapshotReplaced, SubsetHighlighted
from graphloom.models.graph import GraphNode, GraphSnapshot
from graphloom.services.notifier import GraphObserver, QueueObserver, UpdateNotifier


class RecordingObserver(GraphObserver):
    def __init__(self):
        self.snapshots: list[SnapshotReplaced] = []
        self.highlights: list[SubsetHighlighted] = []

    async def on_snapshot_replaced(self, event: SnapshotReplaced) -> None:
        self.snapshots.append(event)

    async def on_subset_highlighted(self, event: SubsetHighlighted) -> None:
        self.highlights.append(event)


class FailingObserver(GraphObserver):
    async def on_snapshot_replaced(self, event: SnapshotReplaced) -> None:
        raise RuntimeError("observer crashed")


def snapshot_of(*names: str) -> GraphSnapshot:
    return GraphSnapshot(nodes=[GraphNode(id=name, name=name) for name in names])


@pytest.mark.unit
@pytest.mark.asyncio
class TestUpdateNotifier:
    """Test publishing and delivery."""

    async def test_subscribe_once(self, notifier):
        observer = RecordingObserver()

        notifier.subscribe(observer)
        notifier.subscribe(observer)

        assert notifier.observer_count == 1

    async def test_unsubscribe(self, notifier):
        observer = RecordingObserver()
        notifier.subscribe(observer)

        notifier.unsubscribe(observer)
        notifier.publish_snapshot(snapshot_of("A"))
        await notifier.drain()

        assert observer.snapshots == []
        assert notifier.observer_count == 0

    async def test_publish_snapshot(self, notifier):
        observer = RecordingObserver()
        notifier.subscribe(observer)

        notifier.publish_snapshot(snapshot_of("A", "B"), version=3)
        await notifier.drain()

        assert len(observer.snapshots) == 1
        event = observer.snapshots[0]
        assert event.kind == NotificationKind.SNAPSHOT_REPLACED
        assert event.version == 3
        assert [node.id for node in event.snapshot.nodes] == ["A", "B"]

    async def test_each_observer_gets_own_copy(self, notifier):
        first, second = RecordingObserver(), RecordingObserver()
        notifier.subscribe(first)
        notifier.subscribe(second)
        original = snapshot_of("A")

        notifier.publish_snapshot(original)
        await notifier.drain()

        first.snapshots[0].snapshot.nodes.clear()
        assert [node.id for node in second.snapshots[0].snapshot.nodes] == ["A"]
        assert [node.id for node in original.nodes] == ["A"]

    async def test_failing_observer_isolated(self, notifier):
        healthy = RecordingObserver()
        notifier.subscribe(FailingObserver())
        notifier.subscribe(healthy)

        notifier.publish_snapshot(snapshot_of("A"))
        await notifier.drain()

        assert len(healthy.snapshots) == 1

    async def test_publish_without_observers(self, notifier):
        notifier.publish_snapshot(snapshot_of("A"))
        notifier.publish_highlight(["A"])
        await notifier.drain()

    async def test_highlight_bounded(self):
        notifier = UpdateNotifier(highlight_limit=2)
        observer = RecordingObserver()
        notifier.subscribe(observer)

        notifier.publish_highlight(["A", "B", "C"], ["A-B"])
        await notifier.drain()

        event = observer.highlights[0]
        assert event.kind == NotificationKind.SUBSET_HIGHLIGHTED
        assert event.node_ids == ["A", "B"]
        assert event.link_keys == ["A-B"]

    async def test_delivery_is_asynchronous(self, notifier):
        observer = RecordingObserver()
        notifier.subscribe(observer)

        notifier.publish_snapshot(snapshot_of("A"))

        assert observer.snapshots == []
        await notifier.drain()
        assert len(observer.snapshots) == 1


@pytest.mark.unit
@pytest.mark.asyncio
class TestQueueObserver:
    """Test the queue-backed observer."""

    async def test_events_queued_in_order(self, notifier):
        observer = QueueObserver()
        notifier.subscribe(observer)

        notifier.publish_snapshot(snapshot_of("A"), version=1)
        await notifier.drain()
        notifier.publish_highlight(["A"])
        await notifier.drain()

        first = observer.queue.get_nowait()
        second = observer.queue.get_nowait()
        assert isinstance(first, SnapshotReplaced)
        assert isinstance(second, SubsetHighlighted)

    async def test_full_queue_drops_oldest(self):
        observer = QueueObserver(maxsize=2)

        for name in ("A", "B", "C"):
            await observer.on_subset_highlighted(SubsetHighlighted(node_ids=[name]))

        assert observer.queue.qsize() == 2
        assert observer.queue.get_nowait().node_ids == ["B"]
        assert observer.queue.get_nowait().node_ids == ["C"]
