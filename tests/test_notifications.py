"""Unit tests for the notification bus (appforge.notifications).

Tests cover:
- Event wire format (camelCase keys, omitted optionals)
- parse_event discrimination and rejection of unknown types
- NotificationBus fan-out, closed observers and failing observers
- QueueObserver and ConsoleObserver
"""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError
from rich.console import Console

from appforge.notifications import (
    ConsoleObserver,
    LogUpdate,
    NotificationBus,
    Observer,
    ProgressUpdate,
    QueueObserver,
    TaskCompleted,
    TaskError,
    parse_event,
)


class BrokenObserver(Observer):
    def __init__(self) -> None:
        self.attempts = 0

    @property
    def is_open(self) -> bool:
        return True

    async def send(self, payload: str) -> None:
        self.attempts += 1
        raise ConnectionError("socket closed")


# ---------------------------------------------------------------------------
# Wire format
# ---------------------------------------------------------------------------


class TestEventFormat:
    @pytest.mark.unit
    def test_progress_update_json(self):
        event = ProgressUpdate.of("t1", 40, "Creating component structure...")
        assert json.loads(event.to_json()) == {
            "type": "progress_update",
            "data": {"taskId": "t1", "progress": 40, "message": "Creating component structure..."},
        }

    @pytest.mark.unit
    def test_optional_fields_omitted(self):
        assert json.loads(ProgressUpdate.of("t1", 0).to_json())["data"] == {
            "taskId": "t1",
            "progress": 0,
        }
        assert json.loads(TaskCompleted.of("t1").to_json()) == {
            "type": "task_completed",
            "data": {"taskId": "t1"},
        }

    @pytest.mark.unit
    def test_error_and_log_json(self):
        assert json.loads(TaskError.of("t2", "boom").to_json()) == {
            "type": "task_error",
            "data": {"taskId": "t2", "error": "boom"},
        }
        assert json.loads(LogUpdate.of("t3", "[10:00:00] hi").to_json()) == {
            "type": "log_update",
            "data": {"taskId": "t3", "log": "[10:00:00] hi"},
        }

    @pytest.mark.unit
    def test_progress_bounds(self):
        with pytest.raises(ValidationError):
            ProgressUpdate.of("t1", 101)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "event",
        [
            ProgressUpdate.of("t1", 50, "half"),
            TaskCompleted.of("t1", {"filesGenerated": 12}),
            TaskError.of("t1", "failed"),
            LogUpdate.of("t1", "line"),
        ],
    )
    def test_parse_event_restores_type(self, event):
        parsed = parse_event(event.to_json())
        assert type(parsed) is type(event)
        assert parsed == event
        assert parsed.task_id == "t1"

    @pytest.mark.unit
    def test_parse_unknown_type(self):
        with pytest.raises(ValidationError):
            parse_event('{"type": "task_paused", "data": {"taskId": "t1"}}')


# ---------------------------------------------------------------------------
# Bus
# ---------------------------------------------------------------------------


class TestNotificationBus:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_broadcast_to_every_observer(self):
        bus = NotificationBus()
        first, second = QueueObserver(), QueueObserver()
        bus.connect(first)
        bus.connect(second)

        delivered = await bus.broadcast(ProgressUpdate.of("t1", 10))

        assert delivered == 2
        assert first.drain() == [ProgressUpdate.of("t1", 10)]
        assert second.drain() == [ProgressUpdate.of("t1", 10)]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_closed_observer_skipped(self):
        bus = NotificationBus()
        open_observer, closed_observer = QueueObserver(), QueueObserver()
        closed_observer.close()
        bus.connect(open_observer)
        bus.connect(closed_observer)

        assert await bus.broadcast(LogUpdate.of("t1", "x")) == 1
        assert closed_observer.queue.empty()
        assert bus.observer_count == 2

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failing_observer_dropped(self):
        bus = NotificationBus()
        broken, healthy = BrokenObserver(), QueueObserver()
        bus.connect(broken)
        bus.connect(healthy)

        assert await bus.broadcast(TaskError.of("t1", "x")) == 1
        assert await bus.broadcast(TaskError.of("t1", "y")) == 1

        assert broken.attempts == 1
        assert bus.observer_count == 1
        assert len(healthy.drain()) == 2

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_connect_is_idempotent_and_disconnect(self):
        bus = NotificationBus()
        observer = QueueObserver()
        bus.connect(observer)
        bus.connect(observer)
        assert bus.observer_count == 1

        bus.disconnect(observer)
        bus.disconnect(observer)
        assert bus.observer_count == 0
        assert await bus.broadcast(ProgressUpdate.of("t1", 5)) == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_observers(self):
        assert await NotificationBus().broadcast(ProgressUpdate.of("t1", 5)) == 0


# ---------------------------------------------------------------------------
# ConsoleObserver
# ---------------------------------------------------------------------------


class TestConsoleObserver:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_renders_with_stage_labels(self):
        console = Console(record=True, width=120, color_system=None)
        observer = ConsoleObserver(console=console, labels={"t1": "Security Guardian"})

        await observer.send(ProgressUpdate.of("t1", 30, "Scanning [files]...").to_json())
        await observer.send(TaskCompleted.of("t1").to_json())
        await observer.send(TaskError.of("t2", "boom").to_json())
        await observer.send(LogUpdate.of("t1", "[12:00:00] done").to_json())

        text = console.export_text()
        assert "Security Guardian" in text
        assert " 30%" in text
        assert "Scanning [files]..." in text
        assert "completed" in text
        assert "t2: boom" in text
        assert "[12:00:00] done" in text
        assert observer.is_open
