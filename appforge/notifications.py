"""Notification bus for generation progress.

Four JSON event shapes are pushed to connected observers, each with a
``type`` discriminator and a ``data`` payload:

- ``progress_update {taskId, progress, message?}``
- ``task_completed {taskId, result?}``
- ``task_error {taskId, error}``
- ``log_update {taskId, log}``

Delivery is best-effort and at-most-once: no buffering, no acknowledgement.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from rich.console import Console
from rich.markup import escape

from appforge.utils import console as default_console
from appforge.utils import print_warning


# ---------------------------------------------------------------------------
# Event payloads
# ---------------------------------------------------------------------------

class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    task_id: str = Field(..., alias="taskId")


class ProgressData(_Payload):
    progress: int = Field(..., ge=0, le=100)
    message: Optional[str] = None


class CompletedData(_Payload):
    result: Optional[dict[str, Any]] = None


class ErrorData(_Payload):
    error: str


class LogData(_Payload):
    log: str


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    def to_json(self) -> str:
        """Wire form: camelCase keys, unset optionals omitted."""
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @property
    def task_id(self) -> str:
        return self.data.task_id  # type: ignore[attr-defined]


class ProgressUpdate(_Event):
    type: Literal["progress_update"] = "progress_update"
    data: ProgressData

    @classmethod
    def of(cls, task_id: str, progress: int, message: Optional[str] = None) -> "ProgressUpdate":
        return cls(data=ProgressData(task_id=task_id, progress=progress, message=message))


class TaskCompleted(_Event):
    type: Literal["task_completed"] = "task_completed"
    data: CompletedData

    @classmethod
    def of(cls, task_id: str, result: Optional[dict[str, Any]] = None) -> "TaskCompleted":
        return cls(data=CompletedData(task_id=task_id, result=result))


class TaskError(_Event):
    type: Literal["task_error"] = "task_error"
    data: ErrorData

    @classmethod
    def of(cls, task_id: str, error: str) -> "TaskError":
        return cls(data=ErrorData(task_id=task_id, error=error))


class LogUpdate(_Event):
    type: Literal["log_update"] = "log_update"
    data: LogData

    @classmethod
    def of(cls, task_id: str, log: str) -> "LogUpdate":
        return cls(data=LogData(task_id=task_id, log=log))


Event = Annotated[
    Union[ProgressUpdate, TaskCompleted, TaskError, LogUpdate],
    Field(discriminator="type"),
]

_EVENT_ADAPTER: TypeAdapter[Any] = TypeAdapter(Event)


def parse_event(text: str | bytes) -> Union[ProgressUpdate, TaskCompleted, TaskError, LogUpdate]:
    """Decode a serialised event back into its model.

    Raises:
        pydantic.ValidationError: On an unknown ``type`` or malformed payload.
    """
    return _EVENT_ADAPTER.validate_json(text)


# ---------------------------------------------------------------------------
# Observers
# ---------------------------------------------------------------------------

class Observer(ABC):
    """A connected receiver of serialised events."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether the observer currently accepts events."""

    @abstractmethod
    async def send(self, payload: str) -> None:
        """Deliver one serialised event."""


class QueueObserver(Observer):
    """Collects serialised events on an ``asyncio.Queue``.

    Used by tests and by embedding applications that consume events from
    their own loop.
    """

    def __init__(self, maxsize: int = 0) -> None:
        self.queue: asyncio.Queue[str] = asyncio.Queue(maxsize=maxsize)
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    def close(self) -> None:
        self._open = False

    async def send(self, payload: str) -> None:
        self.queue.put_nowait(payload)

    def drain(self) -> list[Union[ProgressUpdate, TaskCompleted, TaskError, LogUpdate]]:
        """Pop and decode every queued event."""
        events = []
        while not self.queue.empty():
            events.append(parse_event(self.queue.get_nowait()))
        return events


class ConsoleObserver(Observer):
    """Renders events on a Rich console for the CLI.

    ``labels`` maps task ids to the stage names shown on screen; unknown ids
    are printed as-is.
    """

    def __init__(self, console: Console | None = None, labels: dict[str, str] | None = None) -> None:
        self.console = console or default_console
        self.labels: dict[str, str] = dict(labels or {})

    @property
    def is_open(self) -> bool:
        return True

    async def send(self, payload: str) -> None:
        event = parse_event(payload)
        label = escape(self.labels.get(event.task_id, event.task_id))

        if isinstance(event, ProgressUpdate):
            message = escape(event.data.message or "")
            self.console.print(
                f"  [cyan]{label}[/cyan] [bold]{event.data.progress:>3}%[/bold] {message}"
            )
        elif isinstance(event, TaskCompleted):
            self.console.print(f"  [bold green]✓ {label} completed[/bold green]")
        elif isinstance(event, TaskError):
            self.console.print(f"  [bold red]✗ {label}: {escape(event.data.error)}[/bold red]")
        elif isinstance(event, LogUpdate):
            self.console.print(f"  [dim]{label}: {escape(event.data.log)}[/dim]")


# ---------------------------------------------------------------------------
# Bus
# ---------------------------------------------------------------------------

class NotificationBus:
    """Fan-out broadcaster of generation events.

    Observers may connect and disconnect at any time.  An observer whose
    ``send`` raises is disconnected; the broadcast continues with the rest.
    """

    def __init__(self) -> None:
        self._observers: list[Observer] = []

    def connect(self, observer: Observer) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def disconnect(self, observer: Observer) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    async def broadcast(self, event: _Event) -> int:
        """Serialise *event* once and deliver it to every open observer.

        Returns:
            The number of observers the event was delivered to.
        """
        payload = event.to_json()
        delivered = 0
        for observer in list(self._observers):
            if not observer.is_open:
                continue
            try:
                await observer.send(payload)
            except Exception as exc:
                print_warning(f"Dropping observer {type(observer).__name__}: {exc}")
                self.disconnect(observer)
                continue
            delivered += 1
        return delivered
