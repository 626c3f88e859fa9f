"""Task store: durable record of projects and their stage tasks.

The orchestrator only depends on the :class:`TaskStore` interface.  Two
implementations ship with appforge:

- :class:`MemoryTaskStore` keeps records in process memory.
- :class:`JsonTaskStore` additionally persists a JSON snapshot after every
  write and can reload it on start-up.

All reads return copies, so callers never mutate stored records in place.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from appforge.models import Project, Task
from appforge.utils import load_json, print_debug, save_json


class TaskNotFoundError(KeyError):
    """No task with the requested id."""


class ProjectNotFoundError(KeyError):
    """No project with the requested id."""


class TaskStore(ABC):
    """Create/read/update access to projects and tasks keyed by id."""

    @abstractmethod
    async def create_project(self, project: Project) -> Project: ...

    @abstractmethod
    async def get_project(self, project_id: str) -> Project: ...

    @abstractmethod
    async def update_project(self, project_id: str, **changes: Any) -> Project: ...

    @abstractmethod
    async def list_projects(self) -> list[Project]: ...

    @abstractmethod
    async def delete_project(self, project_id: str) -> None: ...

    @abstractmethod
    async def create_task(self, task: Task) -> Task: ...

    @abstractmethod
    async def get_task(self, task_id: str) -> Task: ...

    @abstractmethod
    async def update_task(self, task_id: str, **changes: Any) -> Task: ...

    @abstractmethod
    async def append_log(self, task_id: str, line: str) -> Task: ...

    @abstractmethod
    async def list_tasks(self, project_id: str) -> list[Task]: ...


class MemoryTaskStore(TaskStore):
    """Dict-backed store; an ``asyncio.Lock`` serialises writes."""

    def __init__(self) -> None:
        self._projects: dict[str, Project] = {}
        self._tasks: dict[str, Task] = {}
        self._lock = asyncio.Lock()

    # -- Projects ----------------------------------------------------------

    async def create_project(self, project: Project) -> Project:
        async with self._lock:
            self._projects[project.id] = project
            await self._after_write()
        return project.model_copy()

    async def get_project(self, project_id: str) -> Project:
        try:
            return self._projects[project_id].model_copy()
        except KeyError:
            raise ProjectNotFoundError(project_id) from None

    async def update_project(self, project_id: str, **changes: Any) -> Project:
        async with self._lock:
            current = self._projects.get(project_id)
            if current is None:
                raise ProjectNotFoundError(project_id)
            updated = current.model_copy(update={**changes, "updated_at": _now()})
            self._projects[project_id] = updated
            await self._after_write()
        return updated.model_copy()

    async def list_projects(self) -> list[Project]:
        return [p.model_copy() for p in self._projects.values()]

    async def delete_project(self, project_id: str) -> None:
        async with self._lock:
            if self._projects.pop(project_id, None) is None:
                raise ProjectNotFoundError(project_id)
            for task_id in [t.id for t in self._tasks.values() if t.project_id == project_id]:
                del self._tasks[task_id]
            await self._after_write()

    # -- Tasks -------------------------------------------------------------

    async def create_task(self, task: Task) -> Task:
        async with self._lock:
            if task.project_id not in self._projects:
                raise ProjectNotFoundError(task.project_id)
            self._tasks[task.id] = task
            await self._after_write()
        return task.model_copy(deep=True)

    async def get_task(self, task_id: str) -> Task:
        try:
            return self._tasks[task_id].model_copy(deep=True)
        except KeyError:
            raise TaskNotFoundError(task_id) from None

    async def update_task(self, task_id: str, **changes: Any) -> Task:
        async with self._lock:
            current = self._tasks.get(task_id)
            if current is None:
                raise TaskNotFoundError(task_id)
            updated = Task.model_validate(
                {**current.model_dump(), **changes, "updated_at": _now()}
            )
            self._tasks[task_id] = updated
            await self._after_write()
        return updated.model_copy(deep=True)

    async def append_log(self, task_id: str, line: str) -> Task:
        async with self._lock:
            current = self._tasks.get(task_id)
            if current is None:
                raise TaskNotFoundError(task_id)
            updated = current.model_copy(
                update={"logs": [*current.logs, line], "updated_at": _now()}
            )
            self._tasks[task_id] = updated
            await self._after_write()
        return updated.model_copy(deep=True)

    async def list_tasks(self, project_id: str) -> list[Task]:
        """Tasks of *project_id* in creation order."""
        return [
            t.model_copy(deep=True) for t in self._tasks.values() if t.project_id == project_id
        ]

    # -- Hooks -------------------------------------------------------------

    async def _after_write(self) -> None:
        """Called with the write lock held after every mutation."""


class JsonTaskStore(MemoryTaskStore):
    """Memory store that mirrors its contents to a JSON file.

    Args:
        path: JSON file to write after each mutation and read on :meth:`load`.
    """

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)

    async def load(self) -> int:
        """Replace the in-memory contents with the file's records.

        Returns:
            The number of projects loaded; 0 when the file does not exist.
        """
        if not self.path.exists():
            return 0
        data = await asyncio.to_thread(load_json, self.path)
        async with self._lock:
            self._projects = {
                p["id"]: Project.model_validate(p) for p in data.get("projects", [])
            }
            self._tasks = {t["id"]: Task.model_validate(t) for t in data.get("tasks", [])}
        print_debug("store", f"Loaded {len(self._projects)} project(s) from {self.path}")
        return len(self._projects)

    async def _after_write(self) -> None:
        snapshot = {
            "projects": [p.model_dump(mode="json") for p in self._projects.values()],
            "tasks": [t.model_dump(mode="json") for t in self._tasks.values()],
        }
        await save_json(snapshot, self.path)


def _now() -> datetime:
    return datetime.now(timezone.utc)
