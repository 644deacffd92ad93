# smarttask/services/tasks.py
from __future__ import annotations

import re
import uuid
from contextlib import contextmanager
from datetime import date, datetime, tzinfo
from typing import Callable, Dict, Iterator, List, Optional, Union

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from core.logs import get_logger
from core.settings import CALENDAR
from helpers.calendar_grid import move_to_slot, tasks_on_day
from models.task import Task
from storage.db import get_session
from utils.datetime_utils import ensure_utc, utc_now

log = get_logger("tasks")

TaskId = Union[uuid.UUID, str]

_KEEP = object()


class TaskStoreError(RuntimeError):
    """A task could not be read or written; the UI reports it and carries on."""


class TaskNotFoundError(TaskStoreError):
    pass


def _as_uuid(task_id: TaskId) -> uuid.UUID:
    if isinstance(task_id, uuid.UUID):
        return task_id
    try:
        return uuid.UUID(str(task_id))
    except ValueError as exc:
        raise TaskNotFoundError(f"Malformed task id: {task_id!r}") from exc


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValueError("Task name is required")
    return cleaned


class TaskService:
    _listeners = {
        "after_create": set(),
        "after_update": set(),
        "after_delete": set(),
    }

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self._session_factory = session_factory or get_session

    @classmethod
    def subscribe(cls, event: str, callback):
        if event not in cls._listeners:
            raise ValueError(f"Unsupported event: {event}")
        cls._listeners[event].add(callback)

    @classmethod
    def unsubscribe(cls, event: str, callback):
        if event not in cls._listeners:
            return
        cls._listeners[event].discard(callback)

    @classmethod
    def _emit(cls, event: str, task_id: uuid.UUID):
        listeners = list(cls._listeners.get(event, []))
        for listener in listeners:
            try:
                listener(task_id)
            except Exception:
                log.exception("Listener for %s failed", event)

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        try:
            with self._session_factory() as s:
                yield s
        except SQLAlchemyError as exc:
            log.exception("Task store failed to %s", action)
            raise TaskStoreError(f"Could not {action}: {exc}") from exc

    # ---------- CRUD ----------
    def add(
        self,
        name: str,
        description: Optional[str] = "",
        deadline: Optional[datetime] = None,
        *,
        parent_id: Optional[TaskId] = None,
        emit: bool = True,
    ) -> Task:
        cleaned = _clean_name(name)
        parent_uuid = _as_uuid(parent_id) if parent_id is not None else None
        with self._session("save task") as s:
            position = 0
            if parent_uuid is not None:
                if s.get(Task, parent_uuid) is None:
                    raise TaskNotFoundError(f"Parent task {parent_uuid} does not exist")
                position = s.exec(
                    select(func.count(Task.id)).where(Task.parent_id == parent_uuid)
                ).one()
            t = Task(
                name=cleaned,
                description=(description or "").strip(),
                deadline=ensure_utc(deadline),
                parent_id=parent_uuid,
                position=position,
            )
            s.add(t)
            s.commit()
            s.refresh(t)
        log.debug("Task created: %s", t.id)
        if emit:
            self._emit("after_create", t.id)
        return t

    def add_subtask(
        self,
        parent_id: TaskId,
        name: str,
        description: Optional[str] = "",
        deadline: Optional[datetime] = None,
    ) -> Task:
        return self.add(name, description, deadline, parent_id=parent_id)

    def get(self, task_id: TaskId) -> Optional[Task]:
        try:
            key = _as_uuid(task_id)
        except TaskNotFoundError:
            return None
        with self._session("load task") as s:
            return s.get(Task, key)

    def update(
        self,
        task_id: TaskId,
        *,
        name=_KEEP,
        description=_KEEP,
        deadline=_KEEP,
        emit: bool = True,
    ) -> Optional[Task]:
        """Change only the given fields. ``deadline=None`` clears the deadline."""

        key = _as_uuid(task_id)
        new_name = _clean_name(name) if name is not _KEEP else None
        with self._session("save task") as s:
            t = s.get(Task, key)
            if t is None:
                return None
            if new_name is not None:
                t.name = new_name
            if description is not _KEEP:
                t.description = (description or "").strip()
            if deadline is not _KEEP:
                t.deadline = ensure_utc(deadline)
            t.updated_at = utc_now()
            s.add(t)
            s.commit()
            s.refresh(t)
        log.debug("Task updated: %s", t.id)
        if emit:
            self._emit("after_update", t.id)
        return t

    def delete(self, task_id: TaskId, *, emit: bool = True) -> int:
        """Delete the task and every task below it. Returns the number removed."""

        key = _as_uuid(task_id)
        with self._session("delete task") as s:
            root = s.get(Task, key)
            if root is None:
                return 0
            doomed: List[Task] = [root]
            frontier = [root.id]
            while frontier:
                children = list(s.exec(select(Task).where(Task.parent_id.in_(frontier))))
                doomed.extend(children)
                frontier = [c.id for c in children]
            for t in reversed(doomed):
                s.delete(t)
            s.commit()
        log.debug("Task deleted: %s (%d rows)", key, len(doomed))
        if emit:
            self._emit("after_delete", key)
        return len(doomed)

    # ---------- queries ----------
    def _ordered(self):
        return select(Task).order_by(
            case((Task.deadline == None, 1), else_=0),  # noqa: E711
            Task.deadline.asc(),
            Task.created_at.asc(),
        )

    def list_all(self) -> List[Task]:
        with self._session("list tasks") as s:
            return list(s.exec(self._ordered()))

    def list_roots(self) -> List[Task]:
        with self._session("list tasks") as s:
            return list(s.exec(self._ordered().where(Task.parent_id == None)))  # noqa: E711

    def list_unscheduled(self) -> List[Task]:
        with self._session("list tasks") as s:
            stmt = select(Task).where(Task.deadline == None).order_by(Task.created_at.desc())  # noqa: E711
            return list(s.exec(stmt))

    def subtasks(self, task_id: TaskId) -> List[Task]:
        key = _as_uuid(task_id)
        with self._session("list subtasks") as s:
            stmt = (
                select(Task)
                .where(Task.parent_id == key)
                .order_by(Task.position.asc(), Task.created_at.asc())
            )
            return list(s.exec(stmt))

    def subtask_counts(self) -> Dict[uuid.UUID, int]:
        with self._session("count subtasks") as s:
            stmt = (
                select(Task.parent_id, func.count(Task.id))
                .where(Task.parent_id != None)  # noqa: E711
                .group_by(Task.parent_id)
            )
            return {parent: count for parent, count in s.exec(stmt)}

    def search(
        self,
        query: str = "",
        *,
        day: Optional[date] = None,
        tz: Optional[tzinfo] = None,
        roots_only: bool = False,
    ) -> List[Task]:
        """Tasks whose name or description contains every word of ``query``.

        With ``day`` only tasks due on that calendar day (in ``tz``) remain.
        """
        tasks = self.list_roots() if roots_only else self.list_all()
        if day is not None:
            if tz is None:
                raise ValueError("tz is required when filtering by day")
            tasks = tasks_on_day(tasks, day, tz)
        if not query or not query.strip():
            return tasks
        return [t for t in tasks if self._match_query(query, f"{t.name} {t.description or ''}")]

    # ---------- calendar ----------
    def reschedule(
        self,
        task_id: TaskId,
        day: date,
        *,
        tz: tzinfo,
        hour: Optional[int] = None,
    ) -> Optional[Task]:
        """Move the task onto ``day`` keeping its time of day (drag and drop)."""

        t = self.get(task_id)
        if t is None:
            return None
        new_deadline = move_to_slot(t.deadline, day, tz, hour=hour, default_hour=CALENDAR.default_hour)
        return self.update(t.id, deadline=new_deadline)

    # --- text helpers -------------------------------------------------
    _RE_SPACES = re.compile(r"\s+")

    def _match_query(self, query: str, haystack: str) -> bool:
        tokens = [tok for tok in self._RE_SPACES.split(query.lower().strip()) if tok]
        text = haystack.lower()
        return all(tok in text for tok in tokens)


__all__ = ["TaskService", "TaskStoreError", "TaskNotFoundError"]
