from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from taskflow.services.events import TaskEventKind


@dataclass
class RecordedEvent:
    kind: TaskEventKind
    task_id: UUID
    actor_id: UUID
    payload: dict[str, Any]


@dataclass
class RecordingEventEmitter:
    events: list[RecordedEvent] = field(default_factory=list)

    def emit(
        self,
        kind: TaskEventKind,
        task_id: UUID,
        actor_id: UUID,
        payload: dict[str, Any],
    ) -> None:
        self.events.append(RecordedEvent(kind, task_id, actor_id, payload))

    def kinds(self) -> list[TaskEventKind]:
        return [event.kind for event in self.events]


class FailingEventEmitter:
    def __init__(self) -> None:
        self.calls = 0

    def emit(self, kind, task_id, actor_id, payload) -> None:
        self.calls += 1
        raise RuntimeError("event sink unavailable")


class FakeRedis:
    """The handful of redis.asyncio.Redis commands the stats cache uses."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def incr(self, key: str) -> int:
        value = int(self.store.get(key, "0")) + 1
        self.store[key] = str(value)
        return value


class BrokenRedis:
    async def get(self, key: str) -> str | None:
        from redis.exceptions import ConnectionError

        raise ConnectionError("redis down")

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        from redis.exceptions import ConnectionError

        raise ConnectionError("redis down")

    async def incr(self, key: str) -> int:
        from redis.exceptions import ConnectionError

        raise ConnectionError("redis down")
