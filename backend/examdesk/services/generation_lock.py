from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock
import time

from examdesk.core.exceptions import GenerationInProgressError


class InMemoryGenerationLocks:
    """Tracks which (kind, school, exam schedule) generations are currently running."""

    def __init__(self) -> None:
        self._running: dict[str, float] = {}
        self._lock = Lock()

    def acquire(self, key: str) -> bool:
        with self._lock:
            if key in self._running:
                return False
            self._running[key] = time.time()
        return True

    def release(self, key: str) -> None:
        with self._lock:
            self._running.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._running.clear()


_locks = InMemoryGenerationLocks()


def generation_key(kind: str, school_id: int, exam_schedule_id: int) -> str:
    return f"{kind}|{school_id}|{exam_schedule_id}"


@contextmanager
def generation_guard(*, kind: str, school_id: int, exam_schedule_id: int) -> Iterator[None]:
    key = generation_key(kind, school_id, exam_schedule_id)
    if not _locks.acquire(key):
        raise GenerationInProgressError(kind, exam_schedule_id)
    try:
        yield
    finally:
        _locks.release(key)


def clear_generation_locks() -> None:
    _locks.clear()
