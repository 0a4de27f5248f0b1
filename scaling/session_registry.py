"""Per-session registry of in-flight generations.

Entries are guarded by a single asyncio.Lock. Sessions whose generations
have all finished are evicted by an explicit timer, cancelled and re-armed
whenever the session registers new work.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field

from scaling.config import REGISTRY_EVICTION_SECONDS

logger = logging.getLogger(__name__)


@dataclass
class GenerationEntry:
    session_id: str
    job_id: str
    abort: asyncio.Event = field(default_factory=asyncio.Event)
    started_at: float = field(default_factory=time.time)
    finished: bool = False


class GenerationRegistry:
    def __init__(self, eviction_seconds: float = REGISTRY_EVICTION_SECONDS):
        self.eviction_seconds = eviction_seconds
        self._lock = asyncio.Lock()
        self._sessions: dict[str, dict[str, GenerationEntry]] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._evictions: set[asyncio.Task] = set()

    async def register(self, session_id: str, job_id: str) -> GenerationEntry:
        async with self._lock:
            self._cancel_timer(session_id)
            entry = GenerationEntry(session_id=session_id, job_id=job_id)
            self._sessions.setdefault(session_id, {})[job_id] = entry
            logger.info(f"[registry] {session_id}/{job_id} registered")
            return entry

    async def complete(self, session_id: str, job_id: str) -> None:
        """Mark a generation finished; arm eviction once the session is idle."""
        async with self._lock:
            entry = self._sessions.get(session_id, {}).get(job_id)
            if entry is None:
                return
            entry.finished = True
            if all(e.finished for e in self._sessions[session_id].values()):
                self._arm_timer(session_id)

    async def cancel(self, session_id: str, job_id: str | None = None) -> int:
        """Set the abort signal of matching unfinished generations. Returns how many."""
        async with self._lock:
            entries = self._sessions.get(session_id, {})
            targets = [
                e for e in entries.values()
                if not e.finished and (job_id is None or e.job_id == job_id)
            ]
            for entry in targets:
                entry.abort.set()
            if targets:
                logger.info(f"[registry] cancelled {len(targets)} generation(s) in {session_id}")
            return len(targets)

    async def evict(self, session_id: str) -> None:
        async with self._lock:
            self._cancel_timer(session_id)
            if self._sessions.pop(session_id, None) is not None:
                logger.debug(f"[registry] evicted {session_id}")

    async def active(self, session_id: str | None = None) -> list[GenerationEntry]:
        async with self._lock:
            sessions = (
                [self._sessions.get(session_id, {})] if session_id else self._sessions.values()
            )
            return [e for entries in sessions for e in entries.values() if not e.finished]

    async def close(self) -> None:
        async with self._lock:
            for handle in self._timers.values():
                handle.cancel()
            self._timers.clear()
            for entries in self._sessions.values():
                for entry in entries.values():
                    if not entry.finished:
                        entry.abort.set()
            self._sessions.clear()

    # Callers hold self._lock

    def _arm_timer(self, session_id: str) -> None:
        self._cancel_timer(session_id)
        loop = asyncio.get_running_loop()
        self._timers[session_id] = loop.call_later(
            self.eviction_seconds, self._schedule_eviction, session_id
        )

    def _cancel_timer(self, session_id: str) -> None:
        handle = self._timers.pop(session_id, None)
        if handle is not None:
            handle.cancel()

    def _schedule_eviction(self, session_id: str) -> None:
        task = asyncio.get_running_loop().create_task(self._evict_if_idle(session_id))
        self._evictions.add(task)
        task.add_done_callback(self._evictions.discard)

    async def _evict_if_idle(self, session_id: str) -> None:
        async with self._lock:
            self._timers.pop(session_id, None)
            entries = self._sessions.get(session_id)
            if entries is not None and all(e.finished for e in entries.values()):
                del self._sessions[session_id]
                logger.debug(f"[registry] evicted idle session {session_id}")
