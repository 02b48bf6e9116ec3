"""
Module: extractor.batch.registry

Purpose:
    Job registry for batch progress polling. The coordinator writes a new
    ProgressSnapshot after every chunk; callers poll by job id. Finished
    jobs stay pollable for a retention window and are then evicted lazily,
    without timers.

Key Classes:
    - JobStore: Protocol injected into the coordinator
    - InMemoryJobStore: Lock-guarded dict with TTL eviction

Key Functions:
    - new_job_id(): Generate a unique job identifier

Dependencies:
    - threading (std)

Used By:
    - extractor.batch.coordinator
    - extractor.pipeline
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Callable, Dict, Optional, Protocol, Tuple

from quiz_toolkit.common.thresholds import BATCH_THRESHOLDS
from quiz_toolkit.core.models import ProgressSnapshot

logger = logging.getLogger(__name__)


class JobStore(Protocol):
    """Keyed store of the latest snapshot per job."""

    def get(self, job_id: str) -> Optional[ProgressSnapshot]: ...

    def put(self, job_id: str, snapshot: ProgressSnapshot) -> None: ...

    def remove(self, job_id: str) -> None: ...


def new_job_id() -> str:
    """Unique identifier for a batch job."""
    return f"job_{uuid.uuid4().hex[:12]}"


class InMemoryJobStore:
    """
    Thread-safe in-process JobStore.

    Snapshots with a terminal status get an expiry of ``now + retention``;
    expired entries are dropped whenever the store is accessed.

    Attributes:
        retention_seconds: How long finished jobs remain pollable

    Example:
        >>> store = InMemoryJobStore(retention_seconds=60, clock=lambda: 0.0)
        >>> store.put("job_1", snapshot)
        >>> store.get("job_1").status
        <JobStatus.PENDING: 'pending'>
    """

    def __init__(
        self,
        retention_seconds: float = BATCH_THRESHOLDS.retention_seconds,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.retention_seconds = retention_seconds
        self._clock = clock
        self._lock = threading.Lock()
        # job_id -> (snapshot, expiry or None while running)
        self._entries: Dict[str, Tuple[ProgressSnapshot, Optional[float]]] = {}

    def _purge_locked(self, now: float) -> int:
        expired = [
            job_id
            for job_id, (_, expires_at) in self._entries.items()
            if expires_at is not None and expires_at <= now
        ]
        for job_id in expired:
            del self._entries[job_id]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired jobs")
        return len(expired)

    def get(self, job_id: str) -> Optional[ProgressSnapshot]:
        with self._lock:
            self._purge_locked(self._clock())
            entry = self._entries.get(job_id)
            return entry[0] if entry else None

    def put(self, job_id: str, snapshot: ProgressSnapshot) -> None:
        with self._lock:
            now = self._clock()
            self._purge_locked(now)
            expires_at = now + self.retention_seconds if snapshot.status.is_terminal else None
            self._entries[job_id] = (snapshot, expires_at)

    def remove(self, job_id: str) -> None:
        with self._lock:
            self._entries.pop(job_id, None)

    def purge_expired(self) -> int:
        """Drop expired entries now; returns how many were removed."""
        with self._lock:
            return self._purge_locked(self._clock())

    def __len__(self) -> int:
        with self._lock:
            self._purge_locked(self._clock())
            return len(self._entries)
