"""
Module: progress

Purpose:
    Provides the job status enum and the immutable progress snapshot that
    the batch coordinator publishes after every chunk. Pollers read the
    latest snapshot from a JobStore; the coordinator replaces it.

Key Classes:
    - JobStatus: Lifecycle state of a batch job
    - ProgressSnapshot: Point-in-time view of a job's progress

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - extractor.batch.coordinator
    - extractor.batch.registry
    - extractor.pipeline
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class JobStatus(str, Enum):
    """Lifecycle state of a batch job."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value

    @property
    def is_terminal(self) -> bool:
        """True for states a job never leaves."""
        return self in (JobStatus.COMPLETED, JobStatus.ERROR, JobStatus.CANCELLED)


@dataclass(frozen=True, slots=True)
class ProgressSnapshot:
    """
    Progress of one batch job at a point in time.

    Attributes:
        job_id: Identifier of the job
        current_unit: Pages processed so far
        total_units: Pages the job will process
        extracted_count: Pages (or, once parsed, questions) that yielded text
        status: Lifecycle state
        message: Human-readable progress line
        estimated_seconds_remaining: Projection from average page time
        updated_at: Wall-clock time the snapshot was taken

    Invariants:
        - 0 <= current_unit <= total_units
    """

    job_id: str
    current_unit: int
    total_units: int
    extracted_count: int = 0
    status: JobStatus = JobStatus.PENDING
    message: str = ""
    estimated_seconds_remaining: Optional[float] = None
    updated_at: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        if self.total_units < 0:
            raise ValueError(f"total_units cannot be negative: {self.total_units}")
        if not (0 <= self.current_unit <= self.total_units):
            raise ValueError(
                f"current_unit must be within [0, {self.total_units}]: {self.current_unit}"
            )
        if self.extracted_count < 0:
            raise ValueError(f"extracted_count cannot be negative: {self.extracted_count}")

    @property
    def fraction_complete(self) -> float:
        if self.total_units == 0:
            return 1.0 if self.status.is_terminal else 0.0
        return self.current_unit / self.total_units

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON output."""
        return {
            "job_id": self.job_id,
            "current_unit": self.current_unit,
            "total_units": self.total_units,
            "extracted_count": self.extracted_count,
            "status": self.status.value,
            "message": self.message,
            "estimated_seconds_remaining": self.estimated_seconds_remaining,
            "updated_at": self.updated_at,
        }
