"""Chunked batch processing with pollable progress."""

from .coordinator import BatchCoordinator
from .registry import InMemoryJobStore, JobStore, new_job_id

__all__ = ["BatchCoordinator", "InMemoryJobStore", "JobStore", "new_job_id"]
