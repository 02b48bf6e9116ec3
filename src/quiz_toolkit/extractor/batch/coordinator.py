"""
Module: extractor.batch.coordinator

Purpose:
    Drives page text acquisition across a whole document in fixed-size
    chunks. Pages within a chunk run concurrently; chunks run one after
    another so at most ``chunk_size`` recognizers are alive at once, counting
    timed-out pages whose threads have not yet finished.
    Progress is published after every chunk and cancellation is honored
    at chunk boundaries.

Key Classes:
    - BatchCoordinator: Runs one batch job to a terminal state

Dependencies:
    - concurrent.futures: Per-chunk thread pool
    - extractor.batch.registry: JobStore for progress polling

Used By:
    - extractor.pipeline: Fetches question and answer document pages
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import replace
from typing import Callable, Dict, List, Optional

from quiz_toolkit.core.models import (
    BatchResult,
    JobStatus,
    PageOrigin,
    PageResult,
    ProgressSnapshot,
)

from ..config import BatchConfig
from ..errors import CollaboratorFailure, CoordinatorTimeout
from .registry import JobStore

logger = logging.getLogger(__name__)

FetchPage = Callable[[int], PageResult]
ProgressCallback = Callable[[ProgressSnapshot], None]


class BatchCoordinator:
    """
    Chunked, cancellable page processing for one document.

    State machine: PENDING -> PROCESSING -> COMPLETED | ERROR, with
    CANCELLED reachable before any chunk starts or between chunks.
    Per-page failures and chunk timeouts become zero-confidence empty
    pages; any other failure ends the job in ERROR while keeping the
    pages gathered so far.

    Example:
        >>> coordinator = BatchCoordinator(source.get_page_text, InMemoryJobStore())
        >>> result = coordinator.run("job_1", source.page_count)
        >>> result.status
        <JobStatus.COMPLETED: 'completed'>
    """

    def __init__(
        self,
        fetch_page: FetchPage,
        store: JobStore,
        config: Optional[BatchConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.fetch_page = fetch_page
        self.store = store
        self.config = config or BatchConfig()
        self._clock = clock
        self._sleep = sleep
        # Futures of timed-out pages whose threads are still running
        self._stragglers: List[Future] = []

    def run(
        self,
        job_id: str,
        total_pages: int,
        *,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[threading.Event] = None,
    ) -> BatchResult:
        """
        Process pages 1..total_pages (capped at ``max_pages``).

        Args:
            job_id: Identifier under which progress is stored
            total_pages: Page count of the document
            on_progress: Called synchronously with every snapshot
            cancel: Set to stop the job at the next chunk boundary

        Returns:
            BatchResult with pages in strict page order

        Raises:
            ValueError: If job_id is already registered
        """
        if self.store.get(job_id) is not None:
            raise ValueError(f"Job already exists: {job_id}")

        issues: List[str] = []
        total = min(max(total_pages, 0), self.config.max_pages)
        if total < total_pages:
            issues.append(
                f"Document has {total_pages} pages; only the first {total} were processed"
            )
            logger.warning(issues[-1])

        snapshot = ProgressSnapshot(
            job_id=job_id,
            current_unit=0,
            total_units=total,
            status=JobStatus.PENDING,
            message="Queued",
        )

        pages: List[PageResult] = []
        status = JobStatus.PROCESSING
        error: Optional[str] = None
        started = self._clock()

        try:
            self._publish(snapshot, on_progress)
            for chunk_start in range(1, total + 1, self.config.chunk_size):
                if cancel is not None and cancel.is_set():
                    status = JobStatus.CANCELLED
                    break

                chunk = list(
                    range(chunk_start, min(chunk_start + self.config.chunk_size, total + 1))
                )
                pages.extend(self._run_chunk(chunk))
                pages.sort(key=lambda p: p.page_number)

                snapshot = self._progress(job_id, pages, total, started)
                self._publish(snapshot, on_progress)

                if pages[-1].page_number < total and self.config.inter_chunk_pause:
                    self._sleep(self.config.inter_chunk_pause)
            else:
                status = JobStatus.COMPLETED
        except Exception as e:
            status = JobStatus.ERROR
            error = str(e) or type(e).__name__
            logger.error(
                f"Batch job {job_id} failed after {len(pages)} pages: {error}",
                exc_info=True,
                extra={"job_id": job_id, "pages_done": len(pages)},
            )

        issues.extend(f"Page {p.page_number}: {p.error}" for p in pages if p.error)
        final = ProgressSnapshot(
            job_id=job_id,
            current_unit=len(pages),
            total_units=total,
            extracted_count=sum(1 for p in pages if p.has_text),
            status=status,
            message=_final_message(status, len(pages), total, error),
            estimated_seconds_remaining=0.0 if status is JobStatus.COMPLETED else None,
        )
        try:
            self._publish(final, on_progress)
        except Exception as e:
            logger.warning(f"Progress callback failed for final snapshot of {job_id}: {e}")

        logger.info(
            f"Batch job {job_id} {status}: {final.extracted_count}/{len(pages)} pages with text",
            extra={"job_id": job_id, "pages": len(pages), "status": str(status)},
        )
        return BatchResult(
            job_id=job_id,
            pages=tuple(pages),
            status=status,
            issues=tuple(issues),
            error=error,
        )

    def _publish(
        self,
        snapshot: ProgressSnapshot,
        on_progress: Optional[ProgressCallback],
    ) -> None:
        self.store.put(snapshot.job_id, snapshot)
        if on_progress is not None:
            on_progress(snapshot)

    def _progress(
        self,
        job_id: str,
        pages: List[PageResult],
        total: int,
        started: float,
    ) -> ProgressSnapshot:
        done = len(pages)
        elapsed = self._clock() - started
        remaining = (elapsed / done) * (total - done) if done else None
        return ProgressSnapshot(
            job_id=job_id,
            current_unit=done,
            total_units=total,
            extracted_count=sum(1 for p in pages if p.has_text),
            status=JobStatus.PROCESSING,
            message=f"Processed {done}/{total} pages",
            estimated_seconds_remaining=remaining,
        )

    def _fetch(self, page_number: int) -> PageResult:
        try:
            result = self.fetch_page(page_number)
        except Exception as e:
            failure = CollaboratorFailure(f"{type(e).__name__}: {e}")
            logger.warning(f"Page {page_number} failed: {failure}")
            return PageResult.empty(page_number, str(failure))
        if result.page_number != page_number:
            result = replace(result, page_number=page_number)
        return result

    def _free_slots(self) -> int:
        """
        Worker slots not held by pages still running from earlier chunks.

        When every slot is held, waits up to one chunk budget for one of
        those pages to finish.
        """
        self._stragglers = [f for f in self._stragglers if not f.done()]
        if len(self._stragglers) >= self.config.chunk_size:
            logger.warning(
                f"{len(self._stragglers)} timed-out pages still running; "
                "waiting for a free worker"
            )
            wait(
                self._stragglers,
                timeout=self.config.chunk_timeout,
                return_when=FIRST_COMPLETED,
            )
            self._stragglers = [f for f in self._stragglers if not f.done()]
        return max(0, self.config.chunk_size - len(self._stragglers))

    def _timed_out(self, page_number: int, reason: str) -> PageResult:
        timeout = CoordinatorTimeout(f"Page {page_number} {reason}")
        logger.warning(str(timeout))
        return PageResult.empty(page_number, str(timeout), origin=PageOrigin.RECOGNITION)

    def _run_chunk(self, page_numbers: List[int]) -> List[PageResult]:
        """
        Fetch a chunk concurrently; pages over the time budget come back empty.

        A timed-out page keeps its worker thread until it finishes and
        counts against ``chunk_size`` for later chunks, so no more than
        ``chunk_size`` fetches ever run at once.
        """
        started = time.monotonic()
        slots = self._free_slots()
        if slots == 0:
            return [
                self._timed_out(n, "skipped: every worker is held by a timed-out page")
                for n in page_numbers
            ]

        executor = ThreadPoolExecutor(
            max_workers=min(slots, len(page_numbers)), thread_name_prefix="page"
        )
        futures: Dict[Future, int] = {}
        try:
            for n in page_numbers:
                futures[executor.submit(self._fetch, n)] = n
            budget = self.config.chunk_timeout - (time.monotonic() - started)
            done, _ = wait(futures, timeout=max(0.0, budget))
        finally:
            # Queued pages are cancelled; running ones finish on their own
            executor.shutdown(wait=False, cancel_futures=True)
        self._stragglers.extend(f for f in futures if not f.done())

        results = []
        for future, n in futures.items():
            if future in done:
                results.append(future.result())
            else:
                results.append(
                    self._timed_out(
                        n, f"exceeded the {self.config.chunk_timeout:g}s chunk budget"
                    )
                )
        return sorted(results, key=lambda p: p.page_number)


def _final_message(
    status: JobStatus,
    done: int,
    total: int,
    error: Optional[str],
) -> str:
    if status is JobStatus.COMPLETED:
        return f"Completed {done}/{total} pages"
    if status is JobStatus.CANCELLED:
        return f"Cancelled after {done}/{total} pages"
    return f"Failed after {done}/{total} pages: {error}"
