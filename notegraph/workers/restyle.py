from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING

from notegraph.domain import JobStatus, WorkspaceStyle
from notegraph.infrastructure import WorkspaceRepository

if TYPE_CHECKING:
    from notegraph.application.graph import GraphConnectionEngine

logger = logging.getLogger(__name__)


@dataclass
class RestyleRequest:
    job_id: str
    workspace_id: str
    style: WorkspaceStyle


class RestyleWorker:
    """Runs restyle jobs on a private thread pool.

    Jobs are detached from the request that queued them: the request returns
    as soon as the job is submitted and the outcome is only written to the
    job ledger.
    """

    def __init__(self, engine: GraphConnectionEngine, jobs: WorkspaceRepository, *, max_workers: int = 4) -> None:
        self._engine = engine
        self._jobs = jobs
        self._max_workers = max_workers
        self._executor = self._new_executor()
        self._futures: dict[str, Future[JobStatus]] = {}
        self._lock = threading.Lock()

    def _new_executor(self) -> ThreadPoolExecutor:
        return ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="restyle")

    def submit(self, request: RestyleRequest) -> Future[JobStatus]:
        logger.info(
            "[ChangeStyle] starting async graph processing for job %s, style %s",
            request.job_id,
            request.style.value,
        )
        with self._lock:
            future = self._executor.submit(self._run, request)
            self._futures[request.job_id] = future
        future.add_done_callback(lambda _: self._forget(request.job_id))
        return future

    def _forget(self, job_id: str) -> None:
        with self._lock:
            self._futures.pop(job_id, None)

    def _dispatch(self, request: RestyleRequest) -> None:
        if request.style.auto_links:
            logger.info("[Job %s] starting auto-connect for %s style", request.job_id, request.style.value)
            self._engine.auto_connect_workspace(request.workspace_id)
        else:
            logger.info("[Job %s] clearing pending connections for %s style", request.job_id, request.style.value)
            self._engine.clear_pending(request.workspace_id)

    def _run(self, request: RestyleRequest) -> JobStatus:
        status = JobStatus.SUCCESS
        error: str | None = None
        try:
            self._dispatch(request)
        except Exception as exc:  # the ledger must record every failure
            logger.exception("[Job %s] graph processing failed", request.job_id)
            status = JobStatus.FAILED
            error = str(exc)
        else:
            logger.info("[Job %s] graph processing completed", request.job_id)

        try:
            self._jobs.update_job_status(request.job_id, status, error=error)
        except Exception:
            logger.exception("[Job %s] failed to record job status %r", request.job_id, status.value)
        else:
            logger.info("[Job %s] job status updated to %r", request.job_id, status.value)
        return status

    def wait(self, job_id: str, timeout: float | None = None) -> JobStatus | None:
        """Block until ``job_id`` finishes; ``None`` if it is not running."""

        with self._lock:
            future = self._futures.get(job_id)
        if future is None:
            return None
        return future.result(timeout=timeout)

    def join(self) -> None:
        """Wait for every queued job."""

        with self._lock:
            futures = list(self._futures.values())
        for future in futures:
            future.result()

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            executor = self._executor
            self._executor = self._new_executor()
        executor.shutdown(wait=wait)
