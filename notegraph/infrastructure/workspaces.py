"""Infrastructure layer for workspace and job-ledger persistence."""
from __future__ import annotations

import threading
from dataclasses import replace
from typing import Any, Protocol

from notegraph.domain import JobStatus, Workspace, WorkspaceJob, utcnow


class WorkspaceRepository(Protocol):
    """Persistence contract for workspaces and their restyle jobs."""

    def create_workspace(self, workspace: Workspace) -> str: ...

    def get_workspace(self, workspace_id: str, user_id: str | None = None) -> Workspace | None: ...

    def update_workspace(self, workspace_id: str, user_id: str, fields: dict[str, Any]) -> tuple[int, int]: ...

    def delete_workspace(self, workspace_id: str, user_id: str) -> int: ...

    def list_workspaces(self, user_id: str) -> list[Workspace]: ...

    def insert_job(self, job: WorkspaceJob) -> None: ...

    def update_job_status(self, job_id: str, status: JobStatus, *, error: str | None = None) -> None: ...

    def get_job(self, job_id: str) -> WorkspaceJob | None: ...

    def list_jobs(self, workspace_id: str) -> list[WorkspaceJob]: ...

    def reset(self) -> None: ...


class InMemoryWorkspaceRepository:
    """Simple in-memory repository for fast iteration and tests."""

    def __init__(self) -> None:
        self._workspaces: dict[str, Workspace] = {}
        self._jobs: dict[str, WorkspaceJob] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # internal helpers
    # ------------------------------------------------------------------
    def _owned(self, workspace_id: str, user_id: str | None) -> Workspace | None:
        workspace = self._workspaces.get(workspace_id)
        if workspace is None:
            return None
        if user_id is not None and workspace.user_id != user_id:
            return None
        return workspace

    # ------------------------------------------------------------------
    # workspaces
    # ------------------------------------------------------------------
    def create_workspace(self, workspace: Workspace) -> str:
        with self._lock:
            self._workspaces[workspace.workspace_id] = replace(workspace)
        return workspace.workspace_id

    def get_workspace(self, workspace_id: str, user_id: str | None = None) -> Workspace | None:
        with self._lock:
            workspace = self._owned(workspace_id, user_id)
            return replace(workspace) if workspace else None

    def update_workspace(self, workspace_id: str, user_id: str, fields: dict[str, Any]) -> tuple[int, int]:
        """Apply ``fields`` and return ``(matched, modified)`` counts."""

        with self._lock:
            workspace = self._owned(workspace_id, user_id)
            if workspace is None:
                return 0, 0
            changed = {key: value for key, value in fields.items() if getattr(workspace, key) != value}
            for key, value in changed.items():
                setattr(workspace, key, value)
            workspace.updated_at = utcnow()
            return 1, int(bool(changed))

    def delete_workspace(self, workspace_id: str, user_id: str) -> int:
        with self._lock:
            if self._owned(workspace_id, user_id) is None:
                return 0
            del self._workspaces[workspace_id]
            return 1

    def list_workspaces(self, user_id: str) -> list[Workspace]:
        with self._lock:
            items = [replace(ws) for ws in self._workspaces.values() if ws.user_id == user_id]
        items.sort(key=lambda ws: ws.created_at)
        return items

    # ------------------------------------------------------------------
    # job ledger
    # ------------------------------------------------------------------
    def insert_job(self, job: WorkspaceJob) -> None:
        with self._lock:
            self._jobs[job.job_id] = replace(job)

    def update_job_status(self, job_id: str, status: JobStatus, *, error: str | None = None) -> None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return
            job.status = status
            job.error = error
            job.updated_at = utcnow()

    def get_job(self, job_id: str) -> WorkspaceJob | None:
        with self._lock:
            job = self._jobs.get(job_id)
            return replace(job) if job else None

    def list_jobs(self, workspace_id: str) -> list[WorkspaceJob]:
        with self._lock:
            return [replace(job) for job in self._jobs.values() if job.workspace_id == workspace_id]

    def reset(self) -> None:
        with self._lock:
            self._workspaces.clear()
            self._jobs.clear()
