"""Application service layer for workspaces and restyle orchestration."""
from __future__ import annotations

import logging

from notegraph.application.graph import GraphConnectionEngine, get_graph_engine
from notegraph.core.errors import CollaboratorError, NotFound
from notegraph.core.settings import get_settings
from notegraph.core.slug import generate_project_name
from notegraph.core.validation import (
    new_object_id,
    normalise_workspace_id,
    parse_object_id,
    parse_style,
    require_text,
)
from notegraph.domain import Workspace, WorkspaceJob, WorkspaceStyle
from notegraph.infrastructure import (
    InMemoryWorkspaceRepository,
    ProjectProvider,
    WorkspaceRepository,
    get_project_provider,
)
from notegraph.workers.restyle import RestyleRequest, RestyleWorker

logger = logging.getLogger(__name__)

DEFAULT_WEBHOOK_METHODS = ("AttachDocument", "PushPull", "WatchDocuments")


class WorkspaceService:
    """Coordinates workspace use cases, including the restyle job."""

    def __init__(
        self,
        repository: WorkspaceRepository,
        engine: GraphConnectionEngine,
        worker: RestyleWorker,
        *,
        projects: ProjectProvider | None = None,
        auth_webhook_url: str = "",
        auth_webhook_methods: tuple[str, ...] = DEFAULT_WEBHOOK_METHODS,
    ) -> None:
        self._repository = repository
        self._engine = engine
        self._worker = worker
        self._projects = projects
        self._auth_webhook_url = auth_webhook_url
        self._auth_webhook_methods = auth_webhook_methods

    @property
    def worker(self) -> RestyleWorker:
        return self._worker

    @property
    def projects(self) -> ProjectProvider:
        return self._projects or get_project_provider()

    # ------------------------------------------------------------------
    # workspace lifecycle
    # ------------------------------------------------------------------
    def create_workspace(self, title: str, style: str, user_id: str) -> str:
        title = require_text(title, "title")
        user_id = require_text(user_id, "userId")
        workspace_style = parse_style(style)

        credentials = self.projects.create_project(generate_project_name(user_id, title))
        workspace = Workspace(
            workspace_id=new_object_id(),
            title=title,
            style=workspace_style,
            user_id=user_id,
            project_id=credentials.project_id,
            project_public_key=credentials.public_key,
            project_secret_key=credentials.secret_key,
        )
        workspace_id = self._repository.create_workspace(workspace)

        try:
            self.projects.update_project(
                credentials.project_id,
                auth_webhook_url=self._auth_webhook_url,
                auth_webhook_methods=self._auth_webhook_methods,
            )
        except CollaboratorError as exc:
            logger.warning("failed to set auth webhook for project %s: %s", credentials.project_id, exc)
        return workspace_id

    def check_workspace(self, workspace_id: str, user_id: str) -> WorkspaceStyle | None:
        workspace_id = parse_object_id(workspace_id, "workspace")
        workspace = self._repository.get_workspace(workspace_id, require_text(user_id, "userId"))
        return workspace.style if workspace else None

    def update_workspace(
        self,
        workspace_id: str,
        user_id: str,
        *,
        title: str | None = None,
        style: str | None = None,
    ) -> str:
        workspace_id = parse_object_id(workspace_id, "workspace")
        user_id = require_text(user_id, "userId")
        current = self._repository.get_workspace(workspace_id, user_id)
        if current is None:
            raise NotFound("workspace not found or unauthorized")

        fields: dict[str, object] = {}
        if style is not None:
            fields["style"] = parse_style(style)
        if title is not None and title != current.title:
            new_title = require_text(title, "title")
            fields["title"] = new_title
            try:
                self.projects.update_project(current.project_id, name=generate_project_name(current.user_id, new_title))
            except CollaboratorError as exc:
                logger.warning("failed to rename project %s: %s", current.project_id, exc)

        matched, modified = self._repository.update_workspace(workspace_id, user_id, fields)
        if matched == 0:
            raise NotFound("workspace not found or unauthorized")
        return "workspace updated successfully" if modified else "no changes applied"

    def delete_workspace(self, workspace_id: str, user_id: str) -> None:
        workspace_id = parse_object_id(workspace_id, "workspace")
        user_id = require_text(user_id, "userId")
        if self._repository.get_workspace(workspace_id, user_id) is None:
            raise NotFound("workspace not found or unauthorized")
        removed = self._engine.delete_workspace_connections(workspace_id)
        logger.info("deleted %d connections of workspace %s", removed, workspace_id)
        if self._repository.delete_workspace(workspace_id, user_id) == 0:
            raise NotFound("workspace not found or unauthorized")

    def list_workspaces(self, user_id: str) -> list[Workspace]:
        return self._repository.list_workspaces(require_text(user_id, "userId"))

    # ------------------------------------------------------------------
    # restyle orchestration
    # ------------------------------------------------------------------
    def change_workspace_style(self, workspace_id: str, user_id: str, new_style: str) -> WorkspaceJob:
        """Persist a new style and queue the matching graph job.

        The style write and the job insert are two independent writes: if the
        insert fails the style stays changed with no job recorded.
        """

        workspace_id = normalise_workspace_id(workspace_id)
        style = parse_style(new_style)

        self.update_workspace(workspace_id, user_id, style=style.value)
        logger.info("[ChangeStyle] workspace %s type updated to %r", workspace_id, style.value)

        job = WorkspaceJob(job_id=new_object_id(), workspace_id=workspace_id, target_style=style)
        logger.info("[ChangeStyle] queueing job %s, status pending", job.job_id)
        self._repository.insert_job(job)

        self._worker.submit(RestyleRequest(job_id=job.job_id, workspace_id=job.workspace_id, style=style))
        return job

    def get_job(self, workspace_id: str, job_id: str) -> WorkspaceJob:
        job = self._repository.get_job(require_text(job_id, "jobId"))
        if job is None or job.workspace_id != normalise_workspace_id(workspace_id):
            raise NotFound("job not found")
        return job

    # ------------------------------------------------------------------
    # testing helpers
    # ------------------------------------------------------------------
    def reset(self) -> None:
        self._worker.join()
        self._repository.reset()


def restyle_message(job: WorkspaceJob) -> str:
    return f"changed to workspace type: '{job.target_style.value}'. (async works: {job.job_id})"


_settings = get_settings()
_repository = InMemoryWorkspaceRepository()
_worker = RestyleWorker(get_graph_engine(), _repository, max_workers=_settings.restyle_workers)
_service = WorkspaceService(
    _repository,
    get_graph_engine(),
    _worker,
    auth_webhook_url=_settings.auth_webhook_url,
    auth_webhook_methods=_settings.auth_webhook_methods,
)


def get_workspace_service() -> WorkspaceService:
    """Return the singleton workspace service for the process."""

    return _service


def reset_workspace_state() -> None:
    """Drain background jobs and clear the in-memory stores (used in tests)."""

    _service.reset()
    get_graph_engine().repository.reset()
