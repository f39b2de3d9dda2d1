"""Collaborative-document provider integration.

Each workspace owns one project on the collaborative editing server. The
server's admin API speaks the Connect protocol, so plain JSON POSTs to
``/yorkie.v1.AdminService/<Method>`` are enough. When no server is
configured, :class:`LocalProjectProvider` hands out local credentials so the
rest of the workspace lifecycle keeps working.
"""
from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Any, Protocol, Sequence
from urllib.parse import urlparse

import httpx

from notegraph.core.errors import CollaboratorError
from notegraph.core.validation import new_object_id


@dataclass(slots=True)
class ProjectCredentials:
    project_id: str
    public_key: str
    secret_key: str


class ProjectProvider(Protocol):
    """Contract for collaborative-document providers."""

    def create_project(self, name: str) -> ProjectCredentials:
        """Create a project and return its credentials."""

    def update_project(
        self,
        project_id: str,
        *,
        name: str | None = None,
        auth_webhook_url: str | None = None,
        auth_webhook_methods: Sequence[str] | None = None,
    ) -> None:
        """Update mutable project fields."""


class YorkieAdminClient:
    """Client for the admin service of a Yorkie server."""

    SERVICE_PATH = "/yorkie.v1.AdminService"

    def __init__(
        self,
        addr: str,
        *,
        username: str = "",
        password: str = "",
        timeout: float = 10.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        parsed = urlparse(addr)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("addr must include scheme and host")
        self._base_url = f"{addr.rstrip('/')}{self.SERVICE_PATH}"
        self._username = username
        self._password = password
        self._token: str | None = None
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _call(self, method: str, body: dict[str, Any], *, authenticated: bool = True) -> dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if authenticated:
            token = self._ensure_token()
            if token:
                headers["Authorization"] = token
        try:
            response = self._client.post(f"{self._base_url}/{method}", json=body, headers=headers)
        except httpx.HTTPError as exc:
            raise CollaboratorError(f"failed to call project provider: {exc}") from exc
        if response.status_code != httpx.codes.OK:
            raise CollaboratorError(f"project provider {method} returned status {response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise CollaboratorError(f"failed to parse project provider {method} response") from exc
        return payload if isinstance(payload, dict) else {}

    def _ensure_token(self) -> str | None:
        if self._token is None and self._username and self._password:
            payload = self._call(
                "LogIn",
                {"username": self._username, "password": self._password},
                authenticated=False,
            )
            self._token = str(payload.get("token") or "") or None
        return self._token

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def create_project(self, name: str) -> ProjectCredentials:
        payload = self._call("CreateProject", {"name": name})
        project = payload.get("project") or {}
        project_id = project.get("id")
        if not project_id:
            raise CollaboratorError("project provider did not return a project id")
        return ProjectCredentials(
            project_id=str(project_id),
            public_key=str(project.get("publicKey") or ""),
            secret_key=str(project.get("secretKey") or ""),
        )

    def update_project(
        self,
        project_id: str,
        *,
        name: str | None = None,
        auth_webhook_url: str | None = None,
        auth_webhook_methods: Sequence[str] | None = None,
    ) -> None:
        fields: dict[str, Any] = {}
        if name is not None:
            fields["name"] = name
        if auth_webhook_url is not None:
            fields["authWebhookUrl"] = auth_webhook_url
        if auth_webhook_methods is not None:
            fields["authWebhookMethods"] = {"methods": list(auth_webhook_methods)}
        if not fields:
            return
        self._call("UpdateProject", {"id": project_id, "fields": fields})

    def close(self) -> None:  # pragma: no cover - best effort cleanup
        if self._owns_client:
            self._client.close()


class LocalProjectProvider:
    """In-process provider used when no collaborative server is configured."""

    def __init__(self) -> None:
        self.projects: dict[str, dict[str, Any]] = {}

    def create_project(self, name: str) -> ProjectCredentials:
        credentials = ProjectCredentials(
            project_id=new_object_id(),
            public_key=secrets.token_urlsafe(16),
            secret_key=secrets.token_urlsafe(24),
        )
        self.projects[credentials.project_id] = {"name": name}
        return credentials

    def update_project(
        self,
        project_id: str,
        *,
        name: str | None = None,
        auth_webhook_url: str | None = None,
        auth_webhook_methods: Sequence[str] | None = None,
    ) -> None:
        project = self.projects.get(project_id)
        if project is None:
            raise CollaboratorError(f"unknown project {project_id}")
        if name is not None:
            project["name"] = name
        if auth_webhook_url is not None:
            project["auth_webhook_url"] = auth_webhook_url
        if auth_webhook_methods is not None:
            project["auth_webhook_methods"] = list(auth_webhook_methods)


_provider: ProjectProvider = LocalProjectProvider()


def configure_project_provider(provider: ProjectProvider) -> None:
    """Install the provider used by workspace creation and renames."""

    global _provider
    _provider = provider


def get_project_provider() -> ProjectProvider:
    return _provider


__all__ = [
    "LocalProjectProvider",
    "ProjectCredentials",
    "ProjectProvider",
    "YorkieAdminClient",
    "configure_project_provider",
    "get_project_provider",
]
