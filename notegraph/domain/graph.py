"""Domain entities for document connections and workspace restyling."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConnectionStatus(str, Enum):
    """Lifecycle of a single connection.

    ``edited`` is part of the stored vocabulary but manual edits are
    re-proposed as ``pending``. Bulk confirmation only promotes ``pending``.
    """

    PENDING = "pending"
    EDITED = "edited"
    CONFIRMED = "confirmed"


class WorkspaceStyle(str, Enum):
    GENERIC = "generic"
    PARA = "para"
    ZETTEL = "zettel"

    @property
    def auto_links(self) -> bool:
        return self is WorkspaceStyle.ZETTEL


class JobStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


ConnectionKey = tuple[str, str, str]


@dataclass(slots=True)
class Connection:
    """A directed link ``source_id -> target_id`` inside one workspace."""

    source_id: str
    target_id: str
    workspace_id: str
    status: ConnectionStatus = ConnectionStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def key(self) -> ConnectionKey:
        return (self.source_id, self.target_id, self.workspace_id)

    def touches(self, document_id: str) -> bool:
        return document_id in (self.source_id, self.target_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sourceId": self.source_id,
            "targetId": self.target_id,
            "workspaceId": self.workspace_id,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass(slots=True)
class WorkspaceJob:
    """Audit record of one background restyle run."""

    job_id: str
    workspace_id: str
    target_style: WorkspaceStyle
    status: JobStatus = JobStatus.PENDING
    error: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.job_id,
            "workspaceId": self.workspace_id,
            "type": self.target_style.value,
            "status": self.status.value,
            "error": self.error,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass(slots=True)
class Workspace:
    workspace_id: str
    title: str
    style: WorkspaceStyle
    user_id: str
    project_id: str = ""
    project_public_key: str = ""
    project_secret_key: str = ""
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.workspace_id,
            "title": self.title,
            "type": self.style.value,
            "userId": self.user_id,
            "yorkieProjectId": self.project_id,
            "yorkiePublicKey": self.project_public_key,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass(slots=True)
class GraphNode:
    id: str
    title: str = ""


@dataclass(slots=True)
class GraphEdge:
    source_id: str
    target_id: str
    status: ConnectionStatus


@dataclass(slots=True)
class WorkspaceGraph:
    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [{"id": node.id, "title": node.title} for node in self.nodes],
            "edges": [
                {"sourceId": edge.source_id, "targetId": edge.target_id, "status": edge.status.value}
                for edge in self.edges
            ],
        }
