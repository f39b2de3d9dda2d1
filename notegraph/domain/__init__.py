"""Domain layer definitions."""

from .graph import (
    Connection,
    ConnectionKey,
    ConnectionStatus,
    GraphEdge,
    GraphNode,
    JobStatus,
    Workspace,
    WorkspaceGraph,
    WorkspaceJob,
    WorkspaceStyle,
    utcnow,
)

__all__ = [
    "Connection",
    "ConnectionKey",
    "ConnectionStatus",
    "GraphEdge",
    "GraphNode",
    "JobStatus",
    "Workspace",
    "WorkspaceGraph",
    "WorkspaceJob",
    "WorkspaceStyle",
    "utcnow",
]
