"""Application services."""

from .graph import GraphConnectionEngine, get_graph_engine
from .projection import GraphProjector, get_graph_projector
from .workspaces import WorkspaceService, get_workspace_service, reset_workspace_state, restyle_message

__all__ = [
    "GraphConnectionEngine",
    "GraphProjector",
    "WorkspaceService",
    "get_graph_engine",
    "get_graph_projector",
    "get_workspace_service",
    "reset_workspace_state",
    "restyle_message",
]
