"""Read-side projection of a workspace's connections into nodes and edges."""
from __future__ import annotations

from notegraph.application.graph import get_graph_engine
from notegraph.core.validation import normalise_workspace_id
from notegraph.domain import GraphEdge, GraphNode, WorkspaceGraph
from notegraph.infrastructure import ConnectionRepository


class GraphProjector:
    def __init__(self, repository: ConnectionRepository) -> None:
        self._repository = repository

    def project_workspace_graph(self, workspace_id: str) -> WorkspaceGraph:
        # Titles stay empty: document content lives in the note service.
        workspace_id = normalise_workspace_id(workspace_id)
        connections = self._repository.list_by_workspace(workspace_id)

        nodes: dict[str, GraphNode] = {}
        edges: list[GraphEdge] = []
        for connection in connections:
            for document_id in (connection.source_id, connection.target_id):
                nodes.setdefault(document_id, GraphNode(id=document_id))
            edges.append(GraphEdge(connection.source_id, connection.target_id, connection.status))
        return WorkspaceGraph(nodes=list(nodes.values()), edges=edges)


_projector = GraphProjector(get_graph_engine().repository)


def get_graph_projector() -> GraphProjector:
    return _projector
