"""Graph connection engine.

Turns similarity results into directed ``pending`` connections and moves
connections through their confirmation lifecycle. Edges always point from
the query document to the similar document; the reverse edge is never
written, so a symmetric similarity is stored as one fact.
"""
from __future__ import annotations

import logging
from typing import Iterable

from notegraph.core.errors import CollaboratorError, StoreError
from notegraph.core.validation import is_object_id, normalise_workspace_id, parse_object_id, require_text
from notegraph.core.settings import get_settings
from notegraph.domain import Connection, ConnectionStatus
from notegraph.infrastructure import (
    ConnectionRepository,
    InMemoryConnectionRepository,
    SimilarityClient,
    get_similarity_client,
)

logger = logging.getLogger(__name__)

SIMILAR_TOP_N = 5


class GraphConnectionEngine:
    """Owns every mutation of connection records."""

    def __init__(
        self,
        repository: ConnectionRepository,
        similarity: SimilarityClient | None = None,
        *,
        top_n: int = SIMILAR_TOP_N,
    ) -> None:
        self._repository = repository
        self._similarity = similarity
        self._top_n = top_n

    @property
    def repository(self) -> ConnectionRepository:
        return self._repository

    @property
    def similarity(self) -> SimilarityClient:
        return self._similarity or get_similarity_client()

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _targets(source_id: str, candidates: Iterable[str], workspace_id: str) -> Iterable[str]:
        """Yield valid candidate ids, skipping self references and malformed ids."""

        for candidate in candidates:
            if not is_object_id(candidate):
                logger.warning("[%s] invalid target ID %r, skipping connection", workspace_id, candidate)
                continue
            target_id = candidate.strip().lower()
            if target_id == source_id:
                continue
            yield target_id

    # ------------------------------------------------------------------
    # auto connection
    # ------------------------------------------------------------------
    def on_document_created(self, document_id: str, workspace_id: str) -> list[Connection]:
        """Propose ``pending`` edges from a new document to its nearest neighbours."""

        source_id = parse_object_id(document_id, "new document")
        workspace_id = normalise_workspace_id(workspace_id)
        candidates = self.similarity.similar_to(source_id, self._top_n)

        created: list[Connection] = []
        for target_id in self._targets(source_id, candidates, workspace_id):
            try:
                connection = self._repository.insert(source_id, target_id, workspace_id, ConnectionStatus.PENDING)
            except StoreError as exc:
                logger.warning("[%s] could not store %s->%s: %s", workspace_id, source_id, target_id, exc)
                continue
            created.append(connection)
        return created

    def auto_connect_workspace(self, workspace_id: str) -> list[Connection]:
        """Recompute ``pending`` edges for every document of a workspace.

        Failing to list the workspace aborts the run. A document whose
        neighbours cannot be fetched is skipped, and a failed upsert only
        loses that edge. The result holds every edge processed, including
        ones that already existed.
        """

        workspace_id = normalise_workspace_id(workspace_id)
        logger.info("[AutoConnect] started for workspace %s", workspace_id)

        document_ids = self.similarity.list_document_ids(workspace_id)
        logger.info("[AutoConnect %s] fetched %d document IDs", workspace_id, len(document_ids))

        processed: list[Connection] = []
        for index, document_id in enumerate(document_ids, start=1):
            logger.debug("[AutoConnect %s/%d] processing document %s", workspace_id, index, document_id)
            if not is_object_id(document_id):
                logger.warning("[AutoConnect %s] invalid document ID %r, skipping", workspace_id, document_id)
                continue
            source_id = document_id.strip().lower()

            try:
                candidates = self.similarity.similar_to(source_id, self._top_n)
            except CollaboratorError as exc:
                logger.warning(
                    "[AutoConnect %s] failed to fetch similar docs for %s: %s, skipping",
                    workspace_id,
                    source_id,
                    exc,
                )
                continue

            for target_id in self._targets(source_id, candidates, workspace_id):
                try:
                    connection = self._repository.upsert(source_id, target_id, workspace_id, ConnectionStatus.PENDING)
                except StoreError as exc:
                    logger.warning("[AutoConnect %s] could not store %s->%s: %s", workspace_id, source_id, target_id, exc)
                    continue
                processed.append(connection)

        logger.info("[AutoConnect] finished, %d connections processed for workspace %s", len(processed), workspace_id)
        return processed

    def suggest_for_content(self, content: str, top_n: int | None = None) -> list[str]:
        """Return distinct, well-formed ids of documents similar to free text."""

        content = require_text(content, "content")
        candidates = self.similarity.similar_to_content(content, top_n or self._top_n)
        suggestions: list[str] = []
        for candidate in candidates:
            if is_object_id(candidate):
                normalised = candidate.strip().lower()
                if normalised not in suggestions:
                    suggestions.append(normalised)
        return suggestions

    # ------------------------------------------------------------------
    # manual lifecycle
    # ------------------------------------------------------------------
    def confirm(self, source_id: str, target_id: str, workspace_id: str) -> None:
        """Mark an edge ``confirmed``; a missing edge is not an error."""

        source_id = parse_object_id(source_id, "source")
        target_id = parse_object_id(target_id, "target")
        workspace_id = normalise_workspace_id(workspace_id)
        if not self._repository.set_status(source_id, target_id, workspace_id, ConnectionStatus.CONFIRMED):
            logger.debug("[%s] confirm matched no connection %s->%s", workspace_id, source_id, target_id)

    def edit(self, source_id: str, target_id: str, workspace_id: str) -> Connection:
        """Re-propose an edge: the record is rewritten as a fresh ``pending`` one."""

        source_id = parse_object_id(source_id, "source")
        target_id = parse_object_id(target_id, "target")
        workspace_id = normalise_workspace_id(workspace_id)
        return self._repository.upsert(source_id, target_id, workspace_id, ConnectionStatus.PENDING)

    def confirm_all(self, workspace_id: str) -> int:
        """Promote every ``pending`` edge of the workspace; other statuses are left as they are."""

        workspace_id = normalise_workspace_id(workspace_id)
        confirmed = self._repository.bulk_set_status(
            workspace_id, (ConnectionStatus.PENDING,), ConnectionStatus.CONFIRMED
        )
        logger.info("[ConfirmAll] confirmed %d connections for workspace %s", confirmed, workspace_id)
        return confirmed

    def clear_pending(self, workspace_id: str) -> int:
        workspace_id = normalise_workspace_id(workspace_id)
        deleted = self._repository.bulk_delete(
            workspace_id, lambda connection: connection.status is ConnectionStatus.PENDING
        )
        logger.info("[ClearConnections] deleted %d pending connections for workspace %s", deleted, workspace_id)
        return deleted

    # ------------------------------------------------------------------
    # cascades
    # ------------------------------------------------------------------
    def on_document_deleted(self, document_id: str, workspace_id: str) -> int:
        document_id = parse_object_id(document_id, "document")
        workspace_id = normalise_workspace_id(workspace_id)
        return self._repository.bulk_delete(workspace_id, lambda connection: connection.touches(document_id))

    def delete_workspace_connections(self, workspace_id: str) -> int:
        workspace_id = normalise_workspace_id(workspace_id)
        return self._repository.bulk_delete(workspace_id)


_connections = InMemoryConnectionRepository()
_engine = GraphConnectionEngine(_connections, top_n=get_settings().similar_top_n)


def get_graph_engine() -> GraphConnectionEngine:
    """Return the singleton graph engine for the process."""

    return _engine
