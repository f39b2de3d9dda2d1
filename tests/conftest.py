from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from notegraph.application import reset_workspace_state
from notegraph.core.errors import CollaboratorError
from notegraph.infrastructure import (
    LocalProjectProvider,
    configure_project_provider,
    configure_similarity_client,
    get_project_provider,
    get_similarity_client,
)

WORKSPACE = "6517a2624a081a27e7d0f91e"
OTHER_WORKSPACE = "6517a2624a081a27e7d0f91f"
DOC_A = "6517a2624a081a27e7d0f92a"
DOC_B = "6517a2624a081a27e7d0f92b"
DOC_C = "6517a2624a081a27e7d0f92c"
DOC_D = "6517a2624a081a27e7d0f92d"


class FakeSimilarity:
    """Scripted stand-in for the topic and note services."""

    def __init__(
        self,
        similar: dict[str, list[str]] | None = None,
        documents: dict[str, list[str]] | None = None,
    ) -> None:
        self.similar = similar or {}
        self.documents = documents or {}
        self.content_results: list[str] = []
        self.failing: set[str] = set()
        self.listing_fails = False
        self.calls: list[tuple[str, object, int | None]] = []

    def similar_to(self, document_id: str, top_n: int) -> list[str]:
        self.calls.append(("similar_to", document_id, top_n))
        if document_id in self.failing:
            raise CollaboratorError(f"topic service returned non-200 status: 500 for {document_id}")
        return list(self.similar.get(document_id, []))

    def similar_to_content(self, content: str, top_n: int) -> list[str]:
        self.calls.append(("similar_to_content", content, top_n))
        return list(self.content_results)

    def list_document_ids(self, workspace_id: str) -> list[str]:
        self.calls.append(("list_document_ids", workspace_id, None))
        if self.listing_fails:
            raise CollaboratorError("document service returned non-200 status: 503")
        return list(self.documents.get(workspace_id, []))


@pytest.fixture(autouse=True)
def reset_state():
    previous_client = get_similarity_client()
    previous_provider = get_project_provider()
    reset_workspace_state()
    yield
    reset_workspace_state()
    configure_similarity_client(previous_client)
    configure_project_provider(previous_provider)


@pytest.fixture()
def similarity() -> FakeSimilarity:
    fake = FakeSimilarity()
    configure_similarity_client(fake)
    return fake


@pytest.fixture()
def projects() -> LocalProjectProvider:
    provider = LocalProjectProvider()
    configure_project_provider(provider)
    return provider
