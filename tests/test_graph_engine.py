from __future__ import annotations

import pytest

from conftest import DOC_A, DOC_B, DOC_C, DOC_D, OTHER_WORKSPACE, WORKSPACE, FakeSimilarity
from notegraph.application.graph import GraphConnectionEngine
from notegraph.application.projection import GraphProjector
from notegraph.core.errors import CollaboratorError, InvalidIdentifier, StoreError
from notegraph.domain import ConnectionStatus
from notegraph.infrastructure import InMemoryConnectionRepository


@pytest.fixture()
def repository() -> InMemoryConnectionRepository:
    return InMemoryConnectionRepository()


@pytest.fixture()
def fake() -> FakeSimilarity:
    return FakeSimilarity()


@pytest.fixture()
def engine(repository, fake) -> GraphConnectionEngine:
    return GraphConnectionEngine(repository, fake)


def _stored(repository, workspace_id=WORKSPACE) -> dict[tuple[str, str], ConnectionStatus]:
    return {(c.source_id, c.target_id): c.status for c in repository.list_by_workspace(workspace_id)}


class FlakyRepository(InMemoryConnectionRepository):
    def __init__(self, broken_targets: set[str]) -> None:
        super().__init__()
        self.broken_targets = broken_targets

    def insert(self, source_id, target_id, workspace_id, status):
        if target_id in self.broken_targets:
            raise StoreError("write timed out")
        return super().insert(source_id, target_id, workspace_id, status)

    def upsert(self, source_id, target_id, workspace_id, status):
        if target_id in self.broken_targets:
            raise StoreError("write timed out")
        return super().upsert(source_id, target_id, workspace_id, status)


def test_document_created_skips_self_reference(engine, fake, repository):
    fake.similar[DOC_A] = [DOC_B, DOC_C, DOC_A]

    created = engine.on_document_created(DOC_A, WORKSPACE)

    assert [(c.source_id, c.target_id) for c in created] == [(DOC_A, DOC_B), (DOC_A, DOC_C)]
    assert all(c.status is ConnectionStatus.PENDING for c in created)
    assert _stored(repository) == {(DOC_A, DOC_B): ConnectionStatus.PENDING, (DOC_A, DOC_C): ConnectionStatus.PENDING}
    assert fake.calls == [("similar_to", DOC_A, 5)]


def test_document_created_skips_invalid_candidates_and_keeps_going(engine, fake):
    fake.similar[DOC_A] = ["invalid-id", DOC_B, "", DOC_A.upper(), DOC_C]

    created = engine.on_document_created(DOC_A, WORKSPACE)

    assert [c.target_id for c in created] == [DOC_B, DOC_C]


def test_document_created_never_writes_reverse_edges(engine, fake, repository):
    fake.similar[DOC_A] = [DOC_B]

    engine.on_document_created(DOC_A, WORKSPACE)

    assert repository.get(DOC_B, DOC_A, WORKSPACE) is None


def test_document_created_rejects_malformed_document_id(engine, fake):
    with pytest.raises(InvalidIdentifier, match="invalid new document ID"):
        engine.on_document_created("invalid-id", WORKSPACE)
    assert fake.calls == []


def test_document_created_surfaces_collaborator_failure(engine, fake):
    fake.failing.add(DOC_A)

    with pytest.raises(CollaboratorError):
        engine.on_document_created(DOC_A, WORKSPACE)


def test_document_created_omits_edges_that_fail_to_store(fake):
    repository = FlakyRepository({DOC_B})
    engine = GraphConnectionEngine(repository, fake)
    fake.similar[DOC_A] = [DOC_B, DOC_C]

    created = engine.on_document_created(DOC_A, WORKSPACE)

    assert [c.target_id for c in created] == [DOC_C]
    assert _stored(repository) == {(DOC_A, DOC_C): ConnectionStatus.PENDING}


def test_document_created_twice_does_not_duplicate(engine, fake, repository):
    fake.similar[DOC_A] = [DOC_B]

    assert len(engine.on_document_created(DOC_A, WORKSPACE)) == 1
    assert engine.on_document_created(DOC_A, WORKSPACE) == []
    assert len(repository.list_by_workspace(WORKSPACE)) == 1


def test_auto_connect_tolerates_per_document_failures(engine, fake, repository):
    fake.documents[WORKSPACE] = [DOC_A, "not-an-id", DOC_B, DOC_C]
    fake.similar = {
        DOC_A: [DOC_B, DOC_A, "bad"],
        DOC_C: [DOC_D, DOC_A],
    }
    fake.failing.add(DOC_B)

    processed = engine.auto_connect_workspace(WORKSPACE)

    assert [(c.source_id, c.target_id) for c in processed] == [(DOC_A, DOC_B), (DOC_C, DOC_D), (DOC_C, DOC_A)]
    assert set(_stored(repository)) == {(DOC_A, DOC_B), (DOC_C, DOC_D), (DOC_C, DOC_A)}


def test_auto_connect_aborts_when_listing_fails(engine, fake, repository):
    fake.listing_fails = True

    with pytest.raises(CollaboratorError):
        engine.auto_connect_workspace(WORKSPACE)
    assert repository.list_by_workspace(WORKSPACE) == []


def test_auto_connect_is_idempotent(engine, fake, repository):
    fake.documents[WORKSPACE] = [DOC_A, DOC_B]
    fake.similar = {DOC_A: [DOC_B, DOC_C], DOC_B: [DOC_A]}

    first = engine.auto_connect_workspace(WORKSPACE)
    snapshot = _stored(repository)
    second = engine.auto_connect_workspace(WORKSPACE)

    assert len(first) == len(second) == 3
    assert _stored(repository) == snapshot
    assert len(repository.list_by_workspace(WORKSPACE)) == 3


def test_auto_connect_resets_confirmed_edges_to_pending(engine, fake, repository):
    repository.upsert(DOC_A, DOC_B, WORKSPACE, ConnectionStatus.CONFIRMED)
    fake.documents[WORKSPACE] = [DOC_A]
    fake.similar = {DOC_A: [DOC_B]}

    engine.auto_connect_workspace(WORKSPACE)

    assert repository.get(DOC_A, DOC_B, WORKSPACE).status is ConnectionStatus.PENDING


def test_auto_connect_keeps_going_after_store_failure(fake):
    repository = FlakyRepository({DOC_B})
    engine = GraphConnectionEngine(repository, fake)
    fake.documents[WORKSPACE] = [DOC_A]
    fake.similar = {DOC_A: [DOC_B, DOC_C]}

    processed = engine.auto_connect_workspace(WORKSPACE)

    assert [c.target_id for c in processed] == [DOC_C]


def test_edit_then_confirm_leaves_one_confirmed_record(engine, repository):
    engine.edit(DOC_A, DOC_B, WORKSPACE)
    engine.confirm(DOC_A, DOC_B, WORKSPACE)

    records = repository.list_by_workspace(WORKSPACE)
    assert len(records) == 1
    assert records[0].status is ConnectionStatus.CONFIRMED


def test_edit_re_proposes_confirmed_edge(engine, repository):
    repository.upsert(DOC_A, DOC_B, WORKSPACE, ConnectionStatus.CONFIRMED)

    edited = engine.edit(DOC_A, DOC_B, WORKSPACE)

    assert edited.status is ConnectionStatus.PENDING
    assert repository.get(DOC_A, DOC_B, WORKSPACE).status is ConnectionStatus.PENDING


def test_confirm_missing_edge_is_silent(engine, repository):
    engine.confirm(DOC_A, DOC_B, WORKSPACE)

    assert repository.list_by_workspace(WORKSPACE) == []


@pytest.mark.parametrize("source, target", [("invalid", DOC_B), (DOC_A, "invalid")])
def test_confirm_and_edit_validate_identifiers(engine, source, target):
    with pytest.raises(InvalidIdentifier):
        engine.confirm(source, target, WORKSPACE)
    with pytest.raises(InvalidIdentifier):
        engine.edit(source, target, WORKSPACE)


def test_confirm_all_only_touches_pending_in_workspace(engine, repository):
    for target in (DOC_B, DOC_C, DOC_D):
        repository.upsert(DOC_A, target, WORKSPACE, ConnectionStatus.PENDING)
    repository.upsert(DOC_B, DOC_C, WORKSPACE, ConnectionStatus.CONFIRMED)
    repository.upsert(DOC_A, DOC_B, OTHER_WORKSPACE, ConnectionStatus.PENDING)

    assert engine.confirm_all(WORKSPACE) == 3

    assert set(_stored(repository).values()) == {ConnectionStatus.CONFIRMED}
    assert len(_stored(repository)) == 4
    assert _stored(repository, OTHER_WORKSPACE) == {(DOC_A, DOC_B): ConnectionStatus.PENDING}


def test_confirm_all_leaves_edited_edges_alone(engine, repository):
    repository.upsert(DOC_A, DOC_B, WORKSPACE, ConnectionStatus.EDITED)
    repository.upsert(DOC_A, DOC_C, WORKSPACE, ConnectionStatus.PENDING)

    assert engine.confirm_all(WORKSPACE) == 1
    assert _stored(repository) == {
        (DOC_A, DOC_B): ConnectionStatus.EDITED,
        (DOC_A, DOC_C): ConnectionStatus.CONFIRMED,
    }


def test_workspace_ids_are_matched_case_insensitively(engine, fake, repository):
    fake.similar[DOC_A] = [DOC_B]

    engine.on_document_created(DOC_A, WORKSPACE.upper())
    engine.edit(DOC_C, DOC_D, f"  {WORKSPACE.upper()} ")

    assert _stored(repository) == {
        (DOC_A, DOC_B): ConnectionStatus.PENDING,
        (DOC_C, DOC_D): ConnectionStatus.PENDING,
    }
    assert engine.confirm_all(WORKSPACE) == 2
    assert engine.delete_workspace_connections(WORKSPACE.upper()) == 2
    assert repository.list_by_workspace(WORKSPACE) == []


def test_clear_pending_returns_exact_count(engine, repository):
    repository.upsert(DOC_A, DOC_B, WORKSPACE, ConnectionStatus.PENDING)
    repository.upsert(DOC_A, DOC_C, WORKSPACE, ConnectionStatus.PENDING)
    repository.upsert(DOC_B, DOC_C, WORKSPACE, ConnectionStatus.CONFIRMED)
    repository.upsert(DOC_A, DOC_B, OTHER_WORKSPACE, ConnectionStatus.PENDING)

    assert engine.clear_pending(WORKSPACE) == 2
    assert _stored(repository) == {(DOC_B, DOC_C): ConnectionStatus.CONFIRMED}
    assert len(repository.list_by_workspace(OTHER_WORKSPACE)) == 1


def test_document_deleted_removes_edges_in_both_directions(engine, repository):
    repository.upsert(DOC_A, DOC_B, WORKSPACE, ConnectionStatus.PENDING)
    repository.upsert(DOC_C, DOC_A, WORKSPACE, ConnectionStatus.CONFIRMED)
    repository.upsert(DOC_B, DOC_C, WORKSPACE, ConnectionStatus.PENDING)
    repository.upsert(DOC_A, DOC_B, OTHER_WORKSPACE, ConnectionStatus.PENDING)

    assert engine.on_document_deleted(DOC_A, WORKSPACE) == 2

    assert set(_stored(repository)) == {(DOC_B, DOC_C)}
    assert set(_stored(repository, OTHER_WORKSPACE)) == {(DOC_A, DOC_B)}


def test_suggest_for_content_filters_and_deduplicates(engine, fake):
    fake.content_results = [DOC_B, "bogus", DOC_B.upper(), DOC_C]

    assert engine.suggest_for_content("graph databases", 3) == [DOC_B, DOC_C]
    assert fake.calls == [("similar_to_content", "graph databases", 3)]


def test_projector_builds_nodes_and_edges(repository):
    repository.upsert(DOC_A, DOC_B, WORKSPACE, ConnectionStatus.PENDING)
    repository.upsert(DOC_B, DOC_C, WORKSPACE, ConnectionStatus.CONFIRMED)
    repository.upsert(DOC_A, DOC_D, OTHER_WORKSPACE, ConnectionStatus.PENDING)

    graph = GraphProjector(repository).project_workspace_graph(WORKSPACE)

    assert sorted(node.id for node in graph.nodes) == [DOC_A, DOC_B, DOC_C]
    assert all(node.title == "" for node in graph.nodes)
    assert {(e.source_id, e.target_id, e.status) for e in graph.edges} == {
        (DOC_A, DOC_B, ConnectionStatus.PENDING),
        (DOC_B, DOC_C, ConnectionStatus.CONFIRMED),
    }
    payload = graph.to_dict()
    assert {"sourceId": DOC_B, "targetId": DOC_C, "status": "confirmed"} in payload["edges"]
