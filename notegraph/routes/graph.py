from __future__ import annotations

import asyncio

from fastapi import APIRouter

from notegraph.application import get_graph_engine
from notegraph.core.schema import ConnectionRequest, DocumentEventRequest

router = APIRouter(prefix="/graphs", tags=["graph connection"])


@router.post("/connect/confirm")
async def confirm_connection(payload: ConnectionRequest) -> dict:
    get_graph_engine().confirm(payload.source_id, payload.target_id, payload.workspace_id)
    return {"status": "success"}


@router.post("/connect/edit")
async def edit_connection(payload: ConnectionRequest) -> dict:
    connection = get_graph_engine().edit(payload.source_id, payload.target_id, payload.workspace_id)
    return {"status": "success", "data": connection.to_dict()}


@router.post("/documents/created")
async def document_created(payload: DocumentEventRequest) -> dict:
    """Propose connections for a freshly created note."""
    engine = get_graph_engine()
    connections = await asyncio.to_thread(engine.on_document_created, payload.note_id, payload.workspace_id)
    return {"status": "success", "items": [connection.to_dict() for connection in connections]}


@router.post("/documents/deleted")
async def document_deleted(payload: DocumentEventRequest) -> dict:
    """Drop every connection touching a deleted note."""
    deleted = get_graph_engine().on_document_deleted(payload.note_id, payload.workspace_id)
    return {"status": "success", "deleted": deleted}
