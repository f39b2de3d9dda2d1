from __future__ import annotations

import asyncio

from fastapi import APIRouter, Header, HTTPException

from notegraph.application import get_graph_engine, get_graph_projector, get_workspace_service, restyle_message
from notegraph.core.schema import (
    StyleChangeRequest,
    SuggestRequest,
    WorkspaceCreateRequest,
    WorkspaceUpdateRequest,
)

router = APIRouter(prefix="/workspaces", tags=["workspace"])


def _require_user(user_id: str | None) -> str:
    if not user_id:
        raise HTTPException(status_code=400, detail="X-User-ID header is missing")
    return user_id


@router.get("")
async def list_workspaces(x_user_id: str | None = Header(default=None)) -> dict:
    service = get_workspace_service()
    items = service.list_workspaces(_require_user(x_user_id))
    return {"status": "success", "data": [workspace.to_dict() for workspace in items]}


@router.post("")
async def create_workspace(payload: WorkspaceCreateRequest, x_user_id: str | None = Header(default=None)) -> dict:
    service = get_workspace_service()
    workspace_id = await asyncio.to_thread(
        service.create_workspace, payload.title, payload.type, _require_user(x_user_id)
    )
    return {"status": "success", "workspaceId": workspace_id}


@router.put("/{workspace_id}")
async def update_workspace(
    workspace_id: str,
    payload: WorkspaceUpdateRequest,
    x_user_id: str | None = Header(default=None),
) -> dict:
    service = get_workspace_service()
    message = await asyncio.to_thread(
        service.update_workspace,
        workspace_id,
        _require_user(x_user_id),
        title=payload.title,
        style=payload.type,
    )
    return {"status": "success", "message": message}


@router.delete("/{workspace_id}")
async def delete_workspace(workspace_id: str, x_user_id: str | None = Header(default=None)) -> dict:
    service = get_workspace_service()
    await asyncio.to_thread(service.delete_workspace, workspace_id, _require_user(x_user_id))
    return {"status": "success"}


@router.get("/{workspace_id}/type")
async def get_workspace_type(workspace_id: str, x_user_id: str | None = Header(default=None)) -> dict:
    style = get_workspace_service().check_workspace(workspace_id, _require_user(x_user_id))
    if style is None:
        raise HTTPException(status_code=404, detail="Workspace not found or unauthorized")
    return {"status": "success", "type": style.value}


@router.post("/{workspace_id}/style")
async def change_workspace_style(
    workspace_id: str,
    payload: StyleChangeRequest,
    x_user_id: str | None = Header(default=None),
) -> dict:
    service = get_workspace_service()
    job = service.change_workspace_style(workspace_id, _require_user(x_user_id), payload.new_style)
    return {"status": "success", "message": restyle_message(job), "jobId": job.job_id}


@router.get("/{workspace_id}/jobs/{job_id}")
async def get_workspace_job(workspace_id: str, job_id: str) -> dict:
    job = get_workspace_service().get_job(workspace_id, job_id)
    return {"status": "success", "data": job.to_dict()}


@router.get("/{workspace_id}/graph")
async def get_workspace_graph(workspace_id: str) -> dict:
    graph = get_graph_projector().project_workspace_graph(workspace_id)
    return {"status": "success", "data": graph.to_dict()}


@router.post("/{workspace_id}/connect/auto")
async def auto_connect_workspace(workspace_id: str) -> dict:
    connections = await asyncio.to_thread(get_graph_engine().auto_connect_workspace, workspace_id)
    return {"status": "success", "items": [connection.to_dict() for connection in connections]}


@router.post("/{workspace_id}/connect/confirm-all")
async def confirm_all_connections(workspace_id: str) -> dict:
    confirmed = get_graph_engine().confirm_all(workspace_id)
    return {"status": "success", "confirmed": confirmed}


@router.post("/{workspace_id}/connect/clear-pending")
async def clear_pending_connections(workspace_id: str) -> dict:
    deleted = get_graph_engine().clear_pending(workspace_id)
    return {"status": "success", "deleted": deleted}


@router.post("/{workspace_id}/connect/suggest")
async def suggest_connections(workspace_id: str, payload: SuggestRequest) -> dict:
    engine = get_graph_engine()
    ids = await asyncio.to_thread(engine.suggest_for_content, payload.content, payload.top_n)
    return {"status": "success", "workspaceId": workspace_id, "ids": ids}
