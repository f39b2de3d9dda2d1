from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ConnectionRequest(CamelModel):
    source_id: str = Field(alias="sourceId", min_length=1)
    target_id: str = Field(alias="targetId", min_length=1)
    workspace_id: str = Field(alias="workspaceId", min_length=1)


class DocumentEventRequest(CamelModel):
    note_id: str = Field(alias="noteId", min_length=1)
    workspace_id: str = Field(alias="workspaceId", min_length=1)


class WorkspaceCreateRequest(CamelModel):
    title: str = Field(min_length=1)
    type: str = Field(min_length=1)


class WorkspaceUpdateRequest(CamelModel):
    title: str | None = None
    type: str | None = None


class StyleChangeRequest(CamelModel):
    new_style: str = Field(alias="newStyle", min_length=1)


class SuggestRequest(CamelModel):
    content: str = Field(min_length=1)
    top_n: int | None = Field(default=None, alias="topN", ge=1, le=50)
