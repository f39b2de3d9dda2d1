from __future__ import annotations

import os
import re
import time

from notegraph.core.errors import InvalidArgument, InvalidIdentifier
from notegraph.domain import WorkspaceStyle

OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


def parse_object_id(value: str | None, field_name: str) -> str:
    """Validate a 24-character hex id and return it in canonical lower case."""

    raw = (value or "").strip()
    if not OBJECT_ID_PATTERN.fullmatch(raw):
        raise InvalidIdentifier(f"invalid {field_name} ID: {value!r}")
    return raw.lower()


def is_object_id(value: str | None) -> bool:
    return bool(value) and OBJECT_ID_PATTERN.fullmatch(value.strip()) is not None


def new_object_id() -> str:
    """Generate an id shaped like a store-assigned object id."""

    timestamp = int(time.time()).to_bytes(4, "big")
    return (timestamp + os.urandom(8)).hex()


def require_text(value: str | None, field_name: str) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidArgument(f"{field_name} is blank")
    return text


def parse_style(value: str | None) -> WorkspaceStyle:
    raw = require_text(value, "style").lower()
    try:
        return WorkspaceStyle(raw)
    except ValueError as exc:
        choices = ", ".join(f"'{style.value}'" for style in WorkspaceStyle)
        raise InvalidArgument(f"invalid workspace style {raw!r}. choose one of {choices}") from exc


def normalise_workspace_id(value: str | None) -> str:
    """Canonical form of a workspace id: trimmed and lower-cased."""

    return require_text(value, "workspaceId").lower()
