"""Runtime configuration.

Defaults are read from ``config/graph.yaml`` next to the package and every
value can be overridden through environment variables, which is how the
service is configured in containers.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"


def _load_defaults() -> dict[str, Any]:
    path = CONFIG_DIR / "graph.yaml"
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as fp:
        return yaml.safe_load(fp) or {}


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name)
    return value if isinstance(value, dict) else {}


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True, slots=True)
class GraphSettings:
    similarity_url: str = ""
    document_url: str = ""
    collaborator_timeout: float = 3.0
    similar_top_n: int = 5
    restyle_workers: int = 4
    yorkie_addr: str = ""
    yorkie_username: str = ""
    yorkie_password: str = ""
    auth_webhook_url: str = ""
    auth_webhook_methods: tuple[str, ...] = ("AttachDocument", "PushPull", "WatchDocuments")
    cors_origins: tuple[str, ...] = field(default_factory=tuple)
    log_level: str = "INFO"


def load_settings() -> GraphSettings:
    """Merge YAML defaults with environment overrides."""

    data = _load_defaults()
    collaborators = _section(data, "collaborators")
    graph = _section(data, "graph")
    restyle = _section(data, "restyle")
    projects = _section(data, "projects")
    api = _section(data, "api")
    logging_cfg = _section(data, "logging")

    cors_env = os.getenv("API_CORS_ORIGINS", "")
    cors_origins = _split_csv(cors_env) or [str(item) for item in api.get("cors_origins") or []]
    webhook_methods = projects.get("auth_webhook_methods") or GraphSettings.auth_webhook_methods

    return GraphSettings(
        similarity_url=os.getenv("TOPIC_SERVICE_URL") or str(collaborators.get("similarity_url") or ""),
        document_url=os.getenv("NOTE_SERVICE_URL") or str(collaborators.get("document_url") or ""),
        collaborator_timeout=float(os.getenv("COLLABORATOR_TIMEOUT") or collaborators.get("timeout_seconds") or 3.0),
        similar_top_n=int(os.getenv("SIMILAR_TOP_N") or graph.get("similar_top_n") or 5),
        restyle_workers=int(os.getenv("RESTYLE_WORKERS") or restyle.get("workers") or 4),
        yorkie_addr=os.getenv("YORKIE_ADDR") or str(projects.get("yorkie_addr") or ""),
        yorkie_username=os.getenv("YORKIE_ADMIN_USERNAME", ""),
        yorkie_password=os.getenv("YORKIE_ADMIN_PASSWORD", ""),
        auth_webhook_url=os.getenv("AUTH_WEBHOOK_URL") or str(projects.get("auth_webhook_url") or ""),
        auth_webhook_methods=tuple(str(method) for method in webhook_methods),
        cors_origins=tuple(cors_origins),
        log_level=(os.getenv("LOG_LEVEL") or str(logging_cfg.get("level") or "INFO")).upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> GraphSettings:
    """Return the process-wide settings, loaded once."""

    return load_settings()
