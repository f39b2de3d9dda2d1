"""Clients for the similarity (topic) service and the document (note) service.

Both collaborators answer with ``{"ids": [...]}``. The clients only check
the shape of the payload; filtering self references and malformed ids is
the graph engine's job.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol
from urllib.parse import urlparse

import httpx

from notegraph.core.errors import CollaboratorError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 3.0


class SimilarityClient(Protocol):
    """Contract for the similarity and document-listing collaborators."""

    def similar_to(self, document_id: str, top_n: int) -> list[str]:
        """Return ids of documents similar to ``document_id``."""

    def similar_to_content(self, content: str, top_n: int) -> list[str]:
        """Return ids of documents similar to free text."""

    def list_document_ids(self, workspace_id: str) -> list[str]:
        """Return every document id stored in a workspace."""


def _normalise_base(url: str, name: str) -> str:
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"{name} must include scheme and host")
    return url.rstrip("/")


class HttpSimilarityClient:
    """HTTP client for the topic service and the note service."""

    def __init__(
        self,
        similarity_url: str,
        document_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._similarity_url = _normalise_base(similarity_url, "similarity_url")
        self._document_url = _normalise_base(document_url, "document_url")
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _extract_ids(payload: Any, service: str) -> list[str]:
        if not isinstance(payload, dict):
            raise CollaboratorError(f"{service} returned a malformed payload")
        ids = payload.get("ids")
        if ids is None:
            return []
        if not isinstance(ids, list) or not all(isinstance(item, str) for item in ids):
            raise CollaboratorError(f"{service} returned a malformed id list")
        return list(ids)

    def _request_ids(self, service: str, method: str, url: str, **kwargs: Any) -> list[str]:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise CollaboratorError(f"failed to call {service}: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            raise CollaboratorError(f"{service} returned non-200 status: {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise CollaboratorError(f"failed to parse {service} response") from exc
        return self._extract_ids(payload, service)

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def similar_to(self, document_id: str, top_n: int) -> list[str]:
        return self._request_ids(
            "topic service",
            "GET",
            f"{self._similarity_url}/find-similar/by-id",
            params={"noteId": document_id, "topN": top_n},
        )

    def similar_to_content(self, content: str, top_n: int) -> list[str]:
        return self._request_ids(
            "topic service",
            "POST",
            f"{self._similarity_url}/find-similar/by-content",
            json={"content": content, "topN": top_n},
        )

    def list_document_ids(self, workspace_id: str) -> list[str]:
        return self._request_ids(
            "document service",
            "GET",
            f"{self._document_url}/note/ids",
            params={"workspaceId": workspace_id},
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


class UnconfiguredSimilarityClient:
    """Fallback used when no collaborator URLs are configured."""

    def _fail(self) -> list[str]:
        raise CollaboratorError("similarity service is not configured")

    def similar_to(self, document_id: str, top_n: int) -> list[str]:
        return self._fail()

    def similar_to_content(self, content: str, top_n: int) -> list[str]:
        return self._fail()

    def list_document_ids(self, workspace_id: str) -> list[str]:
        return self._fail()


_client: SimilarityClient = UnconfiguredSimilarityClient()


def configure_similarity_client(client: SimilarityClient) -> None:
    """Install the similarity client used by the graph engine."""

    global _client
    _client = client


def get_similarity_client() -> SimilarityClient:
    """Return the currently configured similarity client."""

    return _client


__all__ = [
    "HttpSimilarityClient",
    "SimilarityClient",
    "UnconfiguredSimilarityClient",
    "configure_similarity_client",
    "get_similarity_client",
]
