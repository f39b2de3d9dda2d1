"""Infrastructure layer exports."""

from .connections import ConnectionRepository, InMemoryConnectionRepository
from .projects import (
    LocalProjectProvider,
    ProjectCredentials,
    ProjectProvider,
    YorkieAdminClient,
    configure_project_provider,
    get_project_provider,
)
from .similarity import (
    HttpSimilarityClient,
    SimilarityClient,
    UnconfiguredSimilarityClient,
    configure_similarity_client,
    get_similarity_client,
)
from .workspaces import InMemoryWorkspaceRepository, WorkspaceRepository

__all__ = [
    "ConnectionRepository",
    "HttpSimilarityClient",
    "InMemoryConnectionRepository",
    "InMemoryWorkspaceRepository",
    "LocalProjectProvider",
    "ProjectCredentials",
    "ProjectProvider",
    "SimilarityClient",
    "UnconfiguredSimilarityClient",
    "WorkspaceRepository",
    "YorkieAdminClient",
    "configure_project_provider",
    "configure_similarity_client",
    "get_project_provider",
    "get_similarity_client",
]
