import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from notegraph import __version__
from notegraph.application import get_workspace_service
from notegraph.core.errors import CollaboratorError, GraphServiceError, InvalidArgument, NotFound
from notegraph.core.settings import GraphSettings, get_settings
from notegraph.infrastructure import (
    HttpSimilarityClient,
    YorkieAdminClient,
    configure_project_provider,
    configure_similarity_client,
)
from notegraph.routes import graph, workspace

logger = logging.getLogger(__name__)


def _status_for(exc: GraphServiceError) -> int:
    if isinstance(exc, InvalidArgument):
        return 400
    if isinstance(exc, NotFound):
        return 404
    if isinstance(exc, CollaboratorError):
        return 502
    return 500


def _configure_collaborators(settings: GraphSettings) -> None:
    if settings.similarity_url and settings.document_url:
        configure_similarity_client(
            HttpSimilarityClient(
                settings.similarity_url,
                settings.document_url,
                timeout=settings.collaborator_timeout,
            )
        )
    else:
        logger.warning("TOPIC_SERVICE_URL or NOTE_SERVICE_URL not set; similarity lookups will fail")

    if settings.yorkie_addr:
        configure_project_provider(
            YorkieAdminClient(
                settings.yorkie_addr,
                username=settings.yorkie_username,
                password=settings.yorkie_password,
            )
        )


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    get_workspace_service().worker.shutdown(wait=True)


def create_app(settings: GraphSettings | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    _configure_collaborators(settings)

    app = FastAPI(title="Notegraph Connection API", version=__version__, lifespan=lifespan)

    origins = list(settings.cors_origins) or ["http://localhost:3000", "http://127.0.0.1:3000"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GraphServiceError)
    async def graph_service_error_handler(request: Request, exc: GraphServiceError) -> JSONResponse:
        status_code = _status_for(exc)
        if status_code >= 500:
            logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
        else:
            logger.warning("HTTP %d on %s %s: %s", status_code, request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    app.include_router(graph.router, prefix="/api")
    app.include_router(workspace.router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "Notegraph Connection API",
                "docs": "/docs",
            }
        )

    return app


app = create_app()
