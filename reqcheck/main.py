"""
ReqCheck — FastAPI Application Factory
======================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance
       whose catch-all endpoint hands every request to the ReqCheck Router.
Who:   Called by uvicorn to start the server (uvicorn reqcheck.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐                      │
    │  │  Request ID  │→│  CORS    │                      │
    │  └──────────────┘ └──────────┘                      │
    │                                                     │
    │  Native Routes:                                     │
    │  ┌──────────────┐ ┌──────────────────┐              │
    │  │ GET /health  │ │ GET /diagnostics │              │
    │  └──────────────┘ └──────────────────┘              │
    │                                                     │
    │  Catch-all /{path} → Router.dispatch → Response     │
    │    (movies, demo routes, 404 for everything else)   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, create tables, log the route table
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.responses import Response as StarletteResponse

from reqcheck import __version__
from reqcheck.config import settings
from reqcheck.database import dispose_engine, init_db
from reqcheck.exceptions import DatabaseError, NotFoundError, ValidationError
from reqcheck.middleware.request_id import RequestIDMiddleware, request_id_var
from reqcheck.routes import diagnostics, health
from reqcheck.routes.movies import register_movie_routes
from reqcheck.schemas.http import Request as DispatchRequest
from reqcheck.services.diagnostics import DiagnosticsReporter, diagnostics_reporter
from reqcheck.services.movie_store import MovieStore
from reqcheck.services.router import SUPPORTED_VERBS, Router

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Diagnostic lines arrive on the `reqcheck.diagnostics` logger,
    client faults on `reqcheck.console`.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("ReqCheck %s starting up...", __version__)

    await init_db()

    for route in app.state.router.routes:
        logger.info("Route: %-6s %s", route.verb, route.path)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("ReqCheck shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers (native FastAPI routes only)
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions raised by /health and /diagnostics to
    error bodies. Requests that go through the ReqCheck Router never
    reach these; the router converts faults itself.

        ValidationError  → 400
        NotFoundError    → 404
        DatabaseError    → 500
        Exception        → 500
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Router Bridge
# ══════════════════════════════════════════════════════════════════════════

def register_dispatch_endpoint(app: FastAPI) -> None:
    """
    Catch-all endpoint: converts the Starlette request into a ReqCheck
    Request, dispatches it, and sends the Response back unchanged.

    Registered last so /health and /diagnostics match first.
    """

    @app.api_route(
        "/{full_path:path}",
        methods=list(SUPPORTED_VERBS),
        include_in_schema=False,
    )
    async def dispatch_to_router(request: Request) -> StarletteResponse:
        incoming = DispatchRequest(
            verb=request.method,
            path=request.url.path,
            headers=request.headers,
            body=await request.body(),
            query=dict(request.query_params),
            request_id=getattr(request.state, "request_id", "") or request_id_var.get(""),
        )
        outgoing = await request.app.state.router.dispatch(incoming)
        return StarletteResponse(
            content=outgoing.body,
            status_code=outgoing.status,
            headers=outgoing.headers,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    reporter: Optional[DiagnosticsReporter] = None,
    store: Optional[MovieStore] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    The route table and diagnostic log are initialized here, once, and
    owned by the Router stored on app.state.router. Tests pass their own
    reporter and store for isolation.
    """
    app = FastAPI(
        title="ReqCheck API",
        description=(
            "HTTP request/response contract checker. Every request routed through "
            "the ReqCheck router leaves one diagnostic record behind."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    dispatcher = Router(
        reporter=reporter if reporter is not None else diagnostics_reporter,
        expose_fault_details=settings.debug,
    )
    register_movie_routes(
        dispatcher,
        store if store is not None else MovieStore(),
        include_demo_routes=settings.demo_routes_enabled,
    )
    app.state.router = dispatcher

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(diagnostics.router)
    register_dispatch_endpoint(app)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.backend_host, port=settings.backend_port)
