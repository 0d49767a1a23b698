"""
FastAPI application factory
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from starlette.middleware.sessions import SessionMiddleware

from contactbook import __version__
from contactbook.api.routes import health, metrics, pages
from contactbook.api.routes.contacts_pages import ContactController
from contactbook.core.config import Settings, get_settings
from contactbook.core.database import Database
from contactbook.core.exceptions import ContactBookError, StoreConnectionError
from contactbook.core.flash import FlashMessages
from contactbook.core.logging_config import LoggingConfig
from contactbook.core.middleware import LoggingContextMiddleware, MetricsMiddleware
from contactbook.core.routing import RequestContext, Router
from contactbook.core.templates import PageRenderer
from contactbook.services.contact_repository import ContactRepository

logger = LoggingConfig.get_logger(__name__)


def _error_context(request: Request) -> RequestContext:
    session = request.session if "session" in request.scope else {}
    return RequestContext(
        method=request.method,
        path=request.url.path,
        flash=FlashMessages(session),
    )


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the application.

    The store handle is created here (or injected by the caller) and owned by
    the app: verified at startup, disposed at shutdown.
    """
    settings = settings or get_settings()
    LoggingConfig.configure(settings, force=True)

    database = database or Database.from_settings(settings)
    repository = ContactRepository(database)
    renderer = PageRenderer(settings.templates_dir, app_name=settings.app_name)
    controller = ContactController(repository, renderer, page_size=settings.contacts_page_size)
    page_router = controller.register(Router())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan events for FastAPI app"""
        logger.info(f"Starting {settings.app_name} in {settings.app_env} mode...")
        try:
            database.verify_connection()
        except StoreConnectionError:
            logger.critical("Database unreachable at startup; aborting")
            raise
        if settings.database_create_tables:
            database.create_tables()

        yield

        logger.info(f"Shutting down {settings.app_name}...")
        database.dispose()

    app = FastAPI(
        title=settings.app_name,
        description="Contact management with server-rendered pages",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database
    app.state.repository = repository
    app.state.renderer = renderer
    app.state.page_router = page_router

    app.add_middleware(MetricsMiddleware)
    app.add_middleware(LoggingContextMiddleware)
    # Outermost, so the session is loaded before anything else reads it
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.secret_key,
        session_cookie="contactbook_session",
        same_site="lax",
        https_only=settings.is_production,
    )

    @app.exception_handler(ContactBookError)
    async def contactbook_exception_handler(request: Request, exc: ContactBookError):
        """Store failures that escaped a handler: log the detail, show a generic page"""
        logger.error(
            "Unhandled application error",
            exc_info=exc,
            extra={
                "error_type": type(exc).__name__,
                "path": request.url.path,
                "method": request.method,
            }
        )
        return renderer.render(
            _error_context(request),
            "errors/500.html",
            {"message": exc.user_message},
            status_code=503,
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler to log all unhandled errors"""
        logger.error(
            "Unhandled exception",
            exc_info=exc,
            extra={
                "error_type": type(exc).__name__,
                "path": request.url.path,
                "method": request.method,
            }
        )
        return renderer.render(
            _error_context(request),
            "errors/500.html",
            {"message": ContactBookError.user_message},
            status_code=500,
        )

    app.include_router(health.router)
    app.include_router(metrics.router)
    # Catch-all page dispatcher goes last
    app.include_router(pages.router)

    return app
