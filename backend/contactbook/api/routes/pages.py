"""
HTML page entry point: hands every non-API request to the page router
"""
from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from starlette.concurrency import run_in_threadpool

from contactbook.core.logging_config import LoggingConfig
from contactbook.core.routing import NOT_FOUND, RequestContext, Router
from contactbook.core.templates import PageRenderer

logger = LoggingConfig.get_logger(__name__)

router = APIRouter(tags=["pages"])

# Every method reaches the page router, so an unrouted method is a 404, never a 405
PAGE_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route(
    "/{path:path}",
    methods=PAGE_METHODS,
    response_class=HTMLResponse,
    include_in_schema=False,
)
async def dispatch_page(request: Request, path: str):
    """Build the request context and dispatch it to the page handlers"""
    ctx = await RequestContext.from_request(request)
    page_router: Router = request.app.state.page_router

    # Handlers are synchronous and talk to the store
    response = await run_in_threadpool(page_router.dispatch, ctx.method, ctx.path, ctx)

    if response is NOT_FOUND:
        renderer: PageRenderer = request.app.state.renderer
        return renderer.render(ctx, "errors/404.html", {"path": ctx.path}, status_code=404)
    return response
