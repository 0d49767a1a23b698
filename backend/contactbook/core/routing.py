"""
Method + path routing for the page handlers

Patterns are split on "/" and compared segment by segment. A segment written
as {name} binds the incoming segment's text under that name; every other
segment must match exactly. Routes are tried in registration order and the
first match wins.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from fastapi import Request

from contactbook.core.flash import FlashMessages
from contactbook.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

PLACEHOLDER_START = "{"
PLACEHOLDER_END = "}"


@dataclass
class RequestContext:
    """Everything a handler may read from the incoming request"""

    method: str
    path: str
    query: Dict[str, str] = field(default_factory=dict)
    body: Dict[str, str] = field(default_factory=dict)
    flash: FlashMessages = field(default_factory=lambda: FlashMessages({}))

    @classmethod
    async def from_request(cls, request: Request) -> "RequestContext":
        """Snapshot a Starlette request (form bodies are read eagerly)"""
        body: Dict[str, str] = {}
        if request.method in ("POST", "PUT", "PATCH"):
            form = await request.form()
            body = {key: value for key, value in form.items() if isinstance(value, str)}

        session: Mapping = request.session if "session" in request.scope else {}
        return cls(
            method=request.method.upper(),
            path=request.url.path,
            query=dict(request.query_params),
            body=body,
            flash=FlashMessages(session),
        )


Handler = Callable[[Dict[str, str], RequestContext], Any]


class _NotFound:
    """Returned by Router.dispatch when no route matches"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "NOT_FOUND"


NOT_FOUND = _NotFound()


def _split(path: str) -> List[str]:
    return path.strip("/").split("/") if path.strip("/") else []


def _placeholder_name(segment: str) -> Optional[str]:
    if (
        len(segment) > 2
        and segment.startswith(PLACEHOLDER_START)
        and segment.endswith(PLACEHOLDER_END)
    ):
        return segment[1:-1]
    return None


@dataclass(frozen=True)
class Route:
    method: str
    pattern: str
    handler: Handler
    segments: Tuple[str, ...]

    def match(self, method: str, path: str) -> Optional[Dict[str, str]]:
        """Return bound params when method and path fit this route"""
        if method != self.method:
            return None

        parts = _split(path)
        if len(parts) != len(self.segments):
            return None

        params: Dict[str, str] = {}
        for expected, actual in zip(self.segments, parts):
            name = _placeholder_name(expected)
            if name is not None:
                params[name] = actual
            elif expected != actual:
                return None
        return params


class Router:
    """Ordered table of (method, pattern, handler) routes"""

    def __init__(self):
        self.routes: List[Route] = []

    def register(self, method: str, pattern: str, handler: Handler) -> Route:
        """Append a route; earlier registrations take precedence"""
        segments = tuple(_split(pattern))
        names = [n for n in (_placeholder_name(s) for s in segments) if n is not None]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate placeholder in route pattern {pattern!r}")

        route = Route(method=method.upper(), pattern=pattern, handler=handler, segments=segments)
        self.routes.append(route)
        logger.debug(f"Registered route {route.method} {pattern}")
        return route

    def get(self, pattern: str, handler: Handler) -> Route:
        return self.register("GET", pattern, handler)

    def post(self, pattern: str, handler: Handler) -> Route:
        return self.register("POST", pattern, handler)

    def match(self, method: str, path: str) -> Optional[Tuple[Route, Dict[str, str]]]:
        for route in self.routes:
            params = route.match(method, path)
            if params is not None:
                return route, params
        return None

    def dispatch(self, method: str, path: str, request: Optional[RequestContext] = None):
        """
        Invoke the first matching handler as handler(params, request).

        Returns:
            The handler's return value, or NOT_FOUND when nothing matched
        """
        found = self.match(method, path)
        if found is None:
            logger.info("No route matched", extra={"method": method, "path": path})
            return NOT_FOUND

        route, params = found
        if request is None:
            request = RequestContext(method=method, path=path)
        return route.handler(params, request)
