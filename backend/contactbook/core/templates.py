"""
Template rendering utilities
"""
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi.responses import HTMLResponse, RedirectResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape

from contactbook.core.routing import RequestContext


def create_environment(templates_dir: Path) -> Environment:
    """Create the Jinja2 environment for the page templates"""
    env = Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=select_autoescape(["html", "xml"]),
    )
    env.filters["datetime_input"] = format_datetime_input
    return env


def format_datetime_input(value: Any) -> str:
    """Format a datetime (or pass a submitted string) for <input type="datetime-local">"""
    if value is None:
        return ""
    if hasattr(value, "strftime"):
        return value.strftime("%Y-%m-%dT%H:%M")
    return str(value)


class PageRenderer:
    """Renders page templates; pending flash messages are consumed on render"""

    def __init__(self, templates_dir: Path, app_name: str = "ContactBook"):
        self.env = create_environment(templates_dir)
        self.app_name = app_name

    def render(
        self,
        ctx: RequestContext,
        template_name: str,
        data: Optional[Dict[str, Any]] = None,
        status_code: int = 200,
    ) -> HTMLResponse:
        """Render template with context"""
        context = {
            "app_name": self.app_name,
            "current_path": ctx.path,
            "flashes": ctx.flash.consume(),
            **(data or {}),
        }
        body = self.env.get_template(template_name).render(**context)
        return HTMLResponse(content=body, status_code=status_code)


def redirect(path: str) -> RedirectResponse:
    """Post/redirect/get: always answer with 303 so browsers follow with GET"""
    return RedirectResponse(url=path, status_code=303)
