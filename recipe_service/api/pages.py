"""
Static HTML pages and the global not-found responder.

These routes only hand files from the pages directory to the browser; they
sit outside the rate-limit gate.
"""

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, HTMLResponse
from starlette.types import Receive, Scope, Send

from recipe_service.utils.logger import setup_logger

logger = setup_logger("api.pages")

NOT_FOUND_PAGE = "errors/404.html"
FALLBACK_NOT_FOUND_HTML = "<!DOCTYPE html><html><body><h1>404 - Page not found</h1></body></html>"

# URL path -> file relative to the pages directory
PAGE_ROUTES = {
    "/": "index.html",
    "/help": "help.html",
    "/recipes": "recipes.html",
    "/err": NOT_FOUND_PAGE,
    "/login": "auth/login.html",
    "/register": "auth/register.html",
    "/users": "crud-test/users.html",
}

router = APIRouter(tags=["Pages"], include_in_schema=False)


def page_response(pages_dir: Path, relative_path: str, status_code: int = 200):
    page = pages_dir / relative_path
    if page.is_file():
        return FileResponse(page, status_code=status_code, media_type="text/html")
    logger.warning(f"Page file missing: {page}")
    return HTMLResponse(FALLBACK_NOT_FOUND_HTML, status_code=404)


def _page_endpoint(relative_path: str):
    async def serve_page(request: Request):
        return page_response(request.app.state.settings.pages_dir, relative_path)

    serve_page.__name__ = f"page_{relative_path.replace('/', '_').replace('.', '_')}"
    return serve_page


for _path, _file in PAGE_ROUTES.items():
    router.add_api_route(_path, _page_endpoint(_file), methods=["GET"])


class NotFoundPage:
    """ASGI fallback for paths no route matched: serves the 404 page."""

    def __init__(self, pages_dir: Path):
        self.pages_dir = pages_dir

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "websocket":
            await send({"type": "websocket.close", "code": 1000})
            return
        logger.info(f"No route for {scope.get('method')} {scope.get('path')}")
        response = page_response(self.pages_dir, NOT_FOUND_PAGE, status_code=404)
        await response(scope, receive, send)
