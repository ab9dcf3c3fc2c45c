import os
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, PlainTextResponse, RedirectResponse

from config import Settings
from deps import get_sessions, get_settings
from sessions import SessionRegistry

router = APIRouter(tags=["pages"])

INDEX_DOCUMENT = "index.html"

CONTENT_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".svg": "image/svg+xml",
}


# ---------- Helpers ----------

def resolve_path(public_dir: str, url_path: str) -> Optional[str]:
    """Map a URL path onto the public root. None if it resolves outside the root."""
    root = os.path.realpath(public_dir)
    candidate = os.path.realpath(os.path.join(root, url_path.lstrip("/")))
    if candidate != root and not candidate.startswith(root + os.sep):
        return None
    return candidate


def locate(public_dir: str, url_path: str) -> Optional[str]:
    """Resolve a URL path to the file it would serve, directories mapped to their index."""
    file_path = resolve_path(public_dir, url_path)
    if file_path is not None and os.path.isdir(file_path):
        file_path = os.path.join(file_path, INDEX_DOCUMENT)
    return file_path


def content_type_for(file_path: str) -> str:
    ext = os.path.splitext(file_path)[1].lower()
    return CONTENT_TYPES.get(ext, "application/octet-stream")


# ---------- Endpoints ----------

@router.api_route("/{path:path}", methods=["GET", "HEAD"])
async def serve_static(
    path: str,
    request: Request,
    sessions: SessionRegistry = Depends(get_sessions),
    settings: Settings = Depends(get_settings),
):
    """
    Serves files from the public directory.
    Protected pages redirect to the login page unless the session cookie is valid.
    Protection is decided on the resolved file, so /mainmenu.html/ is gated too.
    """
    file_path = locate(settings.public_dir, "/" + path)
    if file_path is None:
        return PlainTextResponse("Forbidden", status_code=403)

    protected = {locate(settings.public_dir, page) for page in settings.protected_pages}
    if file_path in protected:
        token = request.cookies.get(settings.session_cookie_name)
        if sessions.validate(token) is None:
            return RedirectResponse(settings.login_page, status_code=302)

    if not os.path.isfile(file_path):
        return PlainTextResponse("Not found", status_code=404)

    return FileResponse(file_path, media_type=content_type_for(file_path))


@router.api_route("/{path:path}", methods=["POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
async def not_found(path: str):
    return PlainTextResponse("Not found", status_code=404)
