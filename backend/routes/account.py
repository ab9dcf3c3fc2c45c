import json
import logging
from typing import Any, Optional
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel

from accounts import authenticate, register_user
from config import Settings
from deps import get_sessions, get_settings, get_store
from errors import InvalidBody
from sessions import SessionRegistry
from store import CredentialStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["account"])


# ---------- Response schema ----------

class AccountResponse(BaseModel):
    success: bool
    message: Optional[str] = None


# ---------- Body parsing ----------

async def read_fields(request: Request) -> dict[str, Any]:
    """
    Decode the request body as JSON, falling back to URL-encoded form data.

    Any failure while reading or decoding is reported as InvalidBody (400).
    """
    try:
        raw = (await request.body()).decode("utf-8")
    except Exception as exc:
        raise InvalidBody() from exc

    try:
        data = json.loads(raw)
    except ValueError:
        try:
            return dict(parse_qsl(raw, keep_blank_values=True))
        except Exception as exc:
            raise InvalidBody() from exc

    if not isinstance(data, dict):
        raise InvalidBody()
    return data


# ---------- Endpoints ----------

@router.post("/register", response_model=AccountResponse, response_model_exclude_none=True)
async def register(
    request: Request,
    store: CredentialStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """
    Creates a user from username, password, email and optional address/phone.
    400 on missing fields, 409 if the username or email is taken.
    """
    data = await read_fields(request)
    register_user(store, data, iterations=settings.password_hash_iterations)
    return AccountResponse(success=True)


@router.post("/login", response_model=AccountResponse, response_model_exclude_none=True)
async def login(
    request: Request,
    response: Response,
    store: CredentialStore = Depends(get_store),
    sessions: SessionRegistry = Depends(get_sessions),
    settings: Settings = Depends(get_settings),
):
    """
    Verifies credentials and issues a session cookie.
    The cookie has no expiry attribute; the session lifetime is enforced server-side.
    """
    data = await read_fields(request)
    user = authenticate(store, data)

    token = sessions.create(user.username)
    response.set_cookie(
        settings.session_cookie_name,
        token,
        path="/",
        httponly=True,
        samesite="lax",
    )
    logger.info("User %r logged in", user.username)
    return AccountResponse(success=True)


@router.post("/logout", response_model=AccountResponse, response_model_exclude_none=True)
async def logout(
    request: Request,
    response: Response,
    sessions: SessionRegistry = Depends(get_sessions),
    settings: Settings = Depends(get_settings),
):
    """Drops the caller's session, if any, and clears the cookie."""
    if sessions.revoke(request.cookies.get(settings.session_cookie_name)):
        logger.info("Session revoked")

    response.delete_cookie(
        settings.session_cookie_name,
        path="/",
        httponly=True,
        samesite="lax",
    )
    return AccountResponse(success=True)
