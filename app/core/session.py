"""
Admin session cookie.

The cookie is the only auth state the app keeps: a signed JSON payload of
{access_token, refresh_token, expires_at, email}. No server-side session
table. Expiry is not enforced here; an expired access token makes the next
identity call fail and the caller is treated as logged out.
"""
from typing import Optional

from fastapi import Request, Response
from jose import jwt, JWTError
from loguru import logger
from pydantic import ValidationError

from app.core.config import SESSION_SECRET
from app.schemas.session import AdminSession

ADMIN_SESSION_COOKIE = "sonie-admin-session"
SESSION_MAX_AGE = 60 * 60 * 24 * 7
_ALGORITHM = "HS256"


def encode_session(session: AdminSession) -> str:
    return jwt.encode(session.model_dump(), SESSION_SECRET, algorithm=_ALGORITHM)


def decode_session(value: Optional[str]) -> Optional[AdminSession]:
    if not value:
        return None
    try:
        claims = jwt.decode(value, SESSION_SECRET, algorithms=[_ALGORITHM])
        return AdminSession.model_validate(claims)
    except (JWTError, ValidationError) as e:
        logger.debug(f"[session] discarding unreadable cookie: {e}")
        return None


def persist_session(response: Response, session: AdminSession) -> None:
    response.set_cookie(
        key=ADMIN_SESSION_COOKIE,
        value=encode_session(session),
        max_age=SESSION_MAX_AGE,
        path="/",
        secure=True,
        httponly=True,
        samesite="lax",
    )


def read_session(request: Request) -> Optional[AdminSession]:
    return decode_session(request.cookies.get(ADMIN_SESSION_COOKIE))


def clear_session(response: Response) -> None:
    response.delete_cookie(
        ADMIN_SESSION_COOKIE,
        path="/",
        secure=True,
        httponly=True,
        samesite="lax",
    )
