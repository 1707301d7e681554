from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from loguru import logger

from app.core.auth import IdentityGateway, get_identity_gateway
from app.core.errors import SonieError
from app.core.session import clear_session, persist_session
from app.core.templates import templates
from app.schemas.enums import OAuthProvider
from app.schemas.session import AdminSession

router = APIRouter(prefix="/admin", tags=["auth"])

ADMIN_HOME = "/admin/bags"


def _login_error_redirect(message: str) -> RedirectResponse:
    return RedirectResponse(f"/admin?error={quote(message, safe='')}", status_code=303)


def _signed_in(session: AdminSession) -> RedirectResponse:
    response = RedirectResponse(ADMIN_HOME, status_code=303)
    persist_session(response, session)
    return response


def _auth_page(request: Request, mode: str, error: Optional[str] = None, status_code: int = 200):
    return templates.TemplateResponse(
        request,
        "admin/login.html",
        {"mode": mode, "error": error},
        status_code=status_code,
    )


# ----------------------------
# LOGIN / SIGNUP PAGE
# ----------------------------
@router.get("")
def admin_login_page(request: Request, error: Optional[str] = None, mode: Optional[str] = None):
    return _auth_page(request, "signup" if mode == "signup" else "login", error)


@router.post("/login")
def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    identity: IdentityGateway = Depends(get_identity_gateway),
):
    try:
        session = identity.login_with_password(email, password)
    except SonieError as e:
        return _auth_page(request, "login", e.message, status_code=400)
    return _signed_in(session)


@router.post("/signup")
def signup(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    identity: IdentityGateway = Depends(get_identity_gateway),
):
    try:
        session = identity.signup(name, email, password)
    except SonieError as e:
        return _auth_page(request, "signup", e.message, status_code=400)
    return _signed_in(session)


@router.post("/logout")
def logout():
    response = RedirectResponse("/admin", status_code=303)
    clear_session(response)
    return response


# ----------------------------
# OAUTH
# ----------------------------
@router.get("/oauth/{provider}")
def start_oauth(
    provider: OAuthProvider,
    identity: IdentityGateway = Depends(get_identity_gateway),
):
    try:
        url = identity.start_oauth(provider)
    except SonieError as e:
        return _login_error_redirect(e.message)
    return RedirectResponse(url, status_code=303)


@router.get("/callback")
def oauth_callback(
    code: Optional[str] = None,
    identity: IdentityGateway = Depends(get_identity_gateway),
):
    if not code:
        return _login_error_redirect("Missing authorization code")

    try:
        session = identity.exchange_code(code)
    except SonieError as e:
        return _login_error_redirect(e.message)

    logger.info(f"[auth] oauth code exchange | email={session.email}")
    return _signed_in(session)


@router.get("/callback/relay")
def oauth_fragment_relay(request: Request):
    # tokens arrive in the URL fragment, which only the browser can read
    return templates.TemplateResponse(request, "admin/callback_relay.html", {})


@router.get("/callback/complete")
def oauth_callback_complete(
    access_token: Optional[str] = None,
    refresh_token: Optional[str] = None,
    expires_at: Optional[str] = None,
    identity: IdentityGateway = Depends(get_identity_gateway),
):
    if not access_token:
        return _login_error_redirect("Missing access token")

    session = identity.session_from_fragment(access_token, refresh_token, expires_at)
    logger.info(f"[auth] oauth fragment relay | email={session.email}")
    return _signed_in(session)
