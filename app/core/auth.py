import math
import time
from typing import Any, Callable, Optional

from fastapi import Depends, Request
from loguru import logger

from app.core.config import SITE_URL
from app.core.errors import LoginRequired, UpstreamError, ValidationFailed, VerifyEmail
from app.core.session import read_session
from app.schemas.enums import OAuthProvider
from app.schemas.session import AdminSession, AdminUser
from app.services.supabase_client import supabase_anon

MIN_PASSWORD_LENGTH = 8
_FALLBACK_TTL_SECONDS = 60 * 60


# ------------------------------------------------------------
# Identity gateway
# ------------------------------------------------------------
class IdentityGateway:
    """
    Password, signup and OAuth calls against the hosted identity provider.
    Failures come back as `SonieError` subclasses carrying the provider's
    message when it sent one.
    """

    def __init__(self, client_factory: Callable[..., Any] = supabase_anon, site_url: str = SITE_URL):
        self._client_factory = client_factory
        self.site_url = site_url

    def _call(self, fallback: str, fn: Callable[[Any], Any], access_token: str | None = None):
        client = self._client_factory(access_token) if access_token else self._client_factory()
        try:
            return fn(client.auth)
        except Exception as e:
            message = getattr(e, "message", None) or str(e) or fallback
            logger.warning(f"[auth] provider call failed: {message}")
            raise UpstreamError(message) from e

    @staticmethod
    def _to_session(auth_response: Any, email: str) -> AdminSession:
        session = auth_response.session
        expires_at = session.expires_at or int(time.time()) + _FALLBACK_TTL_SECONDS
        return AdminSession(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            expires_at=int(expires_at),
            email=email,
        )

    def login_with_password(self, email: str, password: str) -> AdminSession:
        email = (email or "").strip()
        if not email or not password:
            raise ValidationFailed("Email and password are required.")

        fallback = "Invalid credentials. Please try again."
        resp = self._call(
            fallback,
            lambda auth: auth.sign_in_with_password({"email": email, "password": password}),
        )
        if not resp or not resp.session:
            raise UpstreamError(fallback)

        logger.info(f"[auth] password login | email={email}")
        return self._to_session(resp, email)

    def signup(self, name: str, email: str, password: str) -> AdminSession:
        name = (name or "").strip()
        email = (email or "").strip()
        if not name or not email or not password:
            raise ValidationFailed("Name, email, and password are required.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationFailed(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

        resp = self._call(
            "Unable to create your account.",
            lambda auth: auth.sign_up(
                {"email": email, "password": password, "options": {"data": {"name": name}}}
            ),
        )
        if not resp or not resp.session:
            # account exists but email confirmation is still pending
            raise VerifyEmail()

        logger.info(f"[auth] signup | email={email}")
        return self._to_session(resp, email)

    def start_oauth(self, provider: OAuthProvider = OAuthProvider.google) -> str:
        fallback = "Unable to start Google sign-in."
        resp = self._call(
            fallback,
            lambda auth: auth.sign_in_with_oauth(
                {
                    "provider": provider.value,
                    "options": {
                        "redirect_to": f"{self.site_url}/admin/callback/relay",
                        "query_params": {"prompt": "select_account"},
                    },
                }
            ),
        )
        if not resp or not resp.url:
            raise UpstreamError(fallback)
        return resp.url

    def exchange_code(self, code: str) -> AdminSession:
        fallback = "Unable to complete Google sign-in."
        resp = self._call(
            fallback,
            lambda auth: auth.exchange_code_for_session(
                {"auth_code": code, "redirect_to": f"{self.site_url}/admin/callback"}
            ),
        )
        if not resp or not resp.session:
            raise UpstreamError(fallback)

        email = (resp.user.email if resp.user else None) or "admin"
        return self._to_session(resp, email)

    def session_from_fragment(
        self,
        access_token: str,
        refresh_token: Optional[str],
        expires_at: Optional[str],
    ) -> AdminSession:
        """Tokens relayed from the URL fragment of an implicit OAuth redirect."""
        try:
            parsed = float(expires_at) if expires_at else None
        except ValueError:
            parsed = None
        expiry = int(parsed) if parsed is not None and math.isfinite(parsed) and parsed > 0 else None

        user = self.resolve_user(access_token)
        return AdminSession(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expiry or int(time.time()) + _FALLBACK_TTL_SECONDS,
            email=(user.email if user else None) or "admin",
        )

    def resolve_user(self, access_token: Optional[str]) -> Optional[AdminUser]:
        if not access_token:
            return None
        try:
            resp = self._call("Not authenticated", lambda auth: auth.get_user(access_token), access_token)
        except UpstreamError:
            # expired or revoked token: treated as logged out, never refreshed
            return None
        if not resp or not resp.user:
            return None
        return AdminUser(id=str(resp.user.id), email=resp.user.email)


# ------------------------------------------------------------
# Dependencies
# ------------------------------------------------------------
_GATEWAY = IdentityGateway()


def get_identity_gateway() -> IdentityGateway:
    return _GATEWAY


def get_admin_session(request: Request) -> Optional[AdminSession]:
    return read_session(request)


def get_admin_user(
    session: Optional[AdminSession] = Depends(get_admin_session),
    identity: IdentityGateway = Depends(get_identity_gateway),
) -> Optional[AdminUser]:
    return identity.resolve_user(session.access_token) if session else None


def require_admin(user: Optional[AdminUser] = Depends(get_admin_user)) -> AdminUser:
    if not user:
        raise LoginRequired()
    return user
