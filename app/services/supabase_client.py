from supabase import create_client, Client
from supabase.client import ClientOptions

from app.core.config import SUPABASE_URL, SUPABASE_ANON_KEY


def supabase_anon(access_token: str | None = None) -> Client:
    """
    Fresh anon-key client for one request.
    Nothing is persisted or refreshed client-side; when an access token is
    known it rides along as the bearer.
    """
    options = ClientOptions(
        auto_refresh_token=False,
        persist_session=False,
        flow_type="implicit",
    )
    if access_token:
        options.headers["Authorization"] = f"Bearer {access_token}"

    return create_client(SUPABASE_URL, SUPABASE_ANON_KEY, options=options)
