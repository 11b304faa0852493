"""
Callbacks for an external authentication framework.

The framework does the provider handshake and then hands us the account and
profile it got back. These functions talk to our own API over HTTP, the same
way the framework's server side would, so they work against any deployment.
"""
import logging
from typing import Any, Mapping
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)


def oauth_username(
    provider: str, user: Mapping[str, Any], profile: Mapping[str, Any] | None
) -> str:
    if provider == "github" and profile is not None and profile.get("login"):
        return str(profile["login"])
    return str(user.get("name") or "").lower()


async def on_oauth_sign_in(
    api: httpx.AsyncClient,
    provider: str,
    provider_account_id: str | None,
    user: Mapping[str, Any] | None,
    profile: Mapping[str, Any] | None = None,
) -> bool:
    """
    Decides whether a sign-in may go ahead. Credentials sign-ins are handled
    elsewhere and always pass; OAuth sign-ins pass once the user and the
    linked account exist.
    """
    if provider == "credentials":
        return True
    if not provider_account_id or user is None:
        return False

    payload = {
        "provider": provider,
        "providerAccountId": provider_account_id,
        "user": {
            "name": user.get("name"),
            "email": user.get("email"),
            "image": user.get("image"),
            "username": oauth_username(provider, user, profile),
        },
    }
    try:
        response = await api.post("/api/auth/signin-with-oauth", json=payload)
        body = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("oauth sign in with %s failed: %s", provider, e)
        return False

    if not body.get("success"):
        logger.info(
            "oauth sign in with %s rejected: %s",
            provider,
            body.get("error", {}).get("message"),
        )
        return False
    return True


async def resolve_session_user_id(
    api: httpx.AsyncClient, provider_account_id: str
) -> str | None:
    """
    Maps a provider account id (the email, for credentials) to the id of the
    user that owns it, for use as the session subject.
    """
    try:
        response = await api.get(
            f"/api/accounts/provider/{quote(provider_account_id, safe='@')}"
        )
        body = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("account lookup failed: %s", e)
        return None
    if not body.get("success") or not body.get("data"):
        return None
    return str(body["data"]["userId"])
