"""
Hosted Authentication (Supabase)

Client factories for the Supabase identity provider and the FastAPI
dependency that resolves the calling user from an access token.

Design:
    - The Supabase SDK is synchronous; calls run in a worker thread.
    - Handlers receive ``AuthUser | None`` and decide themselves how to
      report a missing session, so every handler keeps the same
      ``{success, error}`` result shape.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import lru_cache

from fastapi import Cookie, Depends, Header
from supabase import Client, create_client

from ai_memo.core.config import settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "sb-access-token"


@dataclass(frozen=True)
class AuthUser:
    """Authenticated user as reported by the identity provider."""

    id: str
    email: str | None = None


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """Supabase client bound to the public anon key."""
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)


def create_auth_client() -> Client:
    """
    Fresh anon-key client for session-issuing calls (sign-in, sign-up,
    code exchange). The SDK keeps the issued session on the client, so
    these calls never go through the shared instance.
    """
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)


@lru_cache(maxsize=1)
def get_supabase_admin_client() -> Client:
    """
    Supabase client bound to the service-role key.

    Raises:
        RuntimeError: If SUPABASE_SERVICE_ROLE_KEY is not configured.
    """
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("SUPABASE_SERVICE_ROLE_KEY is not configured")
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)


def get_access_token(
    authorization: str | None = Header(None, alias="Authorization"),
    access_token_cookie: str | None = Cookie(None, alias=ACCESS_TOKEN_COOKIE),
) -> str | None:
    """Extract the bearer token from the Authorization header or session cookie."""
    if authorization and authorization.startswith("Bearer "):
        return authorization.removeprefix("Bearer ").strip() or None
    return access_token_cookie or None


async def resolve_user(token: str | None) -> AuthUser | None:
    """
    Validate an access token with the identity provider.

    Returns None for a missing, expired or rejected token.
    """
    if not token:
        return None

    client = get_supabase_client()
    try:
        response = await asyncio.to_thread(client.auth.get_user, token)
    except Exception as e:
        logger.warning(f"Session validation failed: {e}")
        return None

    user = getattr(response, "user", None)
    if user is None:
        return None
    return AuthUser(id=str(user.id), email=getattr(user, "email", None))


async def get_current_user(
    token: str | None = Depends(get_access_token),
) -> AuthUser | None:
    """FastAPI dependency: the calling user, or None when unauthenticated."""
    return await resolve_user(token)
