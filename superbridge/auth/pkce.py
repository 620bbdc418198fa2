"""Authorization-code + PKCE helpers for acquiring the upstream access token."""

from __future__ import annotations

import base64
import hashlib
import secrets
import string
from typing import Any
from urllib.parse import parse_qs, urlencode, urlparse

import httpx

from superbridge.utils.exceptions import AuthError

SCOPES = " ".join(
    [
        "user-read-email",
        "user-read-private",
        "user-read-playback-state",
        "user-modify-playback-state",
        "user-read-currently-playing",
        "user-library-read",
        "user-library-modify",
        "user-top-read",
        "user-follow-read",
        "user-follow-modify",
        "user-read-recently-played",
    ]
)

_VERIFIER_ALPHABET = string.ascii_letters + string.digits


def generate_code_verifier(length: int = 64) -> str:
    return "".join(secrets.choice(_VERIFIER_ALPHABET) for _ in range(length))


def code_challenge(verifier: str) -> str:
    """S256 challenge: base64url(sha256(verifier)) without padding."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def build_authorize_url(
    *,
    client_id: str,
    redirect_uri: str,
    verifier: str,
    accounts_base: str = "https://accounts.spotify.com",
    scope: str = SCOPES,
) -> str:
    query = urlencode(
        {
            "response_type": "code",
            "client_id": client_id,
            "scope": scope,
            "code_challenge_method": "S256",
            "code_challenge": code_challenge(verifier),
            "redirect_uri": redirect_uri,
        }
    )
    return f"{accounts_base.rstrip('/')}/authorize?{query}"


def extract_code(redirected_url: str) -> str | None:
    values = parse_qs(urlparse(redirected_url.strip()).query).get("code")
    return values[0] if values else None


async def exchange_code(
    *,
    code: str,
    verifier: str,
    client_id: str,
    redirect_uri: str,
    accounts_base: str = "https://accounts.spotify.com",
    http_client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """Trade the authorization code for a token document."""
    form = {
        "client_id": client_id,
        "code": code,
        "redirect_uri": redirect_uri,
        "grant_type": "authorization_code",
        "code_verifier": verifier,
    }
    url = f"{accounts_base.rstrip('/')}/api/token"
    client = http_client or httpx.AsyncClient(timeout=20.0)
    try:
        resp = await client.post(url, data=form)
    except httpx.RequestError as exc:
        raise AuthError(f"token exchange failed: {exc}") from exc
    finally:
        if http_client is None:
            await client.aclose()
    try:
        body = resp.json()
    except ValueError:
        body = None
    if resp.status_code >= 400 or not isinstance(body, dict) or body.get("error"):
        raise AuthError(f"token exchange rejected with status {resp.status_code}")
    if not body.get("access_token"):
        raise AuthError("token exchange returned no access_token")
    return body
