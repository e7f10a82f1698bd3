"""Firebase ID token authentication.

Provides:
- FirebaseTokenVerifier: validates RS256 ID tokens against Google's JWKS
- get_current_user(): FastAPI dependency for the authenticated user
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any

import jwt
import requests
from fastapi import Depends, Request
from starlette.concurrency import run_in_threadpool

from govind.errors import AuthRequired, AuthUnavailable
from govind.observability.correlation import set_user_id

from .dependencies import Services, get_services

FIREBASE_JWKS_URL = (
    "https://www.googleapis.com/service_accounts/v1/jwk/"
    "securetoken@system.gserviceaccount.com"
)
FIREBASE_ISSUER_PREFIX = "https://securetoken.google.com/"
_JWKS_CACHE_TTL = 600  # seconds


@dataclass(frozen=True)
class CurrentUser:
    """Caller identity taken from a verified Firebase ID token."""

    uid: str
    email: str | None = None


class FirebaseTokenVerifier:
    """Verifies Firebase ID tokens for one project. JWKS cached per instance."""

    def __init__(self, project_id: str, jwks_url: str = FIREBASE_JWKS_URL) -> None:
        self._project_id = project_id
        self._jwks_url = jwks_url
        self._jwks_cache: dict[str, Any] | None = None
        self._jwks_cache_time: float = 0
        self._lock = threading.Lock()

    def _fetch_jwks(self) -> dict[str, Any]:
        """Download the Google signing keys."""
        resp = requests.get(self._jwks_url, timeout=10)
        resp.raise_for_status()
        return resp.json()

    def _get_jwks(self, force_refresh: bool = False) -> dict[str, Any]:
        """Cached signing keys, refetched once the TTL lapses."""
        with self._lock:
            now = time.time()
            if (
                not force_refresh
                and self._jwks_cache is not None
                and (now - self._jwks_cache_time) < _JWKS_CACHE_TTL
            ):
                return self._jwks_cache

            try:
                self._jwks_cache = self._fetch_jwks()
            except requests.RequestException as exc:
                raise AuthUnavailable() from exc
            self._jwks_cache_time = now
            return self._jwks_cache

    @staticmethod
    def _find_key(jwks: dict[str, Any], kid: str) -> dict[str, Any] | None:
        for key in jwks.get("keys", []):
            if key.get("kid") == kid:
                return key
        return None

    def verify(self, token: str) -> CurrentUser:
        """Verify an ID token and return the user it identifies.

        Raises:
            AuthRequired: Token missing, malformed, expired or for another project.
            AuthUnavailable: JWKS could not be fetched.
        """
        if not self._project_id:
            raise AuthRequired("Authentication not configured")

        try:
            kid = jwt.get_unverified_header(token).get("kid")
        except jwt.exceptions.DecodeError:
            raise AuthRequired("Invalid token")
        if not kid:
            raise AuthRequired("Invalid token")

        key_data = self._find_key(self._get_jwks(), kid)
        if key_data is None:
            # Keys rotate; refetch once before rejecting
            key_data = self._find_key(self._get_jwks(force_refresh=True), kid)
        if key_data is None:
            raise AuthRequired("Invalid token")

        try:
            public_key = jwt.algorithms.RSAAlgorithm.from_jwk(key_data)
            payload = jwt.decode(
                token,
                public_key,
                algorithms=["RS256"],
                issuer=FIREBASE_ISSUER_PREFIX + self._project_id,
                audience=self._project_id,
                options={"require": ["exp", "iss", "aud", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthRequired("Token expired")
        except (jwt.InvalidTokenError, ValueError):
            raise AuthRequired("Invalid token")

        uid = payload.get("sub")
        if not uid:
            raise AuthRequired("Invalid token")
        return CurrentUser(uid=uid, email=payload.get("email"))


def _extract_bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise AuthRequired()

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthRequired("Invalid authorization header")

    return parts[1]


async def authenticate(request: Request, services: Services) -> CurrentUser:
    """Verify the request's bearer token and tag logs with the user."""
    token = _extract_bearer_token(request)
    # JWKS refresh is a blocking HTTP call
    user = await run_in_threadpool(services.verifier.verify, token)
    set_user_id(user.uid)
    return user


async def get_current_user(
    request: Request, services: Services = Depends(get_services)
) -> CurrentUser:
    """FastAPI dependency: get authenticated user."""
    return await authenticate(request, services)
