"""Bearer-token exchange against the hosted identity endpoint."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from .errors import AuthenticationError, UpstreamError

logger = logging.getLogger(__name__)

IDENTITY_PATH = "/auth/v1/user"


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity returned for a valid token."""

    id: str
    email: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


def parse_bearer_token(authorization: Optional[str]) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization or not authorization.strip():
        raise AuthenticationError(
            "No authorization header provided", code="MISSING_AUTHORIZATION"
        )
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError(
            "Authorization header must be 'Bearer <token>'",
            code="MISSING_AUTHORIZATION",
        )
    return token.strip()


class IdentityClient:
    """Exchanges a bearer token for a user identity.

    ``transport`` lets tests plug in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    async def get_user(self, token: str) -> AuthenticatedUser:
        """Return the user owning ``token``; raise on rejection or upstream failure."""
        url = f"{self.base_url}{IDENTITY_PATH}"
        headers = {"Authorization": f"Bearer {token}", "apikey": self.api_key}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Identity endpoint unreachable: %s", e)
            raise UpstreamError("identity", body=str(e)) from e

        if response.status_code in (400, 401, 403):
            raise AuthenticationError("Invalid authentication")
        if not response.is_success:
            logger.warning("Identity endpoint returned %s", response.status_code)
            raise UpstreamError("identity", response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError("identity", response.status_code, "response is not JSON") from e
        user_id = payload.get("id") if isinstance(payload, dict) else None
        if not user_id:
            raise AuthenticationError("Invalid authentication")
        return AuthenticatedUser(id=str(user_id), email=payload.get("email"), raw=payload)
