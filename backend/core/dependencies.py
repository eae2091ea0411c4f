import secrets
from typing import AsyncGenerator, Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from .config import Settings, get_settings
from .database import get_database_manager
from .errors import AuthenticationError, ConfigurationError
from .identity import AuthenticatedUser, IdentityClient, parse_bearer_token


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding an AsyncSession from the DatabaseManager."""
    manager = get_database_manager()
    async with manager.session() as session:
        yield session


def get_identity_client(settings: Settings = Depends(get_settings)) -> IdentityClient:
    """Identity client built from settings; missing credentials fail the request."""
    if not settings.identity_configured:
        raise ConfigurationError("Identity service configuration missing (SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY)")
    return IdentityClient(
        settings.supabase_url,
        settings.service_role_key,
        timeout=settings.identity_timeout_seconds,
    )


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    client: IdentityClient = Depends(get_identity_client),
) -> AuthenticatedUser:
    """Resolve the caller from the bearer token before any data access."""
    token = parse_bearer_token(authorization)
    return await client.get_user(token)


def require_service_key(
    apikey: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Back-office calls must present the service role key as ``apikey``."""
    if not settings.service_role_key:
        raise ConfigurationError("Service key configuration missing (SUPABASE_SERVICE_ROLE_KEY)")
    if not apikey or not secrets.compare_digest(apikey, settings.service_role_key):
        raise AuthenticationError("Valid service key required", code="INVALID_SERVICE_KEY")
