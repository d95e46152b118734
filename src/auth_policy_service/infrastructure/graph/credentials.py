"""Tenant-scoped credentials for the remote policy API.

Two credential contexts are supported:
- delegated: acts as the calling user, via an OAuth 2.0 refresh_token grant
- application: acts as the app itself, via a client_credentials grant

Some writes (Temporary Access Pass enablement) are only accepted upstream in
the application context.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

import httpx

from auth_policy_service.core.policy.errors import CredentialError
from auth_policy_service.domain.models import CredentialContext

logger = logging.getLogger(__name__)


class CredentialProvider(ABC):
    """Abstract interface for obtaining bearer tokens per tenant."""

    @abstractmethod
    async def get_token(self, tenant: str, context: CredentialContext) -> str:
        """Return a bearer token for the tenant in the given context.

        Raises:
            CredentialError: If no token can be obtained
        """
        pass


class OAuthCredentialProvider(CredentialProvider):
    """Obtains tokens from the Microsoft identity platform token endpoint.

    Example Configuration:
        CLIENT_ID=xxx
        CLIENT_SECRET=xxx
        REFRESH_TOKEN=xxx          # only needed for delegated writes
        LOGIN_BASE_URL=https://login.microsoftonline.com
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        client_id: Optional[str],
        client_secret: Optional[str],
        refresh_token: Optional[str] = None,
        login_base_url: str = "https://login.microsoftonline.com",
        scope: str = "https://graph.microsoft.com/.default",
        expiry_skew_seconds: int = 300,
    ):
        """Initialize credential provider.

        Args:
            http_client: Shared HTTP client
            client_id: Application (client) ID
            client_secret: Application secret
            refresh_token: Refresh token for the delegated context
            login_base_url: Identity platform base URL
            scope: Scope requested for every token
            expiry_skew_seconds: Treat tokens as expired this long before expiry
        """
        self.http = http_client
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.login_base_url = login_base_url.rstrip("/")
        self.scope = scope
        self.expiry_skew = timedelta(seconds=expiry_skew_seconds)

        self._cache: Dict[Tuple[str, CredentialContext], Tuple[str, datetime]] = {}

    async def get_token(self, tenant: str, context: CredentialContext) -> str:
        cached = self._cache.get((tenant, context))
        if cached is not None:
            token, expires_at = cached
            if datetime.now(timezone.utc) < expires_at - self.expiry_skew:
                return token

        if not self.client_id or not self.client_secret:
            raise CredentialError("CLIENT_ID and CLIENT_SECRET must be configured")

        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "scope": self.scope,
        }
        if context == CredentialContext.APPLICATION:
            data["grant_type"] = "client_credentials"
        else:
            if not self.refresh_token:
                raise CredentialError("REFRESH_TOKEN must be configured for delegated access")
            data["grant_type"] = "refresh_token"
            data["refresh_token"] = self.refresh_token

        token_endpoint = f"{self.login_base_url}/{tenant}/oauth2/v2.0/token"
        try:
            response = await self.http.post(
                token_endpoint,
                data=data,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as e:
            raise CredentialError(f"Token request for {tenant} failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Token request for {tenant} failed: {response.text}")
            raise CredentialError(
                f"Could not obtain {context.value} token for {tenant}: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            tokens = response.json()
            access_token = tokens["access_token"]
        except (ValueError, KeyError) as e:
            raise CredentialError(f"Malformed token response for {tenant}") from e

        # Some tenants rotate refresh tokens on every use
        if context == CredentialContext.DELEGATED and tokens.get("refresh_token"):
            self.refresh_token = tokens["refresh_token"]

        expires_in = int(tokens.get("expires_in", 3600))
        self._cache[(tenant, context)] = (
            access_token,
            datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        )
        logger.debug(f"Obtained {context.value} token for {tenant}, expires in {expires_in}s")
        return access_token

    def clear_cache(self) -> None:
        """Drop all cached tokens"""
        self._cache.clear()
