"""Remote Policy Client

Reads and writes authentication method configurations on Microsoft Graph:

    GET   {base}/policies/authenticationMethodsPolicy/authenticationMethodConfigurations/{id}
    PATCH {base}/policies/authenticationMethodsPolicy/authenticationMethodConfigurations/{id}

Writes always carry the complete desired document, never a diff.
"""

import logging
from typing import Optional

import httpx

from auth_policy_service.core.policy.errors import TransportError
from auth_policy_service.domain.models import CredentialContext
from auth_policy_service.infrastructure.graph.credentials import CredentialProvider

logger = logging.getLogger(__name__)

CONFIGURATIONS_PATH = "/policies/authenticationMethodsPolicy/authenticationMethodConfigurations"


class GraphPolicyClient:
    """Client for authentication method configuration resources"""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        credentials: CredentialProvider,
        base_url: str = "https://graph.microsoft.com/v1.0",
    ):
        """Initialize policy client

        Args:
            http_client: Shared HTTP client (owns timeouts)
            credentials: Source of tenant-scoped bearer tokens
            base_url: Graph API base URL including version
        """
        self.http = http_client
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")

    def resource_url(self, method_id: str) -> str:
        return f"{self.base_url}{CONFIGURATIONS_PATH}/{method_id}"

    async def read(self, tenant: str, method_id: str) -> dict:
        """Fetch the current configuration document for one method

        Returns:
            The remote document, minus response metadata

        Raises:
            TransportError: If the request fails or the body is not a JSON object
        """
        response = await self._request(
            "GET", tenant, method_id, CredentialContext.DELEGATED
        )
        try:
            document = response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON reading {method_id} for {tenant}") from e

        if not isinstance(document, dict):
            raise TransportError(f"Unexpected document reading {method_id} for {tenant}")

        document.pop("@odata.context", None)
        return document

    async def write(
        self,
        tenant: str,
        method_id: str,
        config: dict,
        context: CredentialContext = CredentialContext.DELEGATED,
    ) -> None:
        """Submit the complete configuration document for one method

        Raises:
            TransportError: If the request fails
        """
        await self._request("PATCH", tenant, method_id, context, json=config)
        logger.debug(f"Wrote {method_id} configuration for {tenant} ({context.value})")

    async def _request(
        self,
        method: str,
        tenant: str,
        method_id: str,
        context: CredentialContext,
        json: Optional[dict] = None,
    ) -> httpx.Response:
        token = await self.credentials.get_token(tenant, context)
        url = self.resource_url(method_id)

        try:
            response = await self.http.request(
                method,
                url,
                json=json,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Accept": "application/json",
                },
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"{method} {method_id} for {tenant} timed out") from e
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {method_id} for {tenant} failed: {e}") from e

        if response.is_success:
            return response

        message = _error_message(response)
        logger.warning(f"{method} {url} returned {response.status_code}: {message}")
        raise TransportError(message, status_code=response.status_code)


def _error_message(response: httpx.Response) -> str:
    """Extract the remote error message from a Graph error body"""
    try:
        error = response.json().get("error") or {}
        message = error.get("message")
    except (ValueError, AttributeError):
        message = None
    return message or f"Request failed with status {response.status_code}"
