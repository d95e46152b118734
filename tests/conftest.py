"""
Pytest configuration and fixtures for authentication policy tests.

Provides fixtures for:
- Mocked Redis (settings documents and audit trail)
- Mocked remote policy client
- Reconciler wired from the mocks
- Test HTTP client with the reconciler overridden
"""

import copy
import json
from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from auth_policy_service.core.policy.factory import get_policy_reconciler
from auth_policy_service.core.policy.reconciler import PolicyReconciler
from auth_policy_service.core.policy.reporter import OutcomeReporter
from auth_policy_service.infrastructure.settings.store import TenantSettingsStore
from auth_policy_service.main import app



@pytest.fixture
def settings_documents():
    """Settings documents keyed by Redis key, e.g. {"standards:T1": {...}}"""
    return {}


@pytest.fixture
def mock_redis(settings_documents):
    """Mock Redis client serving settings_documents as JSON"""
    redis = AsyncMock()

    async def get(key):
        document = settings_documents.get(key)
        if document is None or isinstance(document, str):
            return document
        return json.dumps(document)

    redis.get = AsyncMock(side_effect=get)
    redis.lpush = AsyncMock(return_value=1)
    redis.ltrim = AsyncMock(return_value=True)
    redis.lrange = AsyncMock(return_value=[])
    return redis


@pytest.fixture
def microsoft_authenticator_document():
    """MicrosoftAuthenticator configuration as returned by the remote service"""
    return {
        "@odata.type": "#microsoft.graph.microsoftAuthenticatorAuthenticationMethodConfiguration",
        "id": "MicrosoftAuthenticator",
        "state": "disabled",
        "isSoftwareOathEnabled": False,
        "featureSettings": {
            "numberMatchingRequiredState": {
                "state": "enabled",
                "includeTarget": {"targetType": "group", "id": "all_users"},
            },
            "displayAppInformationRequiredState": {
                "state": "default",
                "includeTarget": {"targetType": "group", "id": "all_users"},
            },
            "displayLocationInformationRequiredState": {
                "state": "disabled",
                "includeTarget": {"targetType": "group", "id": "all_users"},
            },
        },
        "includeTargets": [
            {"targetType": "group", "id": "all_users", "isRegistrationRequired": False}
        ],
    }


@pytest.fixture
def mock_policy_client():
    """Mock remote policy client; read returns a copy of client.documents[method]"""
    client = AsyncMock()
    client.documents = {}

    async def read(tenant, method_id):
        return copy.deepcopy(client.documents.get(method_id, {"id": method_id, "state": "disabled"}))

    client.read = AsyncMock(side_effect=read)
    client.write = AsyncMock(return_value=None)
    return client


@pytest.fixture
def reporter(mock_redis):
    return OutcomeReporter(mock_redis, max_entries=10)


@pytest.fixture
def reconciler(mock_policy_client, mock_redis, reporter):
    """Reconciler wired from mocked collaborators"""
    return PolicyReconciler(mock_policy_client, TenantSettingsStore(mock_redis), reporter)


@pytest_asyncio.fixture
async def client(reconciler) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with the reconciler overridden."""
    app.dependency_overrides[get_policy_reconciler] = lambda: reconciler

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
