"""
Integration tests for authentication policy endpoints.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from auth_policy_service.core.policy.errors import TransportError


class TestListMethods:
    """Test GET /api/v1/authentication-methods endpoint."""

    @pytest.mark.asyncio
    async def test_lists_rule_table(self, client: AsyncClient):
        response = await client.get("/api/v1/authentication-methods")

        assert response.status_code == 200
        methods = {item["method_id"]: item for item in response.json()}
        assert len(methods) == 9
        assert methods["SMS"]["allow_enable"] is False
        assert methods["Email"]["remote_on_enable"] is False
        assert methods["TemporaryAccessPass"]["read_on_enable"] is False
        assert methods["TemporaryAccessPass"]["read_on_disable"] is True


class TestSetMethodPolicy:
    """Test PUT /api/v1/tenants/{tenant}/authentication-methods/{method_id} endpoint."""

    @pytest.mark.asyncio
    async def test_enable_fido2(self, client: AsyncClient, mock_policy_client):
        response = await client.put(
            "/api/v1/tenants/T1/authentication-methods/FIDO2", json={"enabled": True}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["outcome"] == "success"
        assert data["tenant"] == "T1"
        assert data["desired_state"] == "enabled"
        document = mock_policy_client.write.call_args.args[2]
        assert document["state"] == "enabled"

    @pytest.mark.asyncio
    async def test_tap_uses_configured_defaults(self, client: AsyncClient, mock_policy_client):
        response = await client.put(
            "/api/v1/tenants/T1/authentication-methods/TemporaryAccessPass",
            json={"enabled": True, "tap_default_length": 12},
        )

        assert response.status_code == 200
        document = mock_policy_client.write.call_args.args[2]
        assert document["defaultLength"] == 12
        assert document["maximumLifetimeInMinutes"] == 480
        assert document["isUsableOnce"] is True

    @pytest.mark.asyncio
    async def test_rejected_returns_422(self, client: AsyncClient, mock_policy_client):
        response = await client.put(
            "/api/v1/tenants/T1/authentication-methods/Voice", json={"enabled": True}
        )

        assert response.status_code == 422
        assert response.json()["outcome"] == "rejected"
        mock_policy_client.read.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_method_returns_422(self, client: AsyncClient):
        response = await client.put(
            "/api/v1/tenants/T1/authentication-methods/Passkey", json={"enabled": False}
        )

        assert response.status_code == 422
        assert "unknown method" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_remote_failure_returns_502(self, client: AsyncClient, mock_policy_client):
        mock_policy_client.read.side_effect = TransportError("Service unavailable", status_code=503)

        response = await client.put(
            "/api/v1/tenants/T1/authentication-methods/MicrosoftAuthenticator",
            json={"enabled": True},
        )

        assert response.status_code == 502
        assert response.json()["outcome"] == "failure"
        mock_policy_client.write.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_body(self, client: AsyncClient):
        response = await client.put(
            "/api/v1/tenants/T1/authentication-methods/FIDO2", json={"state": "on"}
        )

        assert response.status_code == 422
        assert "detail" in response.json()


class TestBatch:
    """Test POST /api/v1/tenants/{tenant}/authentication-methods:batch endpoint."""

    @pytest.mark.asyncio
    async def test_independent_outcomes(self, client: AsyncClient, mock_policy_client):
        response = await client.post(
            "/api/v1/tenants/T1/authentication-methods:batch",
            json={
                "methods": [
                    {"method_id": "SMS", "enabled": True},
                    {"method_id": "softwareOath", "enabled": True},
                    {"method_id": "HardwareOATH", "enabled": False},
                ]
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["tenant"] == "T1"
        assert [r["outcome"] for r in data["results"]] == ["rejected", "success", "success"]
        assert mock_policy_client.write.call_count == 1


class TestAudit:
    """Test GET /api/v1/tenants/{tenant}/authentication-methods/audit endpoint."""

    @pytest.mark.asyncio
    async def test_returns_recent_records(self, client: AsyncClient, mock_redis):
        mock_redis.lrange.return_value = [
            json.dumps(
                {
                    "tenant": "T1",
                    "operation": "Set Authentication Policy",
                    "message": "Set FIDO2 authentication policy to enabled: FIDO2 set to enabled",
                    "severity": "Info",
                    "method": "FIDO2",
                    "outcome": "success",
                    "timestamp": "2026-01-15T10:00:00+00:00",
                }
            )
        ]

        response = await client.get("/api/v1/tenants/T1/authentication-methods/audit?limit=5")

        assert response.status_code == 200
        records = response.json()
        assert records[0]["method"] == "FIDO2"
        assert records[0]["severity"] == "Info"
        mock_redis.lrange.assert_awaited_once_with("policy:audit:T1", 0, 4)


class TestServiceInfo:

    @pytest.mark.asyncio
    async def test_health_without_redis(self, client: AsyncClient):
        """Redis not configured: service stays healthy"""
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["services"]["redis"] == "unavailable"

    @pytest.mark.asyncio
    async def test_health_with_unresponsive_redis(self, client: AsyncClient):
        redis_client = AsyncMock()
        redis_client.health_check.return_value = False

        with patch("auth_policy_service.infrastructure.redis.client._redis_client", redis_client):
            response = await client.get("/health")

        data = response.json()
        assert data["status"] == "degraded"
        assert data["services"]["redis"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_health_with_redis(self, client: AsyncClient):
        redis_client = AsyncMock()
        redis_client.health_check.return_value = True

        with patch("auth_policy_service.infrastructure.redis.client._redis_client", redis_client):
            response = await client.get("/health")

        data = response.json()
        assert data["status"] == "healthy"
        assert data["services"]["redis"] == "healthy"
