"""Policy reconciler factory.

Builds the process-wide reconciler from configuration at startup.
"""

import logging
from typing import Optional

import httpx
from redis.asyncio import Redis

from auth_policy_service.config.settings import Settings
from auth_policy_service.core.policy.reconciler import PolicyReconciler
from auth_policy_service.core.policy.reporter import OutcomeReporter
from auth_policy_service.infrastructure.graph.client import GraphPolicyClient
from auth_policy_service.infrastructure.graph.credentials import OAuthCredentialProvider
from auth_policy_service.infrastructure.settings.store import TenantSettingsStore

logger = logging.getLogger(__name__)

# Global reconciler instance (initialized at startup)
_reconciler: Optional[PolicyReconciler] = None


def build_policy_reconciler(
    settings: Settings,
    http_client: httpx.AsyncClient,
    redis_client: Optional[Redis] = None,
) -> PolicyReconciler:
    """Wire a reconciler from settings and shared clients.

    Args:
        settings: Application settings
        http_client: Shared HTTP client for Graph and the token endpoint
        redis_client: Redis connection for settings lookup and audit (optional)

    Returns:
        PolicyReconciler instance
    """
    credentials = OAuthCredentialProvider(
        http_client,
        client_id=settings.client_id,
        client_secret=settings.client_secret,
        refresh_token=settings.refresh_token,
        login_base_url=settings.login_base_url,
        scope=settings.graph_scope,
        expiry_skew_seconds=settings.token_expiry_skew_seconds,
    )
    client = GraphPolicyClient(http_client, credentials, base_url=settings.graph_base_url)
    settings_store = TenantSettingsStore(
        redis_client,
        category=settings.settings_category,
        global_key=settings.global_settings_key,
    )
    reporter = OutcomeReporter(
        redis_client if settings.audit_log_enabled else None,
        max_entries=settings.audit_log_max_entries,
    )
    return PolicyReconciler(client, settings_store, reporter)


def initialize_policy_reconciler(
    settings: Settings,
    http_client: httpx.AsyncClient,
    redis_client: Optional[Redis] = None,
) -> PolicyReconciler:
    """Initialize the global policy reconciler."""
    global _reconciler
    _reconciler = build_policy_reconciler(settings, http_client, redis_client)
    logger.info(
        f"Policy reconciler initialized: graph={settings.graph_base_url}, "
        f"settings_store={'redis' if redis_client is not None else 'none'}"
    )
    return _reconciler


def get_policy_reconciler() -> PolicyReconciler:
    """Get the global policy reconciler instance.

    Raises:
        RuntimeError: If reconciler not initialized
    """
    if _reconciler is None:
        raise RuntimeError(
            "PolicyReconciler not initialized. "
            "Call initialize_policy_reconciler() first."
        )
    return _reconciler


def reset_reconciler() -> None:
    """Reset the global reconciler instance (for testing)."""
    global _reconciler
    _reconciler = None
