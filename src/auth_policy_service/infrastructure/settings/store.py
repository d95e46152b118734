"""Tenant Settings Store

Purpose: Look up per-tenant override values for policy reconciliation

Settings documents are JSON blobs keyed by category and tenant. A tenant
document overrides the organization-wide ``AllTenants`` document, which in
turn overrides the literal default.

Storage Schema:
- {category}:{tenant} -> {settings_json}
- {category}:AllTenants -> {settings_json}

Example document:
    {"standards": {"TAP": {"config": "false"}}}
"""

import json
import logging
from typing import Any, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

TAP_USABLE_ONCE_DEFAULT = True


class TenantSettingsStore:
    """Read-only view over tenant settings documents in Redis"""

    def __init__(
        self,
        redis_client: Optional[Redis],
        category: str = "standards",
        global_key: str = "AllTenants",
    ):
        """Initialize settings store

        Args:
            redis_client: Redis connection, or None when no store is configured
            category: Settings category (key prefix)
            global_key: Key of the organization-wide document
        """
        self.redis = redis_client
        self.category = category
        self.global_key = global_key
        self.key_pattern = category + ":{}"

    async def get_document(self, key: str) -> Optional[dict]:
        """Load one settings document

        Missing, unreadable or malformed documents are reported as None.
        """
        if self.redis is None:
            return None

        try:
            raw = await self.redis.get(self.key_pattern.format(key))
        except RedisError as e:
            logger.warning(f"Settings lookup for {key} failed: {e}")
            return None

        if not raw:
            return None

        try:
            document = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring malformed {self.category} settings for {key}")
            return None

        return document if isinstance(document, dict) else None

    async def resolve_tap_usable_once(self, tenant: str) -> bool:
        """Resolve the Temporary Access Pass isUsableOnce flag

        Lookup order: tenant document, AllTenants document, literal default.
        """
        for key in (tenant, self.global_key):
            value = _tap_config(await self.get_document(key))
            if value is not None:
                logger.debug(f"TAP isUsableOnce for {tenant} resolved from {key}: {value}")
                return value

        logger.debug(f"TAP isUsableOnce for {tenant} falls back to default")
        return TAP_USABLE_ONCE_DEFAULT


def _tap_config(document: Optional[dict]) -> Optional[bool]:
    """Extract TAP.config from a settings document as a bool"""
    if not document:
        return None

    standards = document.get("standards")
    for scope in (standards, document):
        if not isinstance(scope, dict):
            continue
        tap = scope.get("TAP")
        if isinstance(tap, dict):
            value = _as_bool(tap.get("config"))
            if value is not None:
                return value
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    return None
