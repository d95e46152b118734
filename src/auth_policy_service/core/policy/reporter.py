"""Outcome reporting for policy reconciliation.

Every reconciliation result is logged with severity Info (success) or Error
(failure or rejection). When Redis is available the same record is appended
to a per-tenant audit trail:

- policy:audit:{tenant} -> [record_json, ...]  (newest first, capped)
"""

import json
import logging
from datetime import datetime, timezone
from typing import List, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from auth_policy_service.domain.models import OPERATION_NAME, ReconciliationResult, Severity

logger = logging.getLogger(__name__)


class OutcomeReporter:
    """Emits one record per reconciliation result"""

    def __init__(self, redis_client: Optional[Redis] = None, max_entries: int = 500):
        self.redis = redis_client
        self.max_entries = max_entries
        self.audit_key_pattern = "policy:audit:{}"

    async def report(self, result: ReconciliationResult) -> dict:
        """Record a result in the log sink and, if configured, the audit trail

        Returns:
            The record that was emitted
        """
        record = {
            "tenant": result.tenant,
            "operation": OPERATION_NAME,
            "message": _message(result),
            "severity": result.severity.value,
            "method": result.method,
            "outcome": result.outcome.value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        level = logging.INFO if result.severity == Severity.INFO else logging.ERROR
        logger.log(level, f"[{result.tenant}] {OPERATION_NAME}: {record['message']}")

        if self.redis is not None:
            key = self.audit_key_pattern.format(result.tenant)
            try:
                await self.redis.lpush(key, json.dumps(record))
                await self.redis.ltrim(key, 0, self.max_entries - 1)
            except RedisError as e:
                logger.warning(f"Failed to append audit record for {result.tenant}: {e}")

        return record

    async def recent(self, tenant: str, limit: int = 50) -> List[dict]:
        """Most recent audit records for a tenant, newest first"""
        if self.redis is None:
            return []

        raw_records = await self.redis.lrange(self.audit_key_pattern.format(tenant), 0, limit - 1)
        records = []
        for raw in raw_records:
            try:
                records.append(json.loads(raw))
            except (TypeError, ValueError):
                logger.warning(f"Skipping unreadable audit record for {tenant}")
        return records


def _message(result: ReconciliationResult) -> str:
    state = result.desired_state.value
    if result.is_success:
        return f"Set {result.method} authentication policy to {state}: {result.detail}"
    return f"Failed to set {result.method} authentication policy to {state}: {result.detail}"
