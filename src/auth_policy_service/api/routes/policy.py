"""Authentication Policy API Routes

Provides endpoints for setting tenant authentication method policy.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from redis.exceptions import RedisError

from auth_policy_service.config.settings import Settings, get_settings
from auth_policy_service.core.policy import list_rules
from auth_policy_service.core.policy.factory import get_policy_reconciler
from auth_policy_service.core.policy.reconciler import PolicyReconciler, set_authentication_policy
from auth_policy_service.domain.models import (
    AuditRecord,
    BatchPolicyRequest,
    BatchPolicyResponse,
    MethodPolicyRequest,
    MethodRuleSummary,
    Outcome,
    PolicyParams,
    PolicyState,
    ReconciliationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["authentication-policy"])

OUTCOME_STATUS = {
    Outcome.SUCCESS: status.HTTP_200_OK,
    Outcome.REJECTED: 422,
    Outcome.FAILURE: status.HTTP_502_BAD_GATEWAY,
}


def to_params(request: MethodPolicyRequest, settings: Settings) -> PolicyParams:
    """Fill omitted tuning values from the configured defaults"""

    def pick(value, default):
        return default if value is None else value

    return PolicyParams(
        microsoft_authenticator_software_oath_enabled=request.microsoft_authenticator_software_oath_enabled,
        tap_minimum_lifetime=pick(request.tap_minimum_lifetime, settings.tap_minimum_lifetime),
        tap_maximum_lifetime=pick(request.tap_maximum_lifetime, settings.tap_maximum_lifetime),
        tap_default_lifetime=pick(request.tap_default_lifetime, settings.tap_default_lifetime),
        tap_default_length=pick(request.tap_default_length, settings.tap_default_length),
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/authentication-methods", response_model=List[MethodRuleSummary])
async def list_authentication_methods():
    """List supported authentication methods and how each is reconciled."""
    return [
        MethodRuleSummary(
            method_id=rule.method_id,
            allow_enable=rule.allow_enable,
            remote_on_enable=rule.remote_on_enable,
            remote_on_disable=rule.remote_on_disable,
            read_on_enable=rule.requires_read_before_write(PolicyState.ENABLED),
            read_on_disable=rule.requires_read_before_write(PolicyState.DISABLED),
        )
        for rule in list_rules()
    ]


@router.put(
    "/tenants/{tenant}/authentication-methods/{method_id}",
    response_model=ReconciliationResponse,
)
async def set_method_policy(
    tenant: str,
    method_id: str,
    request: MethodPolicyRequest,
    response: Response,
    reconciler: PolicyReconciler = Depends(get_policy_reconciler),
    settings: Settings = Depends(get_settings),
):
    """Set one authentication method's policy for a tenant.

    **Example Request**:
    ```json
    {"enabled": true, "tap_default_length": 12}
    ```

    The body is always a reconciliation result. Status code reflects the
    outcome: 200 success, 422 rejected before any remote call, 502 the
    remote policy service failed.
    """
    result = await set_authentication_policy(
        reconciler, tenant, method_id, request.enabled, to_params(request, settings)
    )
    response.status_code = OUTCOME_STATUS[result.outcome]
    return ReconciliationResponse.from_result(result)


@router.post(
    "/tenants/{tenant}/authentication-methods:batch",
    response_model=BatchPolicyResponse,
)
async def set_method_policies(
    tenant: str,
    request: BatchPolicyRequest,
    reconciler: PolicyReconciler = Depends(get_policy_reconciler),
    settings: Settings = Depends(get_settings),
):
    """Set several authentication methods' policy for a tenant.

    Each method is reconciled independently and reports its own outcome;
    a failure on one method does not stop the others.
    """
    results = await reconciler.reconcile_many(
        tenant,
        [(item.method_id, item.enabled, to_params(item, settings)) for item in request.methods],
    )
    return BatchPolicyResponse(
        tenant=tenant,
        results=[ReconciliationResponse.from_result(result) for result in results],
    )


@router.get(
    "/tenants/{tenant}/authentication-methods/audit",
    response_model=List[AuditRecord],
)
async def get_policy_audit(
    tenant: str,
    limit: int = Query(50, ge=1, le=500),
    reconciler: PolicyReconciler = Depends(get_policy_reconciler),
):
    """Recent authentication policy outcomes recorded for a tenant."""
    try:
        records = await reconciler.reporter.recent(tenant, limit)
    except RedisError as e:
        logger.error(f"Failed to read audit trail for {tenant}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Audit trail not available",
        )
    return [AuditRecord(**record) for record in records]
