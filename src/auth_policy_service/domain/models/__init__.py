"""Domain models for Auth Policy Service"""

from auth_policy_service.domain.models.api_policy import (
    AuditRecord,
    BatchMethodItem,
    BatchPolicyRequest,
    BatchPolicyResponse,
    MethodPolicyRequest,
    MethodRuleSummary,
    ReconciliationResponse,
)
from auth_policy_service.domain.models.policy import (
    ALL_USERS_GROUP_ID,
    OPERATION_NAME,
    CredentialContext,
    Outcome,
    PolicyParams,
    PolicyState,
    ReconciliationResult,
    Severity,
    TAPSettings,
    TargetGroup,
)

__all__ = [
    # Policy models
    "ALL_USERS_GROUP_ID",
    "OPERATION_NAME",
    "CredentialContext",
    "Outcome",
    "PolicyParams",
    "PolicyState",
    "ReconciliationResult",
    "Severity",
    "TAPSettings",
    "TargetGroup",
    # API models
    "AuditRecord",
    "BatchMethodItem",
    "BatchPolicyRequest",
    "BatchPolicyResponse",
    "MethodPolicyRequest",
    "MethodRuleSummary",
    "ReconciliationResponse",
]
