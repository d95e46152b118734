"""Authentication Policy API Models

Purpose: Request/response models for authentication policy endpoints

Key Components:
- MethodPolicyRequest: desired state and tuning for one method
- BatchPolicyRequest: several method requests for one tenant
- ReconciliationResponse: structured outcome of one reconciliation
- MethodRuleSummary: public view of one rule table entry
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from auth_policy_service.domain.models.policy import ReconciliationResult


class MethodPolicyRequest(BaseModel):
    """Request model for setting one authentication method's policy

    Omitted TAP values fall back to the configured service defaults.
    """

    enabled: bool = Field(..., description="Desired policy state for the method")
    microsoft_authenticator_software_oath_enabled: Optional[bool] = Field(
        None,
        description="Allow software OTP codes in Microsoft Authenticator (enable only)",
    )
    tap_minimum_lifetime: Optional[int] = Field(
        None, ge=10, le=43200, description="Minimum pass lifetime in minutes"
    )
    tap_maximum_lifetime: Optional[int] = Field(
        None, ge=10, le=43200, description="Maximum pass lifetime in minutes"
    )
    tap_default_lifetime: Optional[int] = Field(
        None, ge=10, le=43200, description="Default pass lifetime in minutes"
    )
    tap_default_length: Optional[int] = Field(
        None, ge=8, le=48, description="Pass length in characters"
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"enabled": True, "tap_default_length": 12},
                {"enabled": False},
            ]
        }
    }


class BatchMethodItem(MethodPolicyRequest):
    """One entry of a batch request"""

    method_id: str = Field(..., description="Authentication method identifier", examples=["FIDO2"])


class BatchPolicyRequest(BaseModel):
    """Request model for reconciling several methods for one tenant"""

    methods: List[BatchMethodItem] = Field(..., min_length=1)


class ReconciliationResponse(BaseModel):
    """Outcome of one reconciliation call"""

    method: str
    tenant: str
    desired_state: str
    outcome: str = Field(..., description="success, failure or rejected")
    detail: str
    completed_at: datetime

    @classmethod
    def from_result(cls, result: ReconciliationResult) -> "ReconciliationResponse":
        return cls(
            method=result.method,
            tenant=result.tenant,
            desired_state=result.desired_state.value,
            outcome=result.outcome.value,
            detail=result.detail,
            completed_at=result.completed_at,
        )


class BatchPolicyResponse(BaseModel):
    """Independent outcomes of a batch request"""

    tenant: str
    results: List[ReconciliationResponse]


class MethodRuleSummary(BaseModel):
    """Public view of one rule table entry"""

    method_id: str
    allow_enable: bool
    remote_on_enable: bool
    remote_on_disable: bool
    read_on_enable: bool
    read_on_disable: bool


class AuditRecord(BaseModel):
    """One outcome record from the audit trail"""

    tenant: str
    operation: str
    message: str
    severity: str
    method: Optional[str] = None
    outcome: Optional[str] = None
    timestamp: Optional[datetime] = None
