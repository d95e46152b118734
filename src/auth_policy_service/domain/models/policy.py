"""Authentication Method Policy Models

Purpose: Define data structures for authentication-method policy reconciliation

Method configurations themselves travel as plain JSON objects (dicts): their
shape is method-specific and owned by the remote policy service. The models
here describe everything around them.

Key Components:
- PolicyState: enabled/disabled flag as spelled on the wire
- CredentialContext: which token a write is issued with
- TargetGroup: the built-in "all users" scoping target
- TAPSettings: resolved Temporary Access Pass tuning values
- PolicyParams: caller-supplied per-method tuning
- ReconciliationResult: outcome of one reconciliation call
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


OPERATION_NAME = "Set Authentication Policy"
ALL_USERS_GROUP_ID = "all_users"

# Temporary Access Pass defaults (minutes / characters)
DEFAULT_TAP_MINIMUM_LIFETIME = 60
DEFAULT_TAP_MAXIMUM_LIFETIME = 480
DEFAULT_TAP_DEFAULT_LIFETIME = 60
DEFAULT_TAP_DEFAULT_LENGTH = 8


class PolicyState(Enum):
    """Policy state of one authentication method"""
    ENABLED = "enabled"
    DISABLED = "disabled"

    @classmethod
    def from_bool(cls, enabled: bool) -> "PolicyState":
        return cls.ENABLED if enabled else cls.DISABLED


class CredentialContext(Enum):
    """Credential context used for a remote write"""
    DELEGATED = "delegated"  # as calling user
    APPLICATION = "application"  # as app


class Outcome(Enum):
    """Reconciliation outcome

    REJECTED means the call was refused before trying; FAILURE means the
    remote service was tried and failed.
    """
    SUCCESS = "success"
    FAILURE = "failure"
    REJECTED = "rejected"


class Severity(Enum):
    """Severity of an outcome record"""
    INFO = "Info"
    ERROR = "Error"


@dataclass(frozen=True)
class TargetGroup:
    """Scoping target for methods that support include/exclude targets

    Always the built-in "all users" group.
    """
    is_registration_required: bool = False
    id: str = ALL_USERS_GROUP_ID
    target_type: str = "group"
    display_name: str = "All users"

    def to_dict(self) -> dict:
        """Convert to wire representation"""
        return {
            "id": self.id,
            "isRegistrationRequired": self.is_registration_required,
            "targetType": self.target_type,
            "displayName": self.display_name,
        }


@dataclass(frozen=True)
class TAPSettings:
    """Resolved Temporary Access Pass settings

    Attributes:
        minimum_lifetime_minutes: Shortest lifetime a pass may be issued with
        maximum_lifetime_minutes: Longest lifetime a pass may be issued with
        default_lifetime_minutes: Lifetime used when none is requested
        default_length: Number of characters in a pass
        is_usable_once: Whether a pass may only be used a single time
    """
    minimum_lifetime_minutes: int = DEFAULT_TAP_MINIMUM_LIFETIME
    maximum_lifetime_minutes: int = DEFAULT_TAP_MAXIMUM_LIFETIME
    default_lifetime_minutes: int = DEFAULT_TAP_DEFAULT_LIFETIME
    default_length: int = DEFAULT_TAP_DEFAULT_LENGTH
    is_usable_once: bool = True


@dataclass(frozen=True)
class PolicyParams:
    """Optional per-method tuning supplied by the caller"""
    microsoft_authenticator_software_oath_enabled: Optional[bool] = None
    tap_minimum_lifetime: int = DEFAULT_TAP_MINIMUM_LIFETIME
    tap_maximum_lifetime: int = DEFAULT_TAP_MAXIMUM_LIFETIME
    tap_default_lifetime: int = DEFAULT_TAP_DEFAULT_LIFETIME
    tap_default_length: int = DEFAULT_TAP_DEFAULT_LENGTH

    def tap_settings(self, is_usable_once: bool) -> TAPSettings:
        """Combine caller-supplied TAP bounds with the resolved usable-once flag"""
        return TAPSettings(
            minimum_lifetime_minutes=self.tap_minimum_lifetime,
            maximum_lifetime_minutes=self.tap_maximum_lifetime,
            default_lifetime_minutes=self.tap_default_lifetime,
            default_length=self.tap_default_length,
            is_usable_once=is_usable_once,
        )


@dataclass
class ReconciliationResult:
    """Result of reconciling one authentication method for one tenant

    Attributes:
        method: Method identifier as supplied by the caller
        tenant: Tenant the policy was reconciled for
        desired_state: Requested policy state
        outcome: Success, failure or rejection
        detail: Human-readable description of what happened
    """
    method: str
    tenant: str
    desired_state: PolicyState
    outcome: Outcome
    detail: str
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_success(self) -> bool:
        return self.outcome == Outcome.SUCCESS

    @property
    def severity(self) -> Severity:
        return Severity.INFO if self.is_success else Severity.ERROR

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {
            "method": self.method,
            "tenant": self.tenant,
            "desired_state": self.desired_state.value,
            "outcome": self.outcome.value,
            "detail": self.detail,
            "completed_at": self.completed_at.isoformat(),
        }
