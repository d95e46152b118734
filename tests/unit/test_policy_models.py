"""Unit tests for authentication policy models"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from auth_policy_service.config.settings import Settings
from auth_policy_service.domain.models import (
    BatchPolicyRequest,
    MethodPolicyRequest,
    Outcome,
    PolicyParams,
    PolicyState,
    ReconciliationResponse,
    ReconciliationResult,
    Severity,
    TAPSettings,
    TargetGroup,
)

pytestmark = pytest.mark.unit


class TestPolicyState:

    def test_from_bool(self):
        assert PolicyState.from_bool(True) == PolicyState.ENABLED
        assert PolicyState.from_bool(False) == PolicyState.DISABLED
        assert PolicyState.ENABLED.value == "enabled"


class TestTargetGroup:

    def test_all_users_wire_format(self):
        assert TargetGroup().to_dict() == {
            "id": "all_users",
            "isRegistrationRequired": False,
            "targetType": "group",
            "displayName": "All users",
        }

    def test_registration_required(self):
        assert TargetGroup(is_registration_required=True).to_dict()["isRegistrationRequired"] is True


class TestTapDefaults:

    def test_settings_params_and_tap_share_defaults(self):
        settings = Settings()
        params = PolicyParams()
        tap = TAPSettings()

        assert settings.tap_minimum_lifetime == params.tap_minimum_lifetime == tap.minimum_lifetime_minutes == 60
        assert settings.tap_maximum_lifetime == params.tap_maximum_lifetime == tap.maximum_lifetime_minutes == 480
        assert settings.tap_default_lifetime == params.tap_default_lifetime == tap.default_lifetime_minutes == 60
        assert settings.tap_default_length == params.tap_default_length == tap.default_length == 8


class TestPolicyParams:

    def test_defaults(self):
        params = PolicyParams()

        assert params.microsoft_authenticator_software_oath_enabled is None
        assert params.tap_settings(True) == TAPSettings()

    def test_tap_settings_combines_values(self):
        tap = PolicyParams(tap_default_length=16, tap_maximum_lifetime=600).tap_settings(False)

        assert tap.default_length == 16
        assert tap.maximum_lifetime_minutes == 600
        assert tap.minimum_lifetime_minutes == 60
        assert tap.is_usable_once is False


class TestReconciliationResult:

    def make(self, outcome):
        return ReconciliationResult(
            method="SMS",
            tenant="T1",
            desired_state=PolicyState.ENABLED,
            outcome=outcome,
            detail="SMS: enabling not permitted",
        )

    def test_severity(self):
        assert self.make(Outcome.SUCCESS).severity == Severity.INFO
        assert self.make(Outcome.FAILURE).severity == Severity.ERROR
        assert self.make(Outcome.REJECTED).severity == Severity.ERROR

    def test_to_dict(self):
        data = self.make(Outcome.REJECTED).to_dict()

        assert data["outcome"] == "rejected"
        assert data["desired_state"] == "enabled"
        assert isinstance(data["completed_at"], str)

    def test_response_from_result(self):
        response = ReconciliationResponse.from_result(self.make(Outcome.REJECTED))

        assert response.outcome == "rejected"
        assert response.method == "SMS"
        assert isinstance(response.completed_at, datetime)


class TestRequests:

    def test_method_request_optional_tuning(self):
        request = MethodPolicyRequest(enabled=True)

        assert request.tap_default_length is None

    def test_tap_length_bounds(self):
        with pytest.raises(ValidationError):
            MethodPolicyRequest(enabled=True, tap_default_length=4)

    def test_batch_requires_methods(self):
        with pytest.raises(ValidationError):
            BatchPolicyRequest(methods=[])
