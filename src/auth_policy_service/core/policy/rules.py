"""Authentication method rule table.

Maps each authentication method identifier to the static policy used to
reconcile it: whether enabling is permitted, whether the current remote
document must be read first, which fields are stripped before re-submission,
and how the outgoing document is built.

Adding a method means adding one entry to ``METHOD_RULES``.
"""

import copy
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional

from auth_policy_service.domain.models import (
    CredentialContext,
    PolicyParams,
    PolicyState,
    TAPSettings,
    TargetGroup,
)

# (config, desired state, caller params, resolved TAP settings) -> config
FieldSetter = Callable[[dict, PolicyState, PolicyParams, Optional[TAPSettings]], dict]


@dataclass(frozen=True)
class MethodRule:
    """Static reconciliation policy for one authentication method.

    Attributes:
        method_id: Identifier used in the remote resource path
        setter: Builds the outgoing document (None for acknowledge-only methods)
        allow_enable: Whether the method may be enabled at all
        read_on_enable: Fetch the current document before enabling
        read_on_disable: Fetch the current document before disabling
        remote_on_enable: Whether enabling issues any remote call
        remote_on_disable: Whether disabling issues any remote call
        fields_to_clear: Dotted paths stripped from a read document
        app_context_on_enable: Write the enabled document as the application
        uses_tap_settings: Enabling needs resolved TAPSettings
    """
    method_id: str
    setter: Optional[FieldSetter] = None
    allow_enable: bool = True
    read_on_enable: bool = True
    read_on_disable: bool = True
    remote_on_enable: bool = True
    remote_on_disable: bool = True
    fields_to_clear: tuple = ()
    app_context_on_enable: bool = False
    uses_tap_settings: bool = False

    def requires_remote_call(self, state: PolicyState) -> bool:
        if state == PolicyState.ENABLED:
            return self.remote_on_enable
        return self.remote_on_disable

    def requires_read_before_write(self, state: PolicyState) -> bool:
        if not self.requires_remote_call(state):
            return False
        if state == PolicyState.ENABLED:
            return self.read_on_enable
        return self.read_on_disable

    def needs_tap_settings(self, state: PolicyState) -> bool:
        return self.uses_tap_settings and state == PolicyState.ENABLED

    def credential_context(self, state: PolicyState) -> CredentialContext:
        if self.app_context_on_enable and state == PolicyState.ENABLED:
            return CredentialContext.APPLICATION
        return CredentialContext.DELEGATED

    def build(
        self,
        current: Optional[dict],
        state: PolicyState,
        params: PolicyParams,
        tap: Optional[TAPSettings] = None,
    ) -> dict:
        """Produce the outgoing document.

        The read document is never mutated in place; a deep copy is stripped
        of ``fields_to_clear`` and handed to the setter.

        Raises:
            ValueError: If the rule has no setter (acknowledge-only method)
        """
        if self.setter is None:
            raise ValueError(f"{self.method_id} has no remote representation")

        config = copy.deepcopy(current) if current is not None else {}
        for path in self.fields_to_clear:
            clear_field(config, path)
        return self.setter(config, state, params, tap)


def clear_field(config: dict, path: str) -> None:
    """Remove a dotted field path from a nested document, if present"""
    *parents, leaf = path.split(".")
    node = config
    for key in parents:
        node = node.get(key)
        if not isinstance(node, dict):
            return
    node.pop(leaf, None)


# ============================================================================
# Field setters
# ============================================================================


def set_state(config: dict, state: PolicyState, params: PolicyParams,
              tap: Optional[TAPSettings]) -> dict:
    """Flip the top-level state and leave everything else as read"""
    config["state"] = state.value
    return config


def build_fido2(config: dict, state: PolicyState, params: PolicyParams,
                tap: Optional[TAPSettings]) -> dict:
    """FIDO2 is always written as a complete, freshly built document"""
    return {
        "@odata.type": "#microsoft.graph.fido2AuthenticationMethodConfiguration",
        "id": "Fido2",
        "includeTargets": [TargetGroup(is_registration_required=False).to_dict()],
        "excludeTargets": [],
        "isAttestationEnforced": True,
        "isSelfServiceRegistrationAllowed": True,
        "keyRestrictions": {
            "aaGuids": [],
            "enforcementType": "block",
            "isEnforced": False,
        },
        "state": state.value,
    }


def set_microsoft_authenticator(config: dict, state: PolicyState, params: PolicyParams,
                                tap: Optional[TAPSettings]) -> dict:
    config["state"] = state.value
    if state != PolicyState.ENABLED:
        return config

    features = config.get("featureSettings") or {}
    for name in ("displayAppInformationRequiredState", "displayLocationInformationRequiredState"):
        feature = features.get(name) or {}
        feature["state"] = state.value
        features[name] = feature
    config["featureSettings"] = features

    if params.microsoft_authenticator_software_oath_enabled is not None:
        config["isSoftwareOathEnabled"] = params.microsoft_authenticator_software_oath_enabled
    return config


def set_temporary_access_pass(config: dict, state: PolicyState, params: PolicyParams,
                              tap: Optional[TAPSettings]) -> dict:
    """Enabling builds a fresh document from TAPSettings; disabling flips state"""
    if state != PolicyState.ENABLED:
        return set_state(config, state, params, tap)

    if tap is None:
        raise ValueError("TemporaryAccessPass requires resolved TAP settings to enable")

    return {
        "@odata.type": "#microsoft.graph.temporaryAccessPassAuthenticationMethodConfiguration",
        "id": "TemporaryAccessPass",
        "includeTargets": [TargetGroup(is_registration_required=False).to_dict()],
        "isUsableOnce": tap.is_usable_once,
        "defaultLength": tap.default_length,
        "defaultLifetimeInMinutes": tap.default_lifetime_minutes,
        "maximumLifetimeInMinutes": tap.maximum_lifetime_minutes,
        "minimumLifetimeInMinutes": tap.minimum_lifetime_minutes,
        "state": state.value,
    }


# ============================================================================
# Rule table
# ============================================================================

# HardwareOATH, Email and x509Certificate are acknowledge-only: no read or write
# is ever issued for them.
METHOD_RULES: Mapping[str, MethodRule] = MappingProxyType({
    rule.method_id: rule
    for rule in (
        MethodRule(
            method_id="FIDO2",
            setter=build_fido2,
            read_on_enable=False,
            read_on_disable=False,
        ),
        MethodRule(
            method_id="MicrosoftAuthenticator",
            setter=set_microsoft_authenticator,
            fields_to_clear=("featureSettings.numberMatchingRequiredState",),
        ),
        MethodRule(
            method_id="SMS",
            setter=set_state,
            allow_enable=False,
        ),
        MethodRule(
            method_id="TemporaryAccessPass",
            setter=set_temporary_access_pass,
            read_on_enable=False,
            app_context_on_enable=True,
            uses_tap_settings=True,
        ),
        MethodRule(
            method_id="HardwareOATH",
            remote_on_enable=False,
            remote_on_disable=False,
        ),
        MethodRule(
            method_id="softwareOath",
            setter=set_state,
        ),
        MethodRule(
            method_id="Voice",
            setter=set_state,
            allow_enable=False,
        ),
        MethodRule(
            method_id="Email",
            remote_on_enable=False,
            remote_on_disable=False,
        ),
        MethodRule(
            method_id="x509Certificate",
            remote_on_enable=False,
            remote_on_disable=False,
        ),
    )
})


def resolve(method_id: str) -> Optional[MethodRule]:
    """Look up the rule for a method identifier.

    Returns:
        MethodRule, or None for identifiers outside the fixed set
    """
    return METHOD_RULES.get(method_id)


def list_rules() -> List[MethodRule]:
    """All rules in table order"""
    return list(METHOD_RULES.values())
