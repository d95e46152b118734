"""Authentication policy reconciliation.

Drives one method's reconciliation for one tenant:

1. resolve the method rule (unknown methods are rejected)
2. reject enabling a method that may not be enabled
3. acknowledge methods that have no remote toggle
4. read the current document when the rule requires it
5. build the outgoing document and write it
6. report the outcome

Remote failures become Failure results; nothing is raised to the caller, so
reconciling one method never aborts another.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from auth_policy_service.core.policy import rules
from auth_policy_service.core.policy.errors import (
    PolicyError,
    PolicyRejectionError,
    TransportError,
    UnknownMethodError,
)
from auth_policy_service.core.policy.reporter import OutcomeReporter
from auth_policy_service.domain.models import (
    Outcome,
    PolicyParams,
    PolicyState,
    ReconciliationResult,
)
from auth_policy_service.infrastructure.graph.client import GraphPolicyClient
from auth_policy_service.infrastructure.settings.store import TenantSettingsStore

logger = logging.getLogger(__name__)


class PolicyReconciler:
    """Reconciles authentication method policy against the remote service"""

    def __init__(
        self,
        client: GraphPolicyClient,
        settings_store: TenantSettingsStore,
        reporter: Optional[OutcomeReporter] = None,
    ):
        self.client = client
        self.settings_store = settings_store
        self.reporter = reporter or OutcomeReporter()

    async def reconcile(
        self,
        tenant: str,
        method_id: str,
        desired_enabled: bool,
        params: Optional[PolicyParams] = None,
    ) -> ReconciliationResult:
        """Reconcile one method to the desired state

        Args:
            tenant: Tenant to reconcile
            method_id: Authentication method identifier
            desired_enabled: Desired policy state
            params: Optional per-method tuning

        Returns:
            ReconciliationResult describing what happened
        """
        state = PolicyState.from_bool(desired_enabled)
        params = params or PolicyParams()

        try:
            outcome, detail = await self._apply(tenant, method_id, state, params)
        except (UnknownMethodError, PolicyRejectionError) as e:
            outcome, detail = Outcome.REJECTED, str(e)
        except PolicyError as e:
            outcome, detail = Outcome.FAILURE, str(e)
        except Exception as e:
            logger.error(f"Unexpected error reconciling {method_id} for {tenant}: {e}", exc_info=True)
            outcome, detail = Outcome.FAILURE, f"Unexpected error: {e}"

        result = ReconciliationResult(
            method=method_id,
            tenant=tenant,
            desired_state=state,
            outcome=outcome,
            detail=detail,
        )
        await self._report(result)
        return result

    async def reconcile_many(
        self,
        tenant: str,
        requests: Iterable[Tuple[str, bool, Optional[PolicyParams]]],
    ) -> List[ReconciliationResult]:
        """Reconcile several methods for one tenant, one after another

        Each method is reconciled independently; there is no atomicity
        across methods.
        """
        results = []
        for method_id, desired_enabled, params in requests:
            results.append(await self.reconcile(tenant, method_id, desired_enabled, params))
        return results

    async def _apply(
        self,
        tenant: str,
        method_id: str,
        state: PolicyState,
        params: PolicyParams,
    ) -> Tuple[Outcome, str]:
        rule = rules.resolve(method_id)
        if rule is None:
            raise UnknownMethodError(method_id)

        if state == PolicyState.ENABLED and not rule.allow_enable:
            raise PolicyRejectionError(method_id, "enabling not permitted")

        if not rule.requires_remote_call(state):
            return Outcome.SUCCESS, f"{method_id} policy acknowledged as {state.value}; no remote change required"

        current = None
        if rule.requires_read_before_write(state):
            try:
                current = await self.client.read(tenant, method_id)
            except TransportError as e:
                return Outcome.FAILURE, f"Could not read {method_id} configuration: {e}"

        tap = None
        if rule.needs_tap_settings(state):
            usable_once = await self.settings_store.resolve_tap_usable_once(tenant)
            tap = params.tap_settings(usable_once)

        document = rule.build(current, state, params, tap)

        try:
            await self.client.write(tenant, method_id, document, rule.credential_context(state))
        except TransportError as e:
            return Outcome.FAILURE, f"Could not write {method_id} configuration: {e}"

        return Outcome.SUCCESS, f"{method_id} set to {state.value}"

    async def _report(self, result: ReconciliationResult) -> None:
        try:
            await self.reporter.report(result)
        except Exception as e:
            logger.error(f"Failed to report outcome for {result.method}: {e}", exc_info=True)


async def set_authentication_policy(
    reconciler: PolicyReconciler,
    tenant: str,
    method_id: str,
    desired_enabled: bool,
    params: Optional[PolicyParams] = None,
) -> ReconciliationResult:
    """Public entry point: set one authentication method's policy for a tenant"""
    return await reconciler.reconcile(tenant, method_id, desired_enabled, params)
