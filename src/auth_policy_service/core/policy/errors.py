"""Errors raised while reconciling authentication method policy."""

from typing import Optional


class PolicyError(Exception):
    """Base class for policy reconciliation errors."""
    pass


class UnknownMethodError(PolicyError):
    """Method identifier is not in the rule table."""

    def __init__(self, method_id: str):
        self.method_id = method_id
        super().__init__(f"unknown method: {method_id}")


class PolicyRejectionError(PolicyError):
    """Requested transition is not permitted for this method."""

    def __init__(self, method_id: str, reason: str):
        self.method_id = method_id
        super().__init__(f"{method_id}: {reason}")


class TransportError(PolicyError):
    """Read or write against the remote policy service failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class CredentialError(TransportError):
    """Token could not be obtained for the tenant."""
    pass
