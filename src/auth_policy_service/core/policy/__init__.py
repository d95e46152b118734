"""Authentication method policy reconciliation.

Supported methods: FIDO2, MicrosoftAuthenticator, SMS, TemporaryAccessPass,
HardwareOATH, softwareOath, Voice, Email, x509Certificate.
"""

from .errors import (
    CredentialError,
    PolicyError,
    PolicyRejectionError,
    TransportError,
    UnknownMethodError,
)
from .rules import MethodRule, list_rules, resolve

__all__ = [
    "CredentialError",
    "MethodRule",
    "PolicyError",
    "PolicyRejectionError",
    "TransportError",
    "UnknownMethodError",
    "list_rules",
    "resolve",
]
