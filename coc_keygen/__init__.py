"""Clash of Clans developer portal key acquisition."""

from coc_keygen.errors import (
    AuthenticationError,
    ConfigurationError,
    KeyCreationError,
    KeyGenError,
    KeyRetrievalError,
    NoMatchingKeysError,
    PortalError,
    SessionError,
)
from coc_keygen.handler import KeyReconciler
from coc_keygen.models import Credentials, Diagnostic, KeySpec

__version__ = "1.0.0"

__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "Credentials",
    "Diagnostic",
    "KeyCreationError",
    "KeyGenError",
    "KeyReconciler",
    "KeyRetrievalError",
    "KeySpec",
    "NoMatchingKeysError",
    "PortalError",
    "SessionError",
]
