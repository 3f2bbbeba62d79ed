"""
Errors raised while acquiring keys from the developer portal.
"""

from __future__ import annotations

import json
from typing import Any


class KeyGenError(Exception):
    """Base class for every error raised by coc_keygen."""

    pass


class ConfigurationError(KeyGenError):
    """Raised for missing or invalid input (credentials, counts, settings)."""

    pass


class PortalError(KeyGenError):
    """A portal call returned a failure. Keeps the response body for diagnostics."""

    def __init__(self, message: str, status_code: int | None = None, body: Any = None):
        self.status_code = status_code
        self.body = body
        if body is not None:
            message = f"{message} {_render_body(body)}"
        super().__init__(message)


class AuthenticationError(PortalError):
    """The portal rejected the email/password pair."""

    pass


class KeyRetrievalError(PortalError):
    """Listing the account's keys failed."""

    pass


class KeyCreationError(PortalError):
    """Creating a new key failed."""

    pass


class SessionError(KeyGenError):
    """Login succeeded but no session cookie came back."""

    pass


class NoMatchingKeysError(KeyGenError):
    """Reconciliation finished with no key matching the name and IP."""

    def __init__(self, total_keys: int, key_name: str, ip: str):
        self.total_keys = total_keys
        self.key_name = key_name
        self.ip = ip
        super().__init__(
            f'{total_keys} API keys exist on the account but none match a key name of "{key_name}" and IP "{ip}". '
            'Specify a key name or go to "https://developer.clashofclans.com" to delete unused keys.'
        )


def _render_body(body: Any) -> str:
    if isinstance(body, str):
        return body
    try:
        return json.dumps(body)
    except (TypeError, ValueError):
        return repr(body)
