"""Key reconciliation against the developer portal.

One ``KeyReconciler`` serves one account and one target IP. Each call to
``initialize`` runs the whole sequence once, with no retries:

  prevalidate held keys -> login -> list -> revoke stale -> collect -> create

Every request is awaited before the next one goes out. Creating keys
concurrently could push the account past the portal's key ceiling.
"""

from __future__ import annotations

import ipaddress
import logging
from typing import Callable, Optional

from coc_keygen.backends import Backend, HttpBackend
from coc_keygen.config import DEFAULT_KEY_NAME, MAX_KEYS_PER_ACCOUNT, settings_from_env
from coc_keygen.errors import ConfigurationError, NoMatchingKeysError
from coc_keygen.models import (
    PARTIAL_FULFILLMENT,
    STALE_KEY_REMOVED,
    Credentials,
    Diagnostic,
)

logger = logging.getLogger(__name__)

WarningCallback = Callable[[Diagnostic], None]


def validate_ip(ip: str) -> str:
    """Return ``ip`` unchanged if it is a valid IPv4 or IPv6 address."""
    try:
        ipaddress.ip_address(ip)
    except ValueError:
        raise ConfigurationError(f"Target IP {ip!r} is not a valid IP address.")
    return ip


def clamp_key_count(count: Optional[int]) -> int:
    """Clamp a requested key count into [1, MAX_KEYS_PER_ACCOUNT]."""
    if count is None:
        return 1
    if isinstance(count, bool) or not isinstance(count, int):
        raise ConfigurationError(f"Key count must be an integer, got {count!r}")
    return max(1, min(count, MAX_KEYS_PER_ACCOUNT))


class KeyReconciler:
    """Acquire up to ``key_count`` portal keys bound to ``ip``."""

    def __init__(
        self,
        ip: str,
        backend: Backend | None = None,
        on_warning: WarningCallback | None = None,
    ):
        self.ip = validate_ip(ip)
        self.backend = backend or HttpBackend(settings_from_env())
        self.on_warning = on_warning
        self.key_name = DEFAULT_KEY_NAME
        self.key_count = 1
        self.keys: list[str] = []
        self.diagnostics: list[Diagnostic] = []

    async def initialize(
        self,
        credentials: Credentials,
        key_name: str | None = None,
        key_count: int | None = None,
    ) -> list[str]:
        self.diagnostics = []
        if not (credentials.email and credentials.password):
            raise ConfigurationError("Missing email and password.")

        self.key_name = key_name or DEFAULT_KEY_NAME
        self.key_count = clamp_key_count(key_count)

        await self._revalidate_keys()
        del self.keys[self.key_count:]
        session = await self.backend.login(credentials.email, credentials.password)
        return await self._reconcile(session)

    # -- Diagnostics --

    def _warn(self, code: str, message: str) -> None:
        diagnostic = Diagnostic(code, message)
        self.diagnostics.append(diagnostic)
        logger.warning(message)
        if self.on_warning:
            self.on_warning(diagnostic)

    # -- Steps --

    async def _revalidate_keys(self) -> None:
        """Drop held keys the production API rejects with 403."""
        if not self.keys:
            return

        still_valid = []
        for index, key in enumerate(self.keys):
            if await self.backend.probe_key(key):
                still_valid.append(key)
            else:
                self._warn(
                    STALE_KEY_REMOVED,
                    f"Key #{index + 1} is no longer valid. Removed from the key list.",
                )
        self.keys = still_valid

    async def _reconcile(self, session: str) -> list[str]:
        ip = self.ip
        keys = await self.backend.list_keys(session)
        logger.info("Account holds %d key(s)", len(keys))

        # Revoke keys under our name that are bound to another IP.
        revoked: set[str] = set()
        for spec in keys:
            if spec.name != self.key_name or spec.allows(ip):
                continue
            if await self.backend.revoke_key(session, spec.id):
                logger.info("Revoked key %s (bound to %s)", spec.id, ", ".join(sorted(spec.cidr_ranges)) or "no IP")
                revoked.add(spec.id)
        keys = [spec for spec in keys if spec.id not in revoked]
        # Held keys survive only while the account still lists them under this name and IP.
        listed = {spec.key for spec in keys if spec.name == self.key_name and spec.allows(ip)}
        self.keys = [k for k in self.keys if k in listed]

        for spec in keys:
            if len(self.keys) >= self.key_count:
                break
            if spec.name == self.key_name and spec.allows(ip) and spec.key not in self.keys:
                logger.debug("Reusing key %s (%s)", spec.id, spec.masked)
                self.keys.append(spec.key)

        while len(self.keys) < self.key_count and len(keys) < MAX_KEYS_PER_ACCOUNT:
            created = await self.backend.create_key(session, self.key_name, ip)
            logger.info("Created key %s for %s", created.id, ip)
            self.keys.append(created.key)
            keys.append(created)

        if len(self.keys) < self.key_count and len(keys) >= MAX_KEYS_PER_ACCOUNT:
            self._warn(
                PARTIAL_FULFILLMENT,
                f"{self.key_count} key(s) were requested but failed to create "
                f"{self.key_count - len(self.keys)} more key(s).",
            )

        if not self.keys:
            raise NoMatchingKeysError(len(keys), self.key_name, ip)

        return list(self.keys)

