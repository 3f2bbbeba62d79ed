"""Typed shapes for credentials, portal keys and run diagnostics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

STALE_KEY_REMOVED = "stale_key_removed"
PARTIAL_FULFILLMENT = "partial_fulfillment"


@dataclass(frozen=True)
class Credentials:
    email: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(email={self.email!r}, password='***')"


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal warning produced during a run."""

    code: str
    message: str


def _require_str(payload: dict, name: str) -> str:
    value = payload.get(name)
    if not isinstance(value, str) or not value:
        raise ValueError(f"key payload field {name!r} is missing or not a string")
    return value


@dataclass(frozen=True)
class KeySpec:
    """A key as registered on the developer portal."""

    id: str
    name: str
    key: str
    cidr_ranges: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_payload(cls, payload: Any) -> "KeySpec":
        """Validate a portal key object (``{id, name, key, cidrRanges}``).

        ``cidrRanges`` may be absent or null; every other field is required.
        Raises ValueError on anything else.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"key payload must be an object, got {type(payload).__name__}")

        ranges = payload.get("cidrRanges")
        if ranges is None:
            ranges = []
        if not isinstance(ranges, list) or not all(isinstance(r, str) for r in ranges):
            raise ValueError("key payload field 'cidrRanges' must be a list of strings")

        return cls(
            id=_require_str(payload, "id"),
            name=_require_str(payload, "name"),
            key=_require_str(payload, "key"),
            cidr_ranges=frozenset(ranges),
        )

    def allows(self, ip: str) -> bool:
        return ip in self.cidr_ranges

    @property
    def masked(self) -> str:
        """Short, log-safe form of the secret."""
        return f"{self.key[:8]}..."
