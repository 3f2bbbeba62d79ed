"""Shared fixtures: an in-memory developer portal."""

from __future__ import annotations

import pytest

from coc_keygen.backends import Backend
from coc_keygen.errors import AuthenticationError, KeyCreationError
from coc_keygen.models import Credentials, KeySpec

SESSION = "session=abc123"
EMAIL = "chief@example.com"
PASSWORD = "hunter2"


def make_key(n: int, name: str = "x", ips: tuple[str, ...] = ("1.2.3.4",)) -> KeySpec:
    return KeySpec(id=f"id-{n}", name=name, key=f"secret-{n}", cidr_ranges=frozenset(ips))


class FakePortal(Backend):
    """Backend holding the account's keys in memory and recording every call."""

    name = "fake"

    def __init__(self, keys=None, rejected=(), failing_revokes=()):
        self.keys: list[KeySpec] = list(keys or [])
        self.rejected = set(rejected)
        self.failing_revokes = set(failing_revokes)
        self.calls: list[tuple[str, str]] = []
        self._next_id = 1000

    async def probe_key(self, key: str) -> bool:
        self.calls.append(("probe", key))
        return key not in self.rejected

    async def login(self, email: str, password: str) -> str:
        self.calls.append(("login", email))
        if (email, password) != (EMAIL, PASSWORD):
            raise AuthenticationError("Invalid email or password.", 403, {"reason": "invalidCredentials"})
        return SESSION

    async def list_keys(self, session: str) -> list[KeySpec]:
        assert session == SESSION
        self.calls.append(("list", ""))
        return list(self.keys)

    async def revoke_key(self, session: str, key_id: str) -> bool:
        assert session == SESSION
        self.calls.append(("revoke", key_id))
        if key_id in self.failing_revokes:
            return False
        self.keys = [k for k in self.keys if k.id != key_id]
        return True

    async def create_key(self, session: str, name: str, ip: str) -> KeySpec:
        assert session == SESSION
        self.calls.append(("create", ip))
        if len(self.keys) >= 10:
            raise KeyCreationError("Failed to create API Key.", 400, {"reason": "tooManyKeys"})
        self._next_id += 1
        spec = make_key(self._next_id, name=name, ips=(ip,))
        self.keys.append(spec)
        return spec

    def count(self, op: str) -> int:
        return sum(1 for call, _ in self.calls if call == op)


@pytest.fixture
def credentials():
    return Credentials(email=EMAIL, password=PASSWORD)


@pytest.fixture
def portal():
    return FakePortal()
