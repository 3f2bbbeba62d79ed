"""Backend implementations for key operations.

  - Backend:     abstract interface used by the reconciler
  - HttpBackend: the production API (key probes) and the developer
                 portal API (login, list, revoke, create) over httpx
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from coc_keygen.config import Settings
from coc_keygen.errors import (
    AuthenticationError,
    KeyCreationError,
    KeyRetrievalError,
    SessionError,
)
from coc_keygen.models import KeySpec

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _body(r: httpx.Response) -> Any:
    """Decoded JSON body, or the raw text when it is not JSON."""
    try:
        return r.json()
    except ValueError:
        return r.text


def _session_from(r: httpx.Response) -> str:
    """Collapse every Set-Cookie header into a single Cookie header value."""
    pairs = []
    for raw in r.headers.get_list("set-cookie"):
        pair = raw.split(";", 1)[0].strip()
        if pair:
            pairs.append(pair)
    return "; ".join(pairs)


# ---------------------------------------------------------------------------
# Abstract backend
# ---------------------------------------------------------------------------


class Backend:
    """Abstract backend for key operations."""

    name: str = "unknown"

    async def probe_key(self, key: str) -> bool:
        """Return False only when the production API explicitly rejects the key."""
        raise NotImplementedError

    async def login(self, email: str, password: str) -> str:
        """Authenticate and return the session token."""
        raise NotImplementedError

    async def list_keys(self, session: str) -> list[KeySpec]:
        raise NotImplementedError

    async def revoke_key(self, session: str, key_id: str) -> bool:
        raise NotImplementedError

    async def create_key(self, session: str, name: str, ip: str) -> KeySpec:
        raise NotImplementedError


# ---------------------------------------------------------------------------
# HTTP backend
# ---------------------------------------------------------------------------


class HttpBackend(Backend):
    """Production and developer portal REST APIs."""

    name = "HTTP"

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or Settings()
        self.dev_site_url = self.settings.dev_site_url.rstrip("/")
        self.api_url = self.settings.api_url.rstrip("/")
        self._transport = transport

    @property
    def display_info(self) -> str:
        return self.dev_site_url

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.settings.timeout, transport=self._transport)

    def _headers(self, session: str | None = None) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if session:
            headers["cookie"] = session
        return headers

    async def probe_key(self, key: str) -> bool:
        url = f"{self.api_url}/locations"
        headers = {"Authorization": f"Bearer {key}", "Content-Type": "application/json"}
        try:
            async with self._client() as client:
                r = await client.get(url, params={"limit": 1}, headers=headers)
        except httpx.HTTPError as e:
            logger.debug("Key probe failed (%s); assuming key is still valid", e)
            return True
        return r.status_code != 403

    async def login(self, email: str, password: str) -> str:
        url = f"{self.dev_site_url}/login"
        async with self._client() as client:
            r = await client.post(url, json={"email": email, "password": password}, headers=self._headers())

        if not r.is_success:
            raise AuthenticationError("Invalid email or password.", r.status_code, _body(r))

        session = _session_from(r)
        if not session:
            raise SessionError("Cookie not found")
        logger.debug("Logged in to %s", self.dev_site_url)
        return session

    async def list_keys(self, session: str) -> list[KeySpec]:
        url = f"{self.dev_site_url}/apikey/list"
        async with self._client() as client:
            r = await client.post(url, headers=self._headers(session))

        data = _body(r)
        if not r.is_success:
            raise KeyRetrievalError("Failed to retrieve the API Keys.", r.status_code, data)
        if not isinstance(data, dict):
            raise KeyRetrievalError("Unexpected key list response.", r.status_code, data)

        raw_keys = data.get("keys") or []
        if not isinstance(raw_keys, list):
            raise KeyRetrievalError("Unexpected key list response.", r.status_code, data)
        try:
            return [KeySpec.from_payload(k) for k in raw_keys]
        except ValueError as e:
            raise KeyRetrievalError(f"Malformed key in list response: {e}.", r.status_code, data)

    async def revoke_key(self, session: str, key_id: str) -> bool:
        url = f"{self.dev_site_url}/apikey/revoke"
        try:
            async with self._client() as client:
                r = await client.post(url, json={"id": key_id}, headers=self._headers(session))
        except httpx.HTTPError as e:
            logger.warning("Revoking key %s failed: %s", key_id, e)
            return False
        if not r.is_success:
            logger.warning("Revoking key %s failed with status %s", key_id, r.status_code)
        return r.is_success

    async def create_key(self, session: str, name: str, ip: str) -> KeySpec:
        url = f"{self.dev_site_url}/apikey/create"
        body = {"description": ip, "cidrRanges": [ip], "name": name}
        async with self._client() as client:
            r = await client.post(url, json=body, headers=self._headers(session))

        data = _body(r)
        if not r.is_success:
            raise KeyCreationError("Failed to create API Key.", r.status_code, data)
        try:
            return KeySpec.from_payload(data.get("key") if isinstance(data, dict) else None)
        except ValueError as e:
            raise KeyCreationError(f"Malformed create response: {e}.", r.status_code, data)
