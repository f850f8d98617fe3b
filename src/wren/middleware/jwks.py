"""Signing-key cache for bearer-token verification.

Fetches the identity provider's JSON Web Key Set over HTTP and keeps the
keys by ``kid``. One cache is created at startup and shared by every
request; concurrent refreshes are coalesced so a burst of requests with a
cold cache triggers a single fetch.
"""

import logging
import time
from collections.abc import Callable

import anyio
import httpx
import jwt

from wren.errors import AuthenticationError

logger = logging.getLogger("wren.auth")

DEFAULT_TTL = 3600.0


class SigningKeyCache:
    """Lazily populated ``kid`` → key map with TTL refresh.

    Keys are refetched once the TTL expires, and early when a token names
    an unknown ``kid`` (key rotation), but never more often than
    ``min_refresh_interval`` for unknown keys.

    Args:
        jwks_url: The provider's ``/.well-known/jwks.json`` endpoint.
        client: Optional ``httpx.AsyncClient``; one is created (and owned)
            when omitted.
        ttl: Seconds before cached keys are considered stale.
        min_refresh_interval: Minimum seconds between refetches caused by
            an unknown ``kid``.
    """

    __slots__ = (
        "_client",
        "_clock",
        "_fetched_at",
        "_generation",
        "_keys",
        "_lock",
        "_owns_client",
        "jwks_url",
        "min_refresh_interval",
        "timeout",
        "ttl",
    )

    def __init__(
        self,
        jwks_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        ttl: float = DEFAULT_TTL,
        min_refresh_interval: float = 30.0,
        timeout: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.jwks_url = jwks_url
        self.ttl = ttl
        self.min_refresh_interval = min_refresh_interval
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None
        self._clock = clock
        self._keys: dict[str | None, jwt.PyJWK] = {}
        self._fetched_at: float | None = None
        self._generation = 0
        self._lock = anyio.Lock()

    def __repr__(self) -> str:
        return f"SigningKeyCache({self.jwks_url!r}, keys={len(self._keys)})"

    @property
    def is_stale(self) -> bool:
        if self._fetched_at is None:
            return True
        return self._clock() - self._fetched_at >= self.ttl

    async def get_key(self, kid: str | None) -> jwt.PyJWK:
        """Return the signing key for *kid*, fetching keys if needed.

        Raises ``AuthenticationError`` if the key set cannot be fetched or
        does not contain *kid*.
        """
        if self.is_stale:
            await self.refresh()

        key = self._lookup(kid)
        if key is None and self._may_refetch():
            await self.refresh(force=True)
            key = self._lookup(kid)
        if key is None:
            raise AuthenticationError("Invalid JWT: signing key not found")
        return key

    async def refresh(self, *, force: bool = False) -> None:
        """Fetch the key set, unless another task just did."""
        generation = self._generation
        async with self._lock:
            if self._generation != generation:
                return
            if not force and not self.is_stale:
                return
            self._keys = await self._fetch()
            self._fetched_at = self._clock()
            self._generation += 1
            logger.debug("Loaded %d signing keys from %s", len(self._keys), self.jwks_url)

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _lookup(self, kid: str | None) -> jwt.PyJWK | None:
        key = self._keys.get(kid)
        if key is None and kid is None and len(self._keys) == 1:
            # Providers with a single key may omit ``kid`` from the token header.
            key = next(iter(self._keys.values()))
        return key

    def _may_refetch(self) -> bool:
        if self._fetched_at is None:
            return True
        return self._clock() - self._fetched_at >= self.min_refresh_interval

    async def _fetch(self) -> dict[str | None, jwt.PyJWK]:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        try:
            response = await self._client.get(self.jwks_url)
            response.raise_for_status()
            key_set = jwt.PyJWKSet.from_dict(response.json())
        except (httpx.HTTPError, ValueError, jwt.PyJWTError) as exc:
            logger.warning("Signing key fetch from %s failed: %s", self.jwks_url, exc)
            raise AuthenticationError("Invalid JWT: signing keys unavailable") from exc
        return {key.key_id: key for key in key_set.keys}
