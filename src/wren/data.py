"""Data-access handles for the external data store.

The data store is reached over HTTP. Handlers get ``httpx.AsyncClient``
instances preconfigured with its base URL and credentials:

- ``db``: scoped to the caller's bearer token, so row-level rules apply
- ``admin``: authenticated with the service key, bypassing those rules

Usage in a handler::

    async def list_datasets(db):
        response = await db.get("/rest/v1/datasets", params={"select": "*"})
        return response.json()
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from wren.config import AppConfig
from wren.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class DataAccessConfig:
    """Connection settings for the data store.

    Attributes:
        url: Base URL of the data store's HTTP API.
        anon_key: Public API key sent with every request.
        service_key: Privileged key for the ``admin`` handle; empty
            disables it.
        timeout: Per-request timeout in seconds.
    """

    url: str
    anon_key: str
    service_key: str = ""
    timeout: float = 10.0


class DataAccess:
    """Factory for scoped and privileged data-store clients.

    The privileged client is created on first use and shared for the
    lifetime of the app; scoped clients are created per request and must
    be closed by the caller.
    """

    __slots__ = ("_admin", "_transport", "config")

    def __init__(
        self,
        config: DataAccessConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not config.url:
            msg = "DataAccessConfig.url is required"
            raise ConfigurationError(msg)
        self.config = config
        self._transport = transport
        self._admin: httpx.AsyncClient | None = None

    @classmethod
    def from_app_config(cls, config: AppConfig) -> DataAccess | None:
        """Build from ``WREN_DATA_*`` settings; ``None`` when no URL is set."""
        if not config.data_url:
            return None
        return cls(
            DataAccessConfig(
                url=config.data_url,
                anon_key=config.data_anon_key,
                service_key=config.data_service_key,
            )
        )

    @property
    def has_admin(self) -> bool:
        return bool(self.config.service_key)

    def scoped(self, token: str) -> httpx.AsyncClient:
        """A client acting as the caller identified by *token*."""
        return self._client(self.config.anon_key, token)

    @property
    def admin(self) -> httpx.AsyncClient:
        """The shared privileged client."""
        if not self.config.service_key:
            msg = "The admin data handle requires a service key (WREN_DATA_SERVICE_KEY)"
            raise ConfigurationError(msg)
        if self._admin is None:
            self._admin = self._client(self.config.service_key, self.config.service_key)
        return self._admin

    async def aclose(self) -> None:
        if self._admin is not None:
            await self._admin.aclose()
            self._admin = None

    def _client(self, api_key: str, token: str) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.url,
            headers={"apikey": api_key, "Authorization": f"Bearer {token}"},
            timeout=self.config.timeout,
            transport=self._transport,
        )
