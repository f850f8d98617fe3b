"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups. ``AppConfig.from_env()`` builds one from the
process environment for deployments where the identity provider and data
store are supplied externally.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from wren.errors import ConfigurationError

_ENV_PREFIX = "WREN_"
_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(port=3000, auth_issuer="https://id.example.com/auth/v1")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    log_level: str = "info"

    # Cross-origin
    cors_origin: str = "*"

    # Identity provider
    auth_issuer: str = ""
    auth_jwks_url: str = ""
    auth_audience: str | None = None

    # Data store
    data_url: str = ""
    data_anon_key: str = ""
    data_service_key: str = ""

    @property
    def effective_log_level(self) -> str:
        """``debug`` turns on debug logging whatever ``log_level`` says."""
        return "debug" if self.debug else self.log_level

    @property
    def jwks_url(self) -> str:
        """Signing-key endpoint; derived from the issuer when not set."""
        if self.auth_jwks_url:
            return self.auth_jwks_url
        if self.auth_issuer:
            return f"{self.auth_issuer.rstrip('/')}/.well-known/jwks.json"
        return ""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Read configuration from ``WREN_*`` environment variables.

        Unset variables keep their defaults. Raises ``ConfigurationError``
        when ``WREN_PORT`` is not an integer.
        """
        env = os.environ if environ is None else environ

        def read(name: str, default: str) -> str:
            return env.get(_ENV_PREFIX + name, default)

        raw_port = read("PORT", "8000")
        try:
            port = int(raw_port)
        except ValueError:
            msg = f"WREN_PORT must be an integer, got {raw_port!r}"
            raise ConfigurationError(msg) from None

        return cls(
            host=read("HOST", "127.0.0.1"),
            port=port,
            debug=read("DEBUG", "").lower() in _TRUTHY,
            log_level=read("LOG_LEVEL", "info").lower(),
            cors_origin=read("CORS_ORIGIN", "*"),
            auth_issuer=read("AUTH_ISSUER", ""),
            auth_jwks_url=read("AUTH_JWKS_URL", ""),
            auth_audience=read("AUTH_AUDIENCE", "") or None,
            data_url=read("DATA_URL", ""),
            data_anon_key=read("DATA_ANON_KEY", ""),
            data_service_key=read("DATA_SERVICE_KEY", ""),
        )
