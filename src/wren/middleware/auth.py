"""Bearer-token authentication.

Every route authenticates its caller unless it opts out with
``with_auth_disabled()``. Authentication:

1. reads ``Authorization: Bearer <token>``
2. verifies the token signature against the provider's signing keys,
   checking the issuer (and audience, when configured)
3. resolves the :class:`Principal` and a data-access handle scoped to the
   caller's token

Any failure raises ``AuthenticationError`` (401).

Usage::

    from wren.middleware.auth import AuthConfig, Authenticator

    authenticator = Authenticator(AuthConfig(issuer="https://id.example.com/auth/v1"))
    app = App(routes, authenticator=authenticator)
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx
import jwt

from wren.config import AppConfig
from wren.data import DataAccess
from wren.errors import AuthenticationError, ConfigurationError
from wren.http.request import Request
from wren.middleware.jwks import SigningKeyCache
from wren.security.audit import (
    AUTH_SUCCESS,
    TOKEN_INVALID,
    TOKEN_MISSING,
    emit_security_event,
)

logger = logging.getLogger("wren.auth")


@dataclass(frozen=True, slots=True)
class Principal:
    """The authenticated caller, resolved from verified token claims."""

    id: str
    email: str | None = None
    role: str | None = None
    claims: Mapping[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_authenticated(self) -> bool:
        return True

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> Principal:
        return cls(
            id=str(claims["sub"]),
            email=claims.get("email"),
            role=claims.get("role"),
            claims=dict(claims),
        )


@dataclass(frozen=True, slots=True)
class AuthContext:
    """Per-request authentication result.

    ``db`` is ``None`` when no data store is configured.
    """

    principal: Principal
    db: httpx.AsyncClient | None = None
    token: str = field(default="", repr=False)


type PrincipalLoader = Callable[[str, Mapping[str, Any]], Awaitable[Principal | None]]


@dataclass(frozen=True, slots=True)
class AuthConfig:
    """Bearer-token authentication configuration.

    Attributes:
        issuer: Expected ``iss`` claim.
        jwks_url: Signing-key endpoint; defaults to
            ``<issuer>/.well-known/jwks.json``.
        audience: Expected ``aud`` claim; not checked when ``None``.
        algorithms: Accepted signing algorithms.
        token_header: HTTP header carrying the token.
        token_scheme: Expected scheme prefix.
        leeway: Clock skew tolerance in seconds for ``exp``/``nbf``.
        load_principal: Optional async ``(token, claims) -> Principal | None``
            lookup against the identity provider. ``None`` from the
            loader rejects the request.
    """

    issuer: str
    jwks_url: str = ""
    audience: str | None = None
    algorithms: tuple[str, ...] = ("RS256", "ES256")
    token_header: str = "Authorization"
    token_scheme: str = "Bearer"
    leeway: float = 0.0
    load_principal: PrincipalLoader | None = None

    @property
    def resolved_jwks_url(self) -> str:
        if self.jwks_url:
            return self.jwks_url
        return f"{self.issuer.rstrip('/')}/.well-known/jwks.json"

    @classmethod
    def from_app_config(cls, config: AppConfig) -> AuthConfig | None:
        """Build from ``WREN_AUTH_*`` settings; ``None`` when no issuer is set."""
        if not config.auth_issuer:
            return None
        return cls(
            issuer=config.auth_issuer,
            jwks_url=config.jwks_url,
            audience=config.auth_audience,
        )


class Authenticator:
    """Verifies bearer tokens and resolves the caller.

    The signing-key cache is created here (or passed in) once, at startup,
    and shared by all requests.
    """

    __slots__ = ("_config", "_data", "_keys")

    def __init__(
        self,
        config: AuthConfig,
        *,
        keys: SigningKeyCache | None = None,
        data_access: DataAccess | None = None,
    ) -> None:
        if not config.issuer:
            msg = "AuthConfig.issuer is required"
            raise ConfigurationError(msg)
        self._config = config
        self._keys = keys or SigningKeyCache(config.resolved_jwks_url)
        self._data = data_access

    @property
    def config(self) -> AuthConfig:
        return self._config

    @property
    def keys(self) -> SigningKeyCache:
        return self._keys

    @property
    def data_access(self) -> DataAccess | None:
        return self._data

    def bind_data_access(self, data_access: DataAccess | None) -> None:
        """Use *data_access* for scoped ``db`` handles (set by ``App``)."""
        if self._data is None:
            self._data = data_access

    def extract_token(self, request: Request) -> str:
        """Return the bearer token or raise ``AuthenticationError``."""
        header = request.headers.get(self._config.token_header)
        if header is None:
            emit_security_event(TOKEN_MISSING, request=request)
            raise AuthenticationError("Missing authorization header")

        prefix = f"{self._config.token_scheme} "
        if not header.startswith(prefix):
            emit_security_event(TOKEN_INVALID, request=request, details={"reason": "scheme"})
            raise AuthenticationError(f"Auth header is not '{self._config.token_scheme} {{token}}'")

        token = header[len(prefix) :].strip()
        if not token:
            emit_security_event(TOKEN_INVALID, request=request, details={"reason": "empty"})
            raise AuthenticationError("Missing token in authorization header")
        return token

    async def verify(self, token: str) -> dict[str, Any]:
        """Check *token*'s signature, issuer, and expiry; return its claims."""
        cfg = self._config
        try:
            header = jwt.get_unverified_header(token)
        except jwt.PyJWTError as exc:
            raise AuthenticationError(f"Invalid JWT: {exc}") from exc

        key = await self._keys.get_key(header.get("kid"))
        try:
            return jwt.decode(
                token,
                key.key,
                algorithms=list(cfg.algorithms),
                issuer=cfg.issuer,
                audience=cfg.audience,
                leeway=cfg.leeway,
                options={"require": ["exp", "sub"], "verify_aud": cfg.audience is not None},
            )
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError("Invalid JWT: token has expired") from exc
        except jwt.PyJWTError as exc:
            raise AuthenticationError(f"Invalid JWT: {exc}") from exc

    async def authenticate(self, request: Request) -> AuthContext:
        """Resolve the caller of *request*; raises ``AuthenticationError``."""
        token = self.extract_token(request)
        try:
            claims = await self.verify(token)
        except AuthenticationError as exc:
            emit_security_event(TOKEN_INVALID, request=request, details={"reason": exc.detail})
            raise

        if self._config.load_principal is not None:
            principal = await self._config.load_principal(token, claims)
            if principal is None:
                emit_security_event(
                    TOKEN_INVALID,
                    request=request,
                    user_id=str(claims.get("sub")),
                    details={"reason": "unknown user"},
                )
                raise AuthenticationError("User not found")
        else:
            principal = Principal.from_claims(claims)

        emit_security_event(AUTH_SUCCESS, request=request, user_id=principal.id)
        logger.debug("Authenticated %s for %s %s", principal.id, request.method, request.path)
        db = self._data.scoped(token) if self._data is not None else None
        return AuthContext(principal=principal, db=db, token=token)

    async def aclose(self) -> None:
        await self._keys.aclose()
