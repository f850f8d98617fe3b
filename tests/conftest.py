"""Shared fixtures: an RSA signing key, its key set, and token helpers."""

import json
import time
from collections.abc import Callable
from typing import Any

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.algorithms import RSAAlgorithm

from wren.middleware.auth import AuthConfig, Authenticator
from wren.middleware.jwks import SigningKeyCache
from wren.security.audit import set_security_event_sink

ISSUER = "https://id.example.test/auth/v1"
JWKS_URL = f"{ISSUER}/.well-known/jwks.json"
KEY_ID = "test-key"


class KeySetServer:
    """Serves a JSON Web Key Set through ``httpx.MockTransport``."""

    def __init__(self, key_set: dict[str, Any]) -> None:
        self.key_set = key_set
        self.calls = 0
        self.status = 200

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self.status != 200:
            return httpx.Response(self.status)
        return httpx.Response(200, json=self.key_set)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))


@pytest.fixture(scope="session")
def signing_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def key_set(signing_key: rsa.RSAPrivateKey) -> dict[str, Any]:
    jwk = json.loads(RSAAlgorithm.to_jwk(signing_key.public_key()))
    jwk.update(kid=KEY_ID, alg="RS256", use="sig")
    return {"keys": [jwk]}


@pytest.fixture
def key_server(key_set: dict[str, Any]) -> KeySetServer:
    return KeySetServer(key_set)


@pytest.fixture
def make_token(signing_key: rsa.RSAPrivateKey) -> Callable[..., str]:
    """Build a signed token; keyword arguments override claims."""

    def _make(*, kid: str | None = KEY_ID, key: Any = None, **claims: Any) -> str:
        payload: dict[str, Any] = {
            "sub": "user-1",
            "email": "ada@example.test",
            "role": "authenticated",
            "iss": ISSUER,
            "exp": int(time.time()) + 300,
        }
        payload.update(claims)
        payload = {name: value for name, value in payload.items() if value is not None}
        headers = {"kid": kid} if kid is not None else None
        return jwt.encode(payload, key or signing_key, algorithm="RS256", headers=headers)

    return _make


@pytest.fixture
def authenticator(key_server: KeySetServer) -> Authenticator:
    keys = SigningKeyCache(JWKS_URL, client=key_server.client())
    return Authenticator(AuthConfig(issuer=ISSUER), keys=keys)


@pytest.fixture(autouse=True)
def _reset_security_sink():
    yield
    set_security_event_sink(None)
