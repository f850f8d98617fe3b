"""Request middleware — bearer-token authentication and CORS.

    Authenticator -- Verifies bearer tokens against the provider's signing keys
    SigningKeyCache -- Process-wide JWKS cache shared by all requests
    CORSConfig -- Headers added to every response and the OPTIONS answer
"""

from wren.middleware.auth import AuthConfig, AuthContext, Authenticator, Principal
from wren.middleware.cors import CORSConfig, add_cors_headers, preflight_response
from wren.middleware.jwks import SigningKeyCache

__all__ = [
    "AuthConfig",
    "AuthContext",
    "Authenticator",
    "CORSConfig",
    "Principal",
    "SigningKeyCache",
    "add_cors_headers",
    "preflight_response",
]
