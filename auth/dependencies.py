"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication and authorization.

require_claims() is the auth gate: it reads the token header, verifies the
token and stores the Claims on request.state.claims. The whole header value
is the token; there is no "Bearer " scheme parsing.

require_role() is a dependency factory layering the access policy on top of
the gate. Because the gate runs first, a request is rejected for a missing or
bad token before it can be rejected for its role, and FastAPI resolves both
before it validates the request body.

Both raise core.errors kinds; api/main.py maps them to HTTP responses.

Layer rule: no imports from api/ or catalog/.
  auth/dependencies.py may import from fastapi (for Depends/Request) because
  this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import Depends, Request

from auth.models import Claims, Role
from auth.policy import authorize
from auth.tokens import InvalidToken, TokenCodec
from core.config import get_settings
from core.errors import InvalidCredential, MissingCredential


def require_claims(request: Request) -> Claims:
    """Require a valid token. Raises MissingCredential or InvalidCredential.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(claims: Claims = Depends(require_claims)): ...
    """
    token = request.headers.get(get_settings().token_header, "")
    if not token:
        raise MissingCredential()

    codec: TokenCodec = request.app.state.token_codec
    try:
        claims = codec.verify(token)
    except InvalidToken as exc:
        raise InvalidCredential() from exc

    request.state.claims = claims
    return claims


def require_role(*roles: Role) -> Callable[..., Claims]:
    """Build a dependency that requires a valid token carrying one of roles.

    Use as a FastAPI dependency:
        @router.post("/admin-only")
        def route(claims: Claims = Depends(require_role(Role.admin))): ...
    """
    allowed = frozenset(Role(r) for r in roles)

    def dependency(claims: Claims = Depends(require_claims)) -> Claims:
        authorize(claims, allowed)
        return claims

    return dependency
