"""
api/routes/auth.py -- Registration and login endpoints.

Routes:
  POST /registro  -- create an identity (public)
  POST /login     -- exchange username/password for an access token (public)

Both handlers are plain `def`, not `async def`: FastAPI runs them in its
worker threadpool, so bcrypt's deliberate slowness never blocks the event loop.

Security:
  authenticate_identity() provides timing equalization -- use it, never inline
  get_by_username() + verify().
  Cache-Control: no-store on login responses so tokens are not cached.
  Unknown username and wrong password return the same 400 body.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.models import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse
from auth.accounts import login as login_identity
from auth.accounts import register_identity
from auth.passwords import PasswordHasher
from auth.store import IdentityStore
from auth.tokens import TokenCodec

router = APIRouter()


@router.post("/registro", response_model=RegisterResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> RegisterResponse:
    """Register a new identity. Role defaults to standard when omitted.

    A taken username surfaces as DuplicateIdentity (400, duplicate_identity).
    """
    store: IdentityStore = request.app.state.identity_store
    hasher: PasswordHasher = request.app.state.hasher
    identity = register_identity(store, hasher, body.username, body.password, body.role)
    return RegisterResponse(
        message="Identity registered.",
        id=identity.id,
        username=identity.username,
        role=identity.role,
    )


@router.post("/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password; return an access token."""
    store: IdentityStore = request.app.state.identity_store
    hasher: PasswordHasher = request.app.state.hasher
    codec: TokenCodec = request.app.state.token_codec

    token, identity = login_identity(store, hasher, codec, body.username, body.password)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            token=token,
            expires_in=int(codec.ttl.total_seconds()),
            role=identity.role,
        ).model_dump(mode="json"),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp
