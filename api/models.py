"""
API request and response models for the Tienda REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
catalog/models.py, which own the internal domain representation. Route
handlers map between the two.
"""

from collections.abc import Iterable
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from auth.models import Role
from auth.passwords import MAX_PASSWORD_BYTES
from catalog.models import Article

# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class _Credentials(BaseModel):
    # identityName/secret are the wire names older clients send.
    username: str = Field(
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("username", "identityName"),
    )
    # Not stripped: whitespace is significant in a password.
    password: str = Field(min_length=1, validation_alias=AliasChoices("password", "secret"))

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, value: str) -> str:
        """bcrypt rejects inputs over 72 bytes; refuse them here with a 400."""
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class RegisterRequest(_Credentials):
    """Request body for POST /registro. role defaults to standard."""

    role: Optional[Role] = None


class LoginRequest(_Credentials):
    """Request body for POST /login."""


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class RegisterResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    id: int
    username: str
    role: Role


class LoginResponse(BaseModel):
    """Response body for POST /login. The token goes in the Authorization header as-is."""

    model_config = ConfigDict(frozen=True)

    token: str
    token_type: str = "jwt"
    expires_in: int
    role: Role


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class ArticleCreate(BaseModel):
    """Request body for POST /articulos."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=5000)
    price: float = Field(allow_inf_nan=False)


class ArticleResponse(BaseModel):
    """One article in the GET /articulos list."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    description: str
    price: float
    created_at: str

    @classmethod
    def from_article(cls, article: Article) -> "ArticleResponse":
        return cls(
            id=article.id,
            title=article.title,
            description=article.description,
            price=article.price,
            created_at=article.created_at,
        )


class ArticleCreatedResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    id: int


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


def validation_detail(errors: Iterable[dict[str, Any]]) -> str:
    """Render pydantic errors for ErrorDetail.detail without the submitted input.

    The "input" entry can hold the whole request body, password included.
    """
    return str([{k: v for k, v in err.items() if k not in ("input", "url")} for err in errors])


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str
    version: str
    components: dict[str, str]
