"""
core/errors.py -- Error kinds shared by the auth core, the catalog and the API.

Every failure the system can report to a client is one of these classes. Each
carries a stable machine-readable ``code`` and a default human ``message``.
The HTTP status mapping lives in api/main.py -- this module knows nothing
about transport.

The token-related kinds are deliberately coarse: an expired, forged and
malformed token all surface as InvalidCredential, and an unknown username and
a wrong password both surface as InvalidCredentials. Finer reasons are logged
server-side only.

Layer rule: core/ is the kernel. No imports from api/, auth/, or catalog/.
"""

from __future__ import annotations


class TiendaError(Exception):
    """Base class for every user-reportable error."""

    code = "error"
    message = "Request failed."

    def __init__(self, message: str | None = None, detail: str | None = None) -> None:
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(TiendaError):
    """Malformed registration, login or resource body."""

    code = "validation_error"
    message = "Request data is invalid."


class DuplicateIdentity(TiendaError):
    """Registration for a username that already exists."""

    code = "duplicate_identity"
    message = "The username already exists."


class InvalidCredentials(TiendaError):
    """Login failed: unknown username or wrong password (never says which)."""

    code = "bad_credentials"
    message = "Invalid credentials."


class MissingCredential(TiendaError):
    """No token was presented on a protected route."""

    code = "missing_credential"
    message = "Access denied."


class InvalidCredential(TiendaError):
    """A token was presented but is expired, forged or malformed."""

    code = "invalid_token"
    message = "Invalid token."


class Forbidden(TiendaError):
    """Caller is authenticated but its role is not allowed for the operation."""

    code = "forbidden"
    message = "Not authorized for this operation."


class StorageFailure(TiendaError):
    """The backing store is unavailable or failed mid-operation."""

    code = "storage_failure"
    message = "Storage backend error."
