"""
auth/policy.py -- Role-based access decisions.

authorize() runs only after the auth gate has produced verified Claims, so a
Forbidden here always means "known caller, insufficient role" -- never an
authentication failure.

The role comes from the token, not the store. A role change takes effect
only when the identity logs in again and receives a new token.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from auth.models import Claims, Role
from core.errors import Forbidden

logger = logging.getLogger("tienda.auth")


def authorize(claims: Claims, allowed_roles: Iterable[Role]) -> None:
    """Raise Forbidden unless claims.role is one of allowed_roles."""
    allowed = {Role(r) for r in allowed_roles}
    if claims.role not in allowed:
        logger.info(
            "Forbidden: subject=%s role=%s required=%s",
            claims.subject_id,
            claims.role.value,
            sorted(r.value for r in allowed),
        )
        raise Forbidden()
