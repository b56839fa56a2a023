"""Caller Identity — reads the identity established upstream from request headers.

Invariants:
    - X-User-Id absent → anonymous (None), never an error by itself
    - X-User-Role other than "admin" is treated as a regular user
    - Routes that need a caller use get_caller, which raises AuthenticationRequiredError

Design Decisions:
    - Credentials are verified by the gateway in front of this service; only the
      resolved id/role reach us
"""

import logging

from fastapi import Depends, Header

from qbank.core.authorization import Caller
from qbank.core.domain_types import CallerRole, UserId
from qbank.core.errors import AuthenticationRequiredError

logger = logging.getLogger(__name__)


async def get_optional_caller(
    x_user_id: str | None = Header(None),
    x_user_role: str | None = Header(None),
) -> Caller | None:
    if not x_user_id or not x_user_id.strip():
        return None
    role = CallerRole.USER
    if x_user_role:
        try:
            role = CallerRole(x_user_role.strip().lower())
        except ValueError:
            logger.warning(
                f"Unknown caller role {x_user_role[:20]!r}, treating as user",
                extra={"user_id": x_user_id},
            )
    return Caller(id=UserId(x_user_id.strip()), role=role)


async def get_caller(
    caller: Caller | None = Depends(get_optional_caller),
) -> Caller:
    if caller is None:
        raise AuthenticationRequiredError()
    return caller
