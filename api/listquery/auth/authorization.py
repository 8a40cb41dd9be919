"""Authorization gate consulted before a list request runs."""

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from ..listdata.schema import EntitySchema


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of a request."""

    token: str


# Returns True when the principal may list the entity
Authorizer = Callable[[Optional[Principal], EntitySchema], Awaitable[bool]]


async def allow_all(principal: Optional[Principal], schema: EntitySchema) -> bool:
    return True


async def require_principal(principal: Optional[Principal], schema: EntitySchema) -> bool:
    """Deny anonymous callers."""
    return principal is not None
