"""FastAPI dependencies for identifying the caller."""

import logging
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .authorization import Principal


logger = logging.getLogger(__name__)

# Optional bearer scheme: a missing header yields None instead of a 403
security = HTTPBearer(
    scheme_name="bearerToken",
    description="Bearer token identifying the caller",
    auto_error=False
)


async def get_principal(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)]
) -> Optional[Principal]:
    """Build the principal for the request from its bearer token.

    Args:
        credentials: HTTP authorization credentials, if any were sent

    Returns:
        The caller's principal, or None for anonymous requests
    """
    if not credentials or not credentials.credentials:
        return None

    logger.debug("Request carries a bearer token")
    return Principal(token=credentials.credentials)


CurrentPrincipal = Annotated[Optional[Principal], Depends(get_principal)]
