"""Caller identification and the authorization gate."""

from .authorization import Principal, Authorizer, allow_all, require_principal
from .dependencies import get_principal, CurrentPrincipal

__all__ = [
    "Principal",
    "Authorizer",
    "allow_all",
    "require_principal",
    "get_principal",
    "CurrentPrincipal"
]
