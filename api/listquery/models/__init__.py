"""Data models for the List Query API.

Request and response bodies live in ``models.list_page``; import them from
there directly.
"""

from .base import WireModel
from .entities import EntityBase, Workspace, Product

__all__ = [
    "WireModel",
    "EntityBase",
    "Workspace",
    "Product"
]
