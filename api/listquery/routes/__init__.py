"""API routes for the List Query API."""

from .list_page_data import router as list_page_data_router

__all__ = ["list_page_data_router"]
