"""Application services."""

from .list_page_data import ListPageDataService, create_record_store, get_list_page_data_service

__all__ = [
    "ListPageDataService",
    "create_record_store",
    "get_list_page_data_service"
]
