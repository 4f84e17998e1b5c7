"""Pagination utilities for API v1."""

from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """``?page=`` pagination; clients may pick the page size with ``?limit=``."""

    page_size = 10
    page_size_query_param = "limit"
    max_page_size = 100
