from __future__ import annotations

from typing import Any, Callable

from . import schemas
from .services.moderation import ContentPage


def create_page_response(
    page: ContentPage, serialize: Callable[[Any], Any]
) -> schemas.Page[Any]:
    """
    Build a Page response from a service-level ContentPage.

    Args:
        page: Result of a listing service
        serialize: Converts one ORM row into its response schema

    Returns:
        Page with items, total, current page and page count
    """
    return schemas.Page(
        items=[serialize(item) for item in page.items],
        total=page.total,
        page=page.page,
        pages=page.pages,
    )
