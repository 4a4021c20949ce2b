"""Application layer module.

Contains application services (use cases) that orchestrate
catalog logic and infrastructure.
"""

from category_api.application.category_service import (
    CategoryPage,
    CategoryPageResult,
    CategoryService,
    RemoveImagesResult,
    get_category_service,
)

__all__ = [
    "CategoryPage",
    "CategoryPageResult",
    "CategoryService",
    "RemoveImagesResult",
    "get_category_service",
]
