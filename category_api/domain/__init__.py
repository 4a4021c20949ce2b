"""Domain layer module.

Contains catalog error types shared by the application and API layers.
"""

from category_api.domain.exceptions import (
    CatalogError,
    CatalogStoreError,
    CategoryNotFoundError,
    ErrorKind,
    InvalidSelectorError,
)

__all__ = [
    "CatalogError",
    "CatalogStoreError",
    "CategoryNotFoundError",
    "ErrorKind",
    "InvalidSelectorError",
]
