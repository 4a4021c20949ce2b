"""Category page application service.

Resolves a category URL into the full category page and runs the inline
image cleanup.
"""

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from category_api.catalog.facets import FacetSelection, classify_filter_values
from category_api.catalog.hierarchy import get_parent_tree_categories, get_tags_for_category
from category_api.catalog.models import Category, Filter, ProductOption, Tag
from category_api.catalog.ordering import OptionOrderer, sort_options_by_type
from category_api.catalog.repository import (
    CategoryRepository,
    FilterRepository,
    FilterValueRepository,
    ProductOptionRepository,
)
from category_api.catalog.resolution import OptionResolver
from category_api.catalog.sanitizer import ImageSanitizer
from category_api.catalog.url_parser import parse_category_url
from category_api.catalog.viewed_with import ViewedWithAssembler
from category_api.domain.exceptions import (
    CatalogError,
    CatalogStoreError,
    CategoryNotFoundError,
    ErrorKind,
    InvalidSelectorError,
)

logger = structlog.get_logger()


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class CategoryPage:
    """Everything shown on a category page."""

    category: Category
    options: list[ProductOption]
    filters: list[Filter]
    tags: list[Tag]
    breadcrumbs: list[Category]
    options_viewed_with: list[ProductOption]

    def to_dict(self) -> dict[str, Any]:
        """Convert to the response payload.

        Returns:
            Dictionary representation.
        """
        return {
            "category": self.category.to_dict(),
            "options": [option.to_dict() for option in self.options],
            "filters": [filter_.to_dict() for filter_ in self.filters],
            "tags": [tag.to_dict() for tag in self.tags],
            "breadcrumbs": [
                category.to_dict(include_related=False) for category in self.breadcrumbs
            ],
            "optionsViewedWith": [option.to_dict() for option in self.options_viewed_with],
        }


@dataclass
class CategoryPageResult:
    """Result of resolving a category page."""

    page: CategoryPage | None = None
    success: bool = True
    error: str | None = None
    error_kind: ErrorKind | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class RemoveImagesResult:
    """Result of the inline image cleanup."""

    cleared: dict[str, int] = field(default_factory=dict)
    success: bool = True
    error: str | None = None


@dataclass
class _PageExtras:
    filters: list[Filter]
    breadcrumbs: list[Category]
    tags: list[Tag]


async def _gather(*aws: Awaitable[Any]) -> list[Any]:
    """Run awaitables concurrently and re-raise the first failure.

    Every branch is awaited to completion before raising, so no branch
    outlives the sessions it uses.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


# ============================================================================
# Category Service
# ============================================================================


class CategoryService:
    """Application service for category pages.

    Orchestrates the flow of:
    1. Decoding the category URL into a slug and facet tokens
    2. Loading the category and classifying facet values concurrently
    3. Resolving options, assembling viewed-with options and loading
       filters, breadcrumbs and tags concurrently, one session each

    Example usage:
        service = CategoryService(async_session_factory)
        result = await service.get_category_page("shoes__color_red")
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        orderer: OptionOrderer = sort_options_by_type,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            session_factory: Factory opening one session per concurrent branch.
            orderer: Ordering of viewed-with options.
            request_id: Request ID for correlation.
        """
        self.session_factory = session_factory
        self.orderer = orderer
        self.request_id = request_id

    async def get_category_page(self, url: str) -> CategoryPageResult:
        """Resolve a category URL into its page.

        Args:
            url: Category slug optionally followed by facet segments.

        Returns:
            CategoryPageResult with the page, or the error and its kind.
        """
        try:
            page = await self._build_page(url)
        except CatalogError as e:
            log = logger.warning if e.kind is ErrorKind.NOT_FOUND else logger.error
            log(
                "Failed to resolve category page",
                url=url,
                error=e.message,
                error_kind=e.kind.value,
                details=e.details,
                request_id=self.request_id,
            )
            return CategoryPageResult(
                success=False,
                error=e.message,
                error_kind=e.kind,
                details=e.details,
            )

        logger.info(
            "Category page resolved",
            url=url,
            category_id=page.category.id,
            options=len(page.options),
            filters=len(page.filters),
            options_viewed_with=len(page.options_viewed_with),
            request_id=self.request_id,
        )
        return CategoryPageResult(page=page)

    async def remove_base64_images(self) -> RemoveImagesResult:
        """Clear inline base64 images from the catalog.

        Returns:
            RemoveImagesResult with cleared row counts per field.
        """
        try:
            async with self.session_factory() as session:
                cleared = await ImageSanitizer(session).remove_base64_images()
        except (SQLAlchemyError, OSError) as e:
            error = CatalogStoreError("inline image cleanup", e)
            logger.error(
                "Failed to remove inline images",
                error=str(e),
                request_id=self.request_id,
            )
            return RemoveImagesResult(success=False, error=error.message)

        return RemoveImagesResult(cleared=cleared)

    async def _build_page(self, url: str) -> CategoryPage:
        parsed = parse_category_url(url)
        if not parsed.category_url:
            raise InvalidSelectorError(url, "missing category slug")

        try:
            async with (
                self.session_factory() as category_session,
                self.session_factory() as option_session,
                self.session_factory() as viewed_session,
            ):
                category, selection = await _gather(
                    CategoryRepository(category_session).get_by_url(parsed.category_url),
                    self._classify(option_session, parsed.url_values),
                )
                if category is None:
                    raise CategoryNotFoundError(parsed.category_url)

                resolver = OptionResolver(ProductOptionRepository(option_session))
                options, extras, viewed_with = await _gather(
                    resolver.resolve(category.id, selection),
                    self._load_extras(category_session, category),
                    ViewedWithAssembler(
                        ProductOptionRepository(viewed_session), self.orderer
                    ).assemble(category),
                )
        except (SQLAlchemyError, OSError) as e:
            raise CatalogStoreError("category page resolution", e) from e

        return CategoryPage(
            category=category,
            options=list(options),
            filters=extras.filters,
            tags=extras.tags,
            breadcrumbs=extras.breadcrumbs,
            options_viewed_with=viewed_with,
        )

    async def _classify(self, session: AsyncSession, url_values: list[str]) -> FacetSelection:
        filter_values = await FilterValueRepository(session).find_by_urls(url_values)
        return classify_filter_values(filter_values)

    async def _load_extras(self, session: AsyncSession, category: Category) -> _PageExtras:
        filters = await FilterRepository(session).find_active_for_category(category.id)
        breadcrumbs = await get_parent_tree_categories(session, category.id)
        tags = await get_tags_for_category(session, category)
        return _PageExtras(
            filters=list(filters),
            breadcrumbs=breadcrumbs,
            tags=tags,
        )


def get_category_service(
    session_factory: async_sessionmaker[AsyncSession],
    request_id: str | None = None,
) -> CategoryService:
    """Create a category service.

    Args:
        session_factory: Session factory.
        request_id: Request ID for correlation.

    Returns:
        CategoryService instance.
    """
    return CategoryService(session_factory, request_id=request_id)
