"""Catalog repositories for database operations.

Every hydrated relationship is loaded with an explicit liveness predicate
(``deleted_at IS NULL`` or ``status IS TRUE``) attached through
``relationship.and_()``, so soft-deleted rows never reach callers through
any join path.
"""

from collections.abc import Sequence

from sqlalchemy import select, union, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from category_api.catalog.models import (
    Category,
    Filter,
    FilterValue,
    Product,
    ProductAttributeValue,
    ProductGallery,
    ProductOption,
    Tag,
    category_child_products,
    category_products,
    category_tags,
)

# Join predicates shared by every hydration path
LIVE_PRODUCT = Product.deleted_at.is_(None)
LIVE_OPTION = ProductOption.deleted_at.is_(None)
LIVE_CATEGORY = Category.deleted_at.is_(None)
LIVE_GALLERY = ProductGallery.deleted_at.is_(None)


def _live_products_with_options(relationship_attr):
    """Loader for a product collection restricted to live products and options."""
    return selectinload(relationship_attr.and_(LIVE_PRODUCT)).selectinload(
        Product.options.and_(LIVE_OPTION)
    )


class CategoryRepository:
    """Repository for Category database operations.

    Example usage:
        async with async_session_factory() as session:
            repo = CategoryRepository(session)
            category = await repo.get_by_url("shoes")
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def get_by_url(self, url: str) -> Category | None:
        """Get a live category by slug with its product graph.

        Loads direct products, child-category products and live viewed-with
        categories (each with their own direct and child products), always
        with live options only.

        Args:
            url: Category slug.

        Returns:
            Category if found, None otherwise.
        """
        query = (
            select(Category)
            .where(Category.url == url, LIVE_CATEGORY)
            .options(
                _live_products_with_options(Category.products),
                _live_products_with_options(Category.child_products),
                selectinload(Category.categories_viewed_with.and_(LIVE_CATEGORY)).options(
                    _live_products_with_options(Category.products),
                    _live_products_with_options(Category.child_products),
                ),
            )
            .limit(1)
        )

        result = await self.session.execute(query)
        return result.scalars().first()

    async def get_by_id(self, category_id: str) -> Category | None:
        """Get a category by ID without relationships.

        Args:
            category_id: Category ID.

        Returns:
            Category if found, None otherwise.
        """
        return await self.session.get(Category, category_id)

    async def clear_image_prefix(self, prefix: str) -> dict[str, int]:
        """Clear category image fields whose value starts with ``prefix``.

        Args:
            prefix: Value prefix to match.

        Returns:
            Number of cleared rows per field.
        """
        return {
            "opengraph_image": await _clear_prefixed(
                self.session, Category, Category.opengraph_image, prefix
            ),
            "image": await _clear_prefixed(self.session, Category, Category.image, prefix),
        }


class ProductRepository:
    """Repository for Product and ProductGallery maintenance operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def clear_image_prefix(self, prefix: str) -> dict[str, int]:
        """Clear product and gallery image fields starting with ``prefix``.

        Args:
            prefix: Value prefix to match.

        Returns:
            Number of cleared rows per ``table.field``.
        """
        return {
            "products.opengraph_image": await _clear_prefixed(
                self.session, Product, Product.opengraph_image, prefix
            ),
            "product_galleries.image": await _clear_prefixed(
                self.session, ProductGallery, ProductGallery.image, prefix
            ),
        }


class ProductOptionRepository:
    """Repository for ProductOption lookups used by option resolution."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def find_by_ids(self, option_ids: Sequence[str]) -> Sequence[ProductOption]:
        """Find options by ID without hydration or liveness filtering.

        Args:
            option_ids: Option IDs.

        Returns:
            Matching options.
        """
        if not option_ids:
            return []

        query = select(ProductOption).where(ProductOption.id.in_(list(option_ids)))
        result = await self.session.execute(query)
        return result.scalars().all()

    async def find_by_attribute_names(self, names: Sequence[str]) -> Sequence[ProductOption]:
        """Find live options of live products carrying an attribute value name.

        Joins ProductAttributeValue -> Product -> ProductOption. One row is
        returned per matching attribute value, so an option may repeat.

        Args:
            names: Attribute value names.

        Returns:
            Flattened list of reachable options.
        """
        if not names:
            return []

        query = (
            select(ProductOption)
            .join(Product, ProductOption.product_id == Product.id)
            .join(ProductAttributeValue, ProductAttributeValue.product_id == Product.id)
            .where(
                ProductAttributeValue.name_ua.in_(list(names)),
                LIVE_PRODUCT,
                LIVE_OPTION,
            )
            .order_by(ProductAttributeValue.id, ProductOption.id)
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def find_hydrated(self, option_ids: Sequence[str]) -> Sequence[ProductOption]:
        """Load live options of live products with their product graph.

        The product is hydrated with attributes, attribute values, live
        gallery, main category and live categories.

        Args:
            option_ids: Option IDs.

        Returns:
            Hydrated options, ordered by ID.
        """
        if not option_ids:
            return []

        return await self._find_hydrated_where(ProductOption.id.in_(list(option_ids)))

    async def find_hydrated_for_category(self, category_id: str) -> Sequence[ProductOption]:
        """Load every live option of a category's direct and child products.

        The product scope is read from the link tables in a subquery.

        Args:
            category_id: Category ID.

        Returns:
            Hydrated options, ordered by ID.
        """
        scope = union(
            select(category_child_products.c.product_id).where(
                category_child_products.c.category_id == category_id
            ),
            select(category_products.c.product_id).where(
                category_products.c.category_id == category_id
            ),
        )
        return await self._find_hydrated_where(ProductOption.product_id.in_(scope))

    async def _find_hydrated_where(self, criterion) -> Sequence[ProductOption]:
        query = (
            select(ProductOption)
            .join(Product, ProductOption.product_id == Product.id)
            .where(criterion, LIVE_OPTION, LIVE_PRODUCT)
            .options(
                selectinload(ProductOption.product).options(
                    selectinload(Product.attributes),
                    selectinload(Product.attribute_values),
                    selectinload(Product.gallery.and_(LIVE_GALLERY)),
                    selectinload(Product.main_category),
                    selectinload(Product.categories.and_(LIVE_CATEGORY)),
                )
            )
            .order_by(ProductOption.id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def find_with_siblings(self, option_ids: Sequence[str]) -> Sequence[ProductOption]:
        """Load live options with their product, its live options and gallery.

        Args:
            option_ids: Option IDs.

        Returns:
            Hydrated options, ordered by ID.
        """
        if not option_ids:
            return []

        query = (
            select(ProductOption)
            .join(Product, ProductOption.product_id == Product.id)
            .where(ProductOption.id.in_(list(option_ids)), LIVE_OPTION, LIVE_PRODUCT)
            .options(
                selectinload(ProductOption.product).options(
                    selectinload(Product.options.and_(LIVE_OPTION)),
                    selectinload(Product.gallery.and_(LIVE_GALLERY)),
                )
            )
            .order_by(ProductOption.id)
        )
        result = await self.session.execute(query)
        return result.scalars().all()


class FilterValueRepository:
    """Repository for FilterValue lookups."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def find_by_urls(self, urls: Sequence[str]) -> Sequence[FilterValue]:
        """Find filter values whose URL token is one of ``urls``.

        Args:
            urls: URL tokens taken from the category URL.

        Returns:
            Matching filter values, ordered by ID.
        """
        if not urls:
            return []

        query = (
            select(FilterValue)
            .where(FilterValue.url.in_(list(urls)))
            .order_by(FilterValue.id)
        )
        result = await self.session.execute(query)
        return result.scalars().all()


class FilterRepository:
    """Repository for Filter lookups."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def find_active_for_category(self, category_id: str) -> Sequence[Filter]:
        """Find active filters attached to a category with their active values.

        Args:
            category_id: Category ID.

        Returns:
            Active filters, ordered by ID.
        """
        query = (
            select(Filter)
            .where(
                Filter.status.is_(True),
                Filter.categories.any(Category.id == category_id),
            )
            .options(selectinload(Filter.filter_values.and_(FilterValue.status.is_(True))))
            .order_by(Filter.id)
        )
        result = await self.session.execute(query)
        return result.scalars().all()


class TagRepository:
    """Repository for Tag lookups."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def find_active_for_category(self, category_id: str) -> Sequence[Tag]:
        """Find active tags attached to a category.

        Args:
            category_id: Category ID.

        Returns:
            Active tags, ordered by name.
        """
        query = (
            select(Tag)
            .join(category_tags, category_tags.c.tag_id == Tag.id)
            .where(category_tags.c.category_id == category_id, Tag.status.is_(True))
            .order_by(Tag.name_ua, Tag.id)
        )
        result = await self.session.execute(query)
        return result.scalars().all()


async def _clear_prefixed(session: AsyncSession, model, column, prefix: str) -> int:
    """Set ``column`` to NULL on rows where it starts with ``prefix``."""
    statement = (
        update(model)
        .where(column.startswith(prefix, autoescape=True))
        .values({column.key: None})
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(statement)
    return result.rowcount or 0
