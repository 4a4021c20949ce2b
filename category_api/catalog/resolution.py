"""Option resolution for category pages.

Combines the options matched through attribute filters with explicitly
selected options. Selections are merged as a union: any non-empty match
replaces the category scope instead of narrowing it. With no match the
result falls back to every option of the category's direct and child
products.
"""

from collections.abc import Iterable, Sequence

import structlog

from category_api.catalog.facets import FacetSelection
from category_api.catalog.models import Product, ProductOption
from category_api.catalog.repository import ProductOptionRepository

logger = structlog.get_logger()


def unique_option_ids(options: Iterable[ProductOption]) -> list[str]:
    """Get option IDs without repeats, in order of first appearance."""
    return list(dict.fromkeys(option.id for option in options))


def product_option_ids(products: Iterable[Product]) -> list[str]:
    """Flatten the option IDs of ``products``, keeping repeats."""
    return [option.id for product in products for option in product.options]


class OptionResolver:
    """Resolves the option list of a category page.

    Example usage:
        async with async_session_factory() as session:
            resolver = OptionResolver(ProductOptionRepository(session))
            options = await resolver.resolve(category.id, selection)
    """

    def __init__(self, repository: ProductOptionRepository) -> None:
        """Initialize resolver.

        Args:
            repository: Option repository.
        """
        self.repository = repository

    async def match_attributes(self, selection: FacetSelection) -> Sequence[ProductOption]:
        """Find options of products carrying a selected attribute value.

        Args:
            selection: Facet selection.

        Returns:
            Flattened list of matched options.
        """
        return await self.repository.find_by_attribute_names(selection.attribute_names)

    async def select_option_ids(self, selection: FacetSelection) -> list[str]:
        """Union attribute-matched and explicitly selected options.

        Args:
            selection: Facet selection.

        Returns:
            Deduplicated selected option IDs.
        """
        by_attributes = await self.match_attributes(selection)
        explicit = await self.repository.find_by_ids(selection.option_ids)

        selected = unique_option_ids([*by_attributes, *explicit])
        logger.debug(
            "Facet options selected",
            attribute_names=selection.attribute_names,
            attribute_matches=len(by_attributes),
            explicit_matches=len(explicit),
            selected=len(selected),
        )
        return selected

    async def resolve(
        self,
        category_id: str,
        selection: FacetSelection,
    ) -> Sequence[ProductOption]:
        """Resolve the final hydrated option list.

        Args:
            category_id: Category whose direct and child products form the
                fallback scope.
            selection: Facet selection.

        Returns:
            Hydrated live options, each ID at most once.
        """
        selected = await self.select_option_ids(selection)
        if selected:
            options = await self.repository.find_hydrated(selected)
        else:
            options = await self.repository.find_hydrated_for_category(category_id)

        logger.info(
            "Category options resolved",
            category_id=category_id,
            fallback=not selected,
            selected=len(selected),
            resolved=len(options),
        )
        return options
