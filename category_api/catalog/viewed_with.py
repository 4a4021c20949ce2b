"""Options of "viewed with" categories.

Related categories are shown next to a category page; their options are
collected from each related category's child and direct products.
"""

from collections.abc import Sequence

from category_api.catalog.models import Category, ProductOption
from category_api.catalog.ordering import OptionOrderer, sort_options_by_type
from category_api.catalog.repository import ProductOptionRepository
from category_api.catalog.resolution import product_option_ids


def viewed_with_option_ids(category: Category) -> list[str]:
    """Flatten option IDs of all viewed-with categories.

    Repeats are kept: an option reachable through several related
    categories or products appears once per occurrence.

    Args:
        category: Category loaded with its viewed-with graph.

    Returns:
        Option IDs in traversal order.
    """
    ids: list[str] = []
    for viewed in category.categories_viewed_with:
        ids.extend(product_option_ids(viewed.child_products))
        ids.extend(product_option_ids(viewed.products))
    return ids


class ViewedWithAssembler:
    """Builds the ordered option list of viewed-with categories."""

    def __init__(
        self,
        repository: ProductOptionRepository,
        orderer: OptionOrderer = sort_options_by_type,
    ) -> None:
        """Initialize assembler.

        Args:
            repository: Option repository.
            orderer: Ordering applied to the collected options.
        """
        self.repository = repository
        self.orderer = orderer

    async def assemble(self, category: Category) -> list[ProductOption]:
        """Collect, hydrate and order viewed-with options.

        Args:
            category: Category loaded with its viewed-with graph.

        Returns:
            Ordered options.
        """
        option_ids = viewed_with_option_ids(category)
        hydrated: Sequence[ProductOption] = await self.repository.find_with_siblings(
            list(dict.fromkeys(option_ids))
        )

        by_id = {option.id: option for option in hydrated}
        options = [by_id[option_id] for option_id in option_ids if option_id in by_id]
        return self.orderer(options)
