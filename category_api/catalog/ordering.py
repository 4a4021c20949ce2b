"""Option ordering.

Options shown next to a category page are ordered by an injectable
``OptionOrderer``: any callable returning a new sequence that is a total,
stable and deterministic ordering of its input.
"""

from collections.abc import Callable, Sequence

from category_api.catalog.models import ProductOption

OptionOrderer = Callable[[Sequence[ProductOption]], list[ProductOption]]

# Types listed here come first, in this order; other types follow
# alphabetically and untyped options come last.
DEFAULT_TYPE_PRIORITY: tuple[str, ...] = ("main", "color", "size")


def make_type_orderer(priority: Sequence[str] = DEFAULT_TYPE_PRIORITY) -> OptionOrderer:
    """Build an orderer that groups options by type.

    Args:
        priority: Option types in display order.

    Returns:
        Orderer sorting by type rank; ties keep input order.
    """
    ranks = {option_type: rank for rank, option_type in enumerate(priority)}

    def sort_key(option: ProductOption) -> tuple[int, int, str]:
        if option.type is None:
            return (2, 0, "")
        if option.type in ranks:
            return (0, ranks[option.type], "")
        return (1, 0, option.type)

    def order(options: Sequence[ProductOption]) -> list[ProductOption]:
        return sorted(options, key=sort_key)

    return order


sort_options_by_type: OptionOrderer = make_type_orderer()
