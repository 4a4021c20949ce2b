"""Facet value classification.

Splits the filter values selected in a category URL into attribute
selections and explicit option selections.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from category_api.catalog.models import FilterValue
from category_api.catalog.selectors import AttributeSelector, OptionSelector


@dataclass
class FacetSelection:
    """Filter values of a category URL, split by payload kind.

    Attributes:
        attribute_values: Attribute value names, one per attribute filter value.
        option_ids: Option IDs, one per option filter value.
    """

    attribute_values: list[str] = field(default_factory=list)
    option_ids: list[str] = field(default_factory=list)

    @property
    def attribute_names(self) -> list[str]:
        """Get distinct attribute value names in order of first appearance."""
        return list(dict.fromkeys(self.attribute_values))

    @property
    def is_empty(self) -> bool:
        """Check whether nothing was selected."""
        return not self.attribute_values and not self.option_ids


def classify_filter_values(filter_values: Iterable[FilterValue]) -> FacetSelection:
    """Classify filter values by their selector.

    Values with no payload are ignored.

    Args:
        filter_values: Filter values matched by URL token.

    Returns:
        Facet selection.
    """
    selection = FacetSelection()

    for filter_value in filter_values:
        selector = filter_value.selector
        if isinstance(selector, AttributeSelector):
            selection.attribute_values.append(selector.name)
        elif isinstance(selector, OptionSelector):
            selection.option_ids.append(selector.option_id)

    return selection
