"""Facet value selectors.

A filter value selects products either through a product attribute name
or through one explicit option id.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AttributeSelector:
    """Selects every live option of products carrying an attribute value.

    Attributes:
        name: Attribute value name matched against ``ProductAttributeValue.name_ua``.
    """

    name: str


@dataclass(frozen=True)
class OptionSelector:
    """Selects one explicit product option.

    Attributes:
        option_id: Identifier of the selected option.
    """

    option_id: str


FacetSelector = AttributeSelector | OptionSelector
