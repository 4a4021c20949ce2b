"""Category Catalog.

Provides catalog models, repositories and the building blocks that turn a
category URL into its page: URL parsing, facet classification, option
resolution, viewed-with options, breadcrumbs, tags and image cleanup.
"""

from category_api.catalog.facets import FacetSelection, classify_filter_values
from category_api.catalog.models import (
    Attribute,
    Category,
    Filter,
    FilterValue,
    Product,
    ProductAttributeValue,
    ProductGallery,
    ProductOption,
    Tag,
)
from category_api.catalog.ordering import OptionOrderer, make_type_orderer, sort_options_by_type
from category_api.catalog.resolution import OptionResolver
from category_api.catalog.sanitizer import ImageSanitizer
from category_api.catalog.selectors import AttributeSelector, OptionSelector
from category_api.catalog.url_parser import ParsedCategoryUrl, parse_category_url
from category_api.catalog.viewed_with import ViewedWithAssembler

__all__ = [
    # Models
    "Attribute",
    "Category",
    "Filter",
    "FilterValue",
    "Product",
    "ProductAttributeValue",
    "ProductGallery",
    "ProductOption",
    "Tag",
    # Selectors
    "AttributeSelector",
    "OptionSelector",
    # URL parsing and facets
    "FacetSelection",
    "ParsedCategoryUrl",
    "classify_filter_values",
    "parse_category_url",
    # Resolution
    "OptionResolver",
    "ViewedWithAssembler",
    # Ordering
    "OptionOrderer",
    "make_type_orderer",
    "sort_options_by_type",
    # Maintenance
    "ImageSanitizer",
]
