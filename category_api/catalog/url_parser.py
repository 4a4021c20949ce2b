"""Category URL parser.

Category URLs carry the category slug followed by facet segments:

    shoes__color_red__color_blue__size_42

Segments are separated by a double underscore; each facet segment is a
``key_value`` pair. Segments that do not split on single underscores into
exactly a non-empty key and a value are skipped.
"""

from dataclasses import dataclass, field

SEGMENT_SEPARATOR = "__"
PAIR_SEPARATOR = "_"


@dataclass
class ParsedCategoryUrl:
    """Decoded category URL.

    Attributes:
        category_url: Category slug.
        params: Facet key to URL tokens, in order of appearance.
        url_values: All URL tokens flattened across keys.
    """

    category_url: str
    params: dict[str, list[str]] = field(default_factory=dict)

    @property
    def url_values(self) -> list[str]:
        """Get all URL tokens, grouped by key in key order."""
        return [value for values in self.params.values() for value in values]

    @property
    def has_selection(self) -> bool:
        """Check whether any facet token was selected."""
        return any(self.params.values())


def parse_category_url(url: str) -> ParsedCategoryUrl:
    """Decode a category URL into its slug and facet tokens.

    Tokens are kept as strings, including numeric-looking ones.

    Args:
        url: Raw URL path segment.

    Returns:
        Parsed category URL.
    """
    category_url, *segments = url.split(SEGMENT_SEPARATOR)
    params: dict[str, list[str]] = {}

    for segment in segments:
        parts = segment.split(PAIR_SEPARATOR)
        if len(parts) != 2 or not parts[0]:
            continue
        key, value = parts
        params.setdefault(key, []).append(value)

    return ParsedCategoryUrl(category_url=category_url, params=params)
