"""Category API.

Resolves category URLs with facet selectors into category pages.
"""
