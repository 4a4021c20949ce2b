"""Category breadcrumbs and tags."""

from sqlalchemy.ext.asyncio import AsyncSession

from category_api.catalog.models import Category, Tag
from category_api.catalog.repository import CategoryRepository, TagRepository


async def get_parent_tree_categories(session: AsyncSession, category_id: str) -> list[Category]:
    """Build the breadcrumb chain of a category.

    Walks ``parent_id`` links up to the root. Soft-deleted ancestors are
    left out; a cycle in the parent links stops the walk.

    Args:
        session: Async SQLAlchemy session.
        category_id: Category to start from.

    Returns:
        Categories from the root down to ``category_id``.
    """
    repository = CategoryRepository(session)
    chain: list[Category] = []
    seen: set[str] = set()
    current_id: str | None = category_id

    while current_id is not None and current_id not in seen:
        seen.add(current_id)
        category = await repository.get_by_id(current_id)
        if category is None:
            break
        if not category.is_deleted:
            chain.append(category)
        current_id = category.parent_id

    chain.reverse()
    return chain


async def get_tags_for_category(session: AsyncSession, category: Category) -> list[Tag]:
    """Get the active tags of a category.

    Args:
        session: Async SQLAlchemy session.
        category: Resolved category.

    Returns:
        Active tags.
    """
    return list(await TagRepository(session).find_active_for_category(category.id))
