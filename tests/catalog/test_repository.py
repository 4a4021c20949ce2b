"""Tests for catalog repositories and breadcrumbs."""

from datetime import datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from builders import make_attribute_value, make_product, option_named
from category_api.catalog.hierarchy import get_parent_tree_categories
from category_api.catalog.models import Category
from category_api.catalog.repository import CategoryRepository, ProductOptionRepository


class TestProductOptionRepository:
    """Tests for ProductOptionRepository."""

    @pytest.mark.asyncio
    async def test_empty_inputs_skip_queries(self, db_session: AsyncSession) -> None:
        """Empty ID or name lists return nothing."""
        repo = ProductOptionRepository(db_session)
        assert await repo.find_by_ids([]) == []
        assert await repo.find_by_attribute_names([]) == []
        assert await repo.find_hydrated([]) == []
        assert await repo.find_with_siblings([]) == []

    @pytest.mark.asyncio
    async def test_find_by_ids_does_not_filter(
        self, db_session: AsyncSession, deleted_at: datetime
    ) -> None:
        """Explicit lookups return deleted options; hydration drops them."""
        product = make_product("P1", "Live", "Gone")
        option_named(product, "Gone").deleted_at = deleted_at
        db_session.add(product)
        await db_session.commit()

        repo = ProductOptionRepository(db_session)
        ids = [option.id for option in product.options]

        assert len(await repo.find_by_ids(ids)) == 2
        assert [o.name_ua for o in await repo.find_hydrated(ids)] == ["Live"]

    @pytest.mark.asyncio
    async def test_find_by_attribute_names(self, db_session: AsyncSession) -> None:
        """Options are reached through their product's attribute values."""
        red = make_product("Red", "R1", "R2")
        make_attribute_value(red, "red")
        blue = make_product("Blue", "B1")
        make_attribute_value(blue, "blue")
        db_session.add_all([red, blue])
        await db_session.commit()

        options = await ProductOptionRepository(db_session).find_by_attribute_names(["red"])

        assert {o.name_ua for o in options} == {"R1", "R2"}

    @pytest.mark.asyncio
    async def test_find_hydrated_for_category(
        self,
        db_session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        deleted_at: datetime,
    ) -> None:
        """Category scope covers live direct and child products once each."""
        direct = make_product("Direct", "D1", "D2")
        option_named(direct, "D2").deleted_at = deleted_at
        nested = make_product("Nested", "N1")
        gone = make_product("Gone", "G1", deleted_at=deleted_at)
        elsewhere = make_product("Elsewhere", "E1")
        shoes = Category(
            name_ua="Shoes",
            url="shoes",
            products=[direct, gone],
            child_products=[nested, direct],
        )
        db_session.add_all([shoes, Category(name_ua="Hats", url="hats", products=[elsewhere])])
        await db_session.commit()

        async with session_factory() as session:
            options = await ProductOptionRepository(session).find_hydrated_for_category(shoes.id)

        assert sorted(o.name_ua for o in options) == ["D1", "N1"]
        assert all(o.product is not None for o in options)

    @pytest.mark.asyncio
    async def test_find_with_siblings_hydrates_product(
        self, db_session: AsyncSession, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        """Options come back with their product, its options and gallery."""
        product = make_product("Sock", "S1", "S2")
        db_session.add(product)
        await db_session.commit()

        async with session_factory() as session:
            options = await ProductOptionRepository(session).find_with_siblings(
                [option_named(product, "S1").id]
            )

        assert [o.product.id for o in options] == [product.id]
        assert {o.name_ua for o in options[0].product.options} == {"S1", "S2"}
        assert options[0].product.gallery == []


class TestCategoryRepository:
    """Tests for CategoryRepository."""

    @pytest.mark.asyncio
    async def test_get_by_url_missing(self, db_session: AsyncSession) -> None:
        """Unknown slug returns None."""
        assert await CategoryRepository(db_session).get_by_url("missing") is None


class TestParentTree:
    """Tests for get_parent_tree_categories."""

    @pytest.mark.asyncio
    async def test_stops_on_cycle(self, db_session: AsyncSession) -> None:
        """A cycle in parent links does not loop forever."""
        first = Category(name_ua="First", url="first")
        second = Category(name_ua="Second", url="second")
        db_session.add_all([first, second])
        await db_session.flush()
        first.parent_id = second.id
        second.parent_id = first.id
        await db_session.commit()

        chain = await get_parent_tree_categories(db_session, first.id)

        assert [c.url for c in chain] == ["second", "first"]

    @pytest.mark.asyncio
    async def test_unknown_category(self, db_session: AsyncSession) -> None:
        """Unknown ID yields an empty chain."""
        assert await get_parent_tree_categories(db_session, "missing") == []
