"""Tests for the category page service.

These run the whole resolution pipeline against a SQLite catalog.
"""

from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from builders import make_attribute_filter, make_attribute_value, make_product, option_named
from category_api.application.category_service import CategoryService
from category_api.catalog.models import (
    Category,
    Filter,
    FilterValue,
    ProductGallery,
    ProductOption,
    Tag,
)
from category_api.domain.exceptions import ErrorKind


def _ids(options: list[ProductOption]) -> set[str]:
    return {option.id for option in options}


@pytest.fixture
def service(session_factory: async_sessionmaker[AsyncSession]) -> CategoryService:
    """Create service over the test database."""
    return CategoryService(session_factory, request_id="test-request")


# ============================================================================
# Option Resolution
# ============================================================================


class TestOptionResolution:
    """Tests for the resolved option list."""

    @pytest.mark.asyncio
    async def test_fallback_to_direct_products(
        self, db_session: AsyncSession, service: CategoryService
    ) -> None:
        """Without facet tokens every option of the category is returned."""
        p1 = make_product("P1", "O1", "O2")
        p2 = make_product("P2", "O3")
        shoes = Category(name_ua="Shoes", url="shoes", products=[p1, p2])
        db_session.add(shoes)
        await db_session.commit()

        result = await service.get_category_page("shoes")

        assert result.success
        assert result.page is not None
        assert result.page.category.id == shoes.id
        assert _ids(result.page.options) == _ids(p1.options + p2.options)
        assert len(result.page.options) == 3

    @pytest.mark.asyncio
    async def test_fallback_includes_child_products(
        self, db_session: AsyncSession, service: CategoryService
    ) -> None:
        """Products of descendant categories are part of the scope."""
        direct = make_product("Direct", "O1")
        nested = make_product("Nested", "O2")
        db_session.add(
            Category(name_ua="Shoes", url="shoes", products=[direct], child_products=[nested])
        )
        await db_session.commit()

        result = await service.get_category_page("shoes")

        assert _ids(result.page.options) == _ids(direct.options + nested.options)

    @pytest.mark.asyncio
    async def test_attribute_and_explicit_selection(
        self, db_session: AsyncSession, service: CategoryService
    ) -> None:
        """Attribute and explicit matches replace the category scope."""
        unrelated = make_product("Unrelated", "O1", "O2")
        colored = make_product("Colored", "O5")
        make_attribute_value(colored, "Color")
        sized = make_product("Sized", "O6")
        shoes = Category(name_ua="Shoes", url="shoes", products=[unrelated])
        red = make_attribute_filter("red", "Color", shoes)
        db_session.add_all([shoes, colored, sized, red])
        await db_session.flush()
        db_session.add(FilterValue(url="42", option_value=option_named(sized, "O6").id))
        await db_session.commit()

        result = await service.get_category_page("shoes__color_red__size_42")

        assert result.success
        assert _ids(result.page.options) == {
            option_named(colored, "O5").id,
            option_named(sized, "O6").id,
        }

    @pytest.mark.asyncio
    async def test_selections_are_unioned(
        self, db_session: AsyncSession, service: CategoryService
    ) -> None:
        """Two disjoint selections resolve to both option sets."""
        red_product = make_product("Red", "R1")
        make_attribute_value(red_product, "red")
        blue_product = make_product("Blue", "B1", "B2")
        make_attribute_value(blue_product, "blue")
        shoes = Category(name_ua="Shoes", url="shoes", products=[red_product, blue_product])
        db_session.add_all([
            shoes,
            make_attribute_filter("red", "red", shoes),
            make_attribute_filter("blue", "blue", shoes),
        ])
        await db_session.commit()

        red_only = await service.get_category_page("shoes__color_red")
        both = await service.get_category_page("shoes__color_red__color_blue")

        assert _ids(red_only.page.options) == _ids(red_product.options)
        assert _ids(both.page.options) == _ids(red_product.options + blue_product.options)

    @pytest.mark.asyncio
    async def test_unmatched_tokens_fall_back(
        self, db_session: AsyncSession, service: CategoryService
    ) -> None:
        """Tokens without filter values behave like no selection."""
        product = make_product("P1", "O1")
        db_session.add(Category(name_ua="Shoes", url="shoes", products=[product]))
        await db_session.commit()

        result = await service.get_category_page("shoes__color_unknown")

        assert _ids(result.page.options) == _ids(product.options)

    @pytest.mark.asyncio
    async def test_attribute_match_without_products_falls_back(
        self, db_session: AsyncSession, service: CategoryService
    ) -> None:
        """A filter value matching no product falls back to the scope."""
        product = make_product("P1", "O1")
        shoes = Category(name_ua="Shoes", url="shoes", products=[product])
        db_session.add_all([shoes, make_attribute_filter("red", "nothing-has-this", shoes)])
        await db_session.commit()

        result = await service.get_category_page("shoes__color_red")

        assert _ids(result.page.options) == _ids(product.options)

    @pytest.mark.asyncio
    async def test_options_are_deduplicated(
        self, db_session: AsyncSession, service: CategoryService
    ) -> None:
        """An option reachable several ways appears once."""
        product = make_product("P1", "O1", "O2")
        make_attribute_value(product, "red")
        make_attribute_value(product, "red")
        shoes = Category(
            name_ua="Shoes", url="shoes", products=[product], child_products=[product]
        )
        db_session.add_all([shoes, make_attribute_filter("red", "red", shoes)])
        await db_session.commit()

        fallback = await service.get_category_page("shoes")
        selected = await service.get_category_page("shoes__color_red")

        for result in (fallback, selected):
            ids = [option.id for option in result.page.options]
            assert len(ids) == len(set(ids)) == 2

    @pytest.mark.asyncio
    async def test_options_are_hydrated(
        self, db_session: AsyncSession, service: CategoryService
    ) -> None:
        """Resolved options carry their product graph."""
        product = make_product("P1", "O1")
        shoes = Category(name_ua="Shoes", url="shoes", products=[product])
        product.main_category = shoes
        db_session.add(shoes)
        await db_session.commit()

        result = await service.get_category_page("shoes")
        payload = result.page.to_dict()["options"][0]

        assert payload["product"]["id"] == product.id
        assert payload["product"]["main_category"]["id"] == shoes.id
        assert [c["id"] for c in payload["product"]["categories"]] == [shoes.id]
        assert payload["product"]["gallery"] == []


# ============================================================================
# Soft Deletion
# ============================================================================


class TestSoftDeletion:
    """Soft-deleted records never reach a category page."""

    @pytest.mark.asyncio
    async def test_deleted_category_is_not_found(
        self, db_session: AsyncSession, service: CategoryService, deleted_at: datetime
    ) -> None:
        """A deleted category resolves like a missing one."""
        db_session.add(Category(name_ua="Shoes", url="shoes", deleted_at=deleted_at))
        await db_session.commit()

        result = await service.get_category_page("shoes")

        assert result.success is False
        assert result.error_kind is ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_live_category_wins_over_deleted_duplicate(
        self, db_session: AsyncSession, service: CategoryService, deleted_at: datetime
    ) -> None:
        """Slug lookup ignores deleted categories sharing the slug."""
        live = Category(name_ua="Live", url="shoes")
        db_session.add_all([Category(name_ua="Old", url="shoes", deleted_at=deleted_at), live])
        await db_session.commit()

        result = await service.get_category_page("shoes")

        assert result.page.category.id == live.id

    @pytest.mark.asyncio
    async def test_deleted_products_and_options_excluded_from_fallback(
        self, db_session: AsyncSession, service: CategoryService, deleted_at: datetime
    ) -> None:
        """Fallback drops deleted options and every option of deleted products."""
        live = make_product("Live", "O1", "O2")
        option_named(live, "O2").deleted_at = deleted_at
        gone = make_product("Gone", "O3", deleted_at=deleted_at)
        nested_gone = make_product("NestedGone", "O4", deleted_at=deleted_at)
        db_session.add(
            Category(
                name_ua="Shoes",
                url="shoes",
                products=[live, gone],
                child_products=[nested_gone],
            )
        )
        await db_session.commit()

        result = await service.get_category_page("shoes")

        assert _ids(result.page.options) == {option_named(live, "O1").id}
        assert [p["name_ua"] for p in result.page.to_dict()["category"]["products"]] == ["Live"]

    @pytest.mark.asyncio
    async def test_deleted_records_excluded_from_selection(
        self, db_session: AsyncSession, service: CategoryService, deleted_at: datetime
    ) -> None:
        """Attribute and explicit paths drop deleted products and options."""
        gone = make_product("Gone", "G1", deleted_at=deleted_at)
        make_attribute_value(gone, "red")
        live = make_product("Live", "L1", "L2")
        make_attribute_value(live, "red")
        option_named(live, "L2").deleted_at = deleted_at
        orphan = make_product("Orphan", "X1", deleted_at=deleted_at)
        shoes = Category(name_ua="Shoes", url="shoes")
        db_session.add_all([shoes, gone, live, orphan, make_attribute_filter("red", "red", shoes)])
        await db_session.flush()
        db_session.add(FilterValue(url="x1", option_value=option_named(orphan, "X1").id))
        await db_session.commit()

        result = await service.get_category_page("shoes__color_red__pick_x1")

        assert _ids(result.page.options) == {option_named(live, "L1").id}

    @pytest.mark.asyncio
    async def test_deleted_explicit_option_does_not_fall_back(
        self, db_session: AsyncSession, service: CategoryService, deleted_at: datetime
    ) -> None:
        """A deleted explicit option of a live product yields no options."""
        picked = make_product("Picked", "Gone", "Sibling")
        option_named(picked, "Gone").deleted_at = deleted_at
        other = make_product("Other", "O1")
        db_session.add(Category(name_ua="Shoes", url="shoes", products=[picked, other]))
        await db_session.flush()
        db_session.add(FilterValue(url="gone", option_value=option_named(picked, "Gone").id))
        await db_session.commit()

        result = await service.get_category_page("shoes__pick_gone")

        assert result.success
        assert result.page.options == []

    @pytest.mark.asyncio
    async def test_deleted_option_of_child_product_excluded(
        self, db_session: AsyncSession, service: CategoryService, deleted_at: datetime
    ) -> None:
        """Deleted options under a live child-category product are dropped."""
        nested = make_product("Nested", "Kept", "Gone")
        option_named(nested, "Gone").deleted_at = deleted_at
        db_session.add(Category(name_ua="Shoes", url="shoes", child_products=[nested]))
        await db_session.commit()

        result = await service.get_category_page("shoes")

        assert _ids(result.page.options) == {option_named(nested, "Kept").id}
        child_payload = result.page.to_dict()["category"]["child_products"][0]
        assert [o["name_ua"] for o in child_payload["options"]] == ["Kept"]

    @pytest.mark.asyncio
    async def test_deleted_main_category_is_hidden(
        self, db_session: AsyncSession, service: CategoryService, deleted_at: datetime
    ) -> None:
        """A deleted main category is reported as missing."""
        old = Category(name_ua="Old", url="old", deleted_at=deleted_at)
        product = make_product("P1", "O1", main_category=old)
        db_session.add(Category(name_ua="Shoes", url="shoes", products=[product]))
        await db_session.commit()

        result = await service.get_category_page("shoes")
        payload = result.page.to_dict()["options"][0]["product"]

        assert payload["main_category"] is None
        assert payload["categories"] != []
        assert all(c["url"] != "old" for c in payload["categories"])


# ============================================================================
# Page Extras
# ============================================================================


class TestViewedWith:
    """Tests for options of viewed-with categories."""

    @pytest.mark.asyncio
    async def test_collects_and_orders_options(
        self, db_session: AsyncSession, service: CategoryService, deleted_at: datetime
    ) -> None:
        """Options of related categories are ordered and carry their product."""
        sock = make_product("Sock", "Sized", "Main")
        option_named(sock, "Sized").type = "size"
        option_named(sock, "Main").type = "main"
        sock.gallery = [
            ProductGallery(image="https://cdn.example.com/sock.jpg"),
            ProductGallery(image="https://cdn.example.com/old.jpg", deleted_at=deleted_at),
        ]
        socks = Category(name_ua="Socks", url="socks", products=[sock])
        db_session.add(Category(name_ua="Shoes", url="shoes", categories_viewed_with=[socks]))
        await db_session.commit()

        result = await service.get_category_page("shoes")

        assert [o.name_ua for o in result.page.options_viewed_with] == ["Main", "Sized"]
        viewed = result.page.to_dict()["optionsViewedWith"]
        assert all(o["product"]["id"] == sock.id for o in viewed)
        for option in viewed:
            product = option["product"]
            assert {o["name_ua"] for o in product["options"]} == {"Main", "Sized"}
            assert [g["image"] for g in product["gallery"]] == ["https://cdn.example.com/sock.jpg"]

    @pytest.mark.asyncio
    async def test_category_payload_unaffected_by_overlap(
        self, db_session: AsyncSession, service: CategoryService
    ) -> None:
        """Products shared with a related category serialize like the others."""
        shared = make_product("Shared", "S1")
        own = make_product("Own", "O1")
        socks = Category(name_ua="Socks", url="socks", products=[shared])
        db_session.add(
            Category(
                name_ua="Shoes",
                url="shoes",
                products=[shared, own],
                categories_viewed_with=[socks],
            )
        )
        await db_session.commit()

        result = await service.get_category_page("shoes")
        products = result.page.to_dict()["category"]["products"]

        assert {p["name_ua"] for p in products} == {"Shared", "Own"}
        assert [sorted(p) for p in products] == [sorted(products[0])] * 2
        assert all("gallery" not in p for p in products)
        assert result.page.to_dict()["optionsViewedWith"][0]["product"]["gallery"] == []

    @pytest.mark.asyncio
    async def test_keeps_repeats(
        self, db_session: AsyncSession, service: CategoryService
    ) -> None:
        """An option reachable through several paths is repeated."""
        sock = make_product("Sock", "O1")
        socks = Category(name_ua="Socks", url="socks", products=[sock], child_products=[sock])
        db_session.add(Category(name_ua="Shoes", url="shoes", categories_viewed_with=[socks]))
        await db_session.commit()

        result = await service.get_category_page("shoes")

        assert [o.id for o in result.page.options_viewed_with] == [sock.options[0].id] * 2

    @pytest.mark.asyncio
    async def test_skips_deleted_records(
        self, db_session: AsyncSession, service: CategoryService, deleted_at: datetime
    ) -> None:
        """Deleted related categories, products and options are dropped."""
        hidden = Category(
            name_ua="Hidden",
            url="hidden",
            deleted_at=deleted_at,
            products=[make_product("HiddenProduct", "H1")],
        )
        sock = make_product("Sock", "S1", "S2")
        option_named(sock, "S2").deleted_at = deleted_at
        gone = make_product("Gone", "G1", deleted_at=deleted_at)
        socks = Category(name_ua="Socks", url="socks", products=[sock, gone])
        db_session.add(
            Category(name_ua="Shoes", url="shoes", categories_viewed_with=[hidden, socks])
        )
        await db_session.commit()

        result = await service.get_category_page("shoes")

        assert [o.name_ua for o in result.page.options_viewed_with] == ["S1"]

    @pytest.mark.asyncio
    async def test_custom_orderer(
        self, db_session: AsyncSession, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        """The orderer is injectable."""
        sock = make_product("Sock", "A", "B")
        socks = Category(name_ua="Socks", url="socks", products=[sock])
        db_session.add(Category(name_ua="Shoes", url="shoes", categories_viewed_with=[socks]))
        await db_session.commit()

        def by_name_desc(options):
            return sorted(options, key=lambda o: o.name_ua, reverse=True)

        service = CategoryService(session_factory, orderer=by_name_desc)
        result = await service.get_category_page("shoes")

        assert [o.name_ua for o in result.page.options_viewed_with] == ["B", "A"]


class TestFiltersBreadcrumbsTags:
    """Tests for filters, breadcrumbs and tags."""

    @pytest.mark.asyncio
    async def test_only_active_filters_and_values(
        self, db_session: AsyncSession, service: CategoryService
    ) -> None:
        """Inactive filters and values are not listed."""
        shoes = Category(name_ua="Shoes", url="shoes")
        other = Category(name_ua="Hats", url="hats")
        active = Filter(
            name_ua="Color",
            categories=[shoes],
            filter_values=[
                FilterValue(name_ua="Red", url="red"),
                FilterValue(name_ua="Blue", url="blue", status=False),
            ],
        )
        db_session.add_all([
            active,
            Filter(name_ua="Disabled", status=False, categories=[shoes]),
            Filter(name_ua="Elsewhere", categories=[other]),
        ])
        await db_session.commit()

        result = await service.get_category_page("shoes")
        filters = result.page.to_dict()["filters"]

        assert [f["name_ua"] for f in filters] == ["Color"]
        assert [v["name_ua"] for v in filters[0]["filter_values"]] == ["Red"]

    @pytest.mark.asyncio
    async def test_breadcrumbs_root_first(
        self, db_session: AsyncSession, service: CategoryService, deleted_at: datetime
    ) -> None:
        """Breadcrumbs run from the root to the category, skipping deleted ancestors."""
        root = Category(name_ua="Clothing", url="clothing")
        db_session.add(root)
        await db_session.flush()
        removed = Category(name_ua="Footwear", url="footwear", parent_id=root.id, deleted_at=deleted_at)
        db_session.add(removed)
        await db_session.flush()
        db_session.add(Category(name_ua="Shoes", url="shoes", parent_id=removed.id))
        await db_session.commit()

        result = await service.get_category_page("shoes")

        assert [c.url for c in result.page.breadcrumbs] == ["clothing", "shoes"]

    @pytest.mark.asyncio
    async def test_active_tags_sorted_by_name(
        self, db_session: AsyncSession, service: CategoryService
    ) -> None:
        """Only active tags are listed, ordered by name."""
        db_session.add(
            Category(
                name_ua="Shoes",
                url="shoes",
                tags=[
                    Tag(name_ua="Sale", url="sale"),
                    Tag(name_ua="New", url="new"),
                    Tag(name_ua="Hidden", url="hidden", status=False),
                ],
            )
        )
        await db_session.commit()

        result = await service.get_category_page("shoes")

        assert [t.name_ua for t in result.page.tags] == ["New", "Sale"]


# ============================================================================
# Failures
# ============================================================================


class TestFailures:
    """Tests for failed resolutions."""

    @pytest.mark.asyncio
    async def test_category_not_found(self, service: CategoryService) -> None:
        """Unknown slug reports a not-found error."""
        result = await service.get_category_page("nonexistent")

        assert result.success is False
        assert result.page is None
        assert result.error_kind is ErrorKind.NOT_FOUND
        assert result.details == {"url": "nonexistent"}

    @pytest.mark.asyncio
    async def test_missing_slug_is_invalid(self, service: CategoryService) -> None:
        """A URL without a category slug is rejected."""
        result = await service.get_category_page("__color_red")

        assert result.success is False
        assert result.error_kind is ErrorKind.INVALID

    @pytest.mark.asyncio
    async def test_store_failure(self, tmp_path: Path) -> None:
        """Database errors are reported as store failures."""
        engine = create_async_engine(
            f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}",
            poolclass=NullPool,
        )
        service = CategoryService(async_sessionmaker(engine, expire_on_commit=False))

        result = await service.get_category_page("shoes")
        await engine.dispose()

        assert result.success is False
        assert result.error_kind is ErrorKind.STORE_FAILURE

    @pytest.mark.asyncio
    async def test_connection_refused_is_store_failure(self) -> None:
        """Connection errors from the driver are reported as store failures."""
        session_factory = MagicMock(side_effect=ConnectionRefusedError("connection refused"))
        service = CategoryService(session_factory)

        page = await service.get_category_page("shoes")
        cleanup = await service.remove_base64_images()

        assert page.success is False
        assert page.error_kind is ErrorKind.STORE_FAILURE
        assert page.details["error"] == "connection refused"
        assert cleanup.success is False
