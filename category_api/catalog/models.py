"""SQLAlchemy models for the category catalog.

Defines categories, products, options, attributes, filters and galleries.
Records are soft-deleted through ``deleted_at``; filters, filter values and
tags are switched off through ``status``.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    inspect,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from category_api.catalog.selectors import AttributeSelector, FacetSelector, OptionSelector
from category_api.infrastructure.database import Base


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _is_loaded(instance: Any, key: str) -> bool:
    """Check whether a relationship was populated without triggering a load."""
    return key not in inspect(instance).unloaded


# ============================================================================
# Association Tables
# ============================================================================


category_products = Table(
    "category_products",
    Base.metadata,
    Column("category_id", String(36), ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
    Column("product_id", String(36), ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
)

category_child_products = Table(
    "category_child_products",
    Base.metadata,
    Column("category_id", String(36), ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
    Column("product_id", String(36), ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
)

category_viewed_with = Table(
    "category_viewed_with",
    Base.metadata,
    Column("category_id", String(36), ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
    Column("viewed_category_id", String(36), ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)

category_tags = Table(
    "category_tags",
    Base.metadata,
    Column("category_id", String(36), ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)

product_attributes = Table(
    "product_attributes",
    Base.metadata,
    Column("product_id", String(36), ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("attribute_id", String(36), ForeignKey("attributes.id", ondelete="CASCADE"), primary_key=True),
)

filter_categories = Table(
    "filter_categories",
    Base.metadata,
    Column("filter_id", String(36), ForeignKey("filters.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", String(36), ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)


# ============================================================================
# Categories
# ============================================================================


class Category(Base):
    """Product category.

    Attributes:
        id: Unique category identifier.
        name_ua: Display name.
        url: Slug used in category URLs.
        parent_id: Parent category for breadcrumbs (None for root).
        image: Category image URL.
        opengraph_image: OpenGraph preview image URL.
        deleted_at: Soft-delete timestamp.
        products: Products assigned directly to this category.
        child_products: Products of all descendant categories.
        categories_viewed_with: Related categories shown as suggestions.
        tags: Tags attached to this category.
    """

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name_ua: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    url: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    parent_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    opengraph_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    products: Mapped[list["Product"]] = relationship(
        "Product",
        secondary=category_products,
        back_populates="categories",
    )
    child_products: Mapped[list["Product"]] = relationship(
        "Product",
        secondary=category_child_products,
    )
    categories_viewed_with: Mapped[list["Category"]] = relationship(
        "Category",
        secondary=category_viewed_with,
        primaryjoin=lambda: Category.id == category_viewed_with.c.category_id,
        secondaryjoin=lambda: Category.id == category_viewed_with.c.viewed_category_id,
    )
    tags: Mapped[list["Tag"]] = relationship("Tag", secondary=category_tags)

    def __repr__(self) -> str:
        """String representation."""
        return f"<Category(id={self.id}, url={self.url})>"

    @property
    def is_deleted(self) -> bool:
        """Whether the category is soft-deleted."""
        return self.deleted_at is not None

    def to_dict(self, include_related: bool = True, include_viewed_with: bool = True) -> dict:
        """Convert to dictionary.

        Only relationships that were eagerly loaded are included.

        Args:
            include_related: Include product lists and related categories.
            include_viewed_with: Include the viewed-with categories.

        Returns:
            Dictionary representation.
        """
        data: dict[str, Any] = {
            "id": self.id,
            "name_ua": self.name_ua,
            "url": self.url,
            "parent_id": self.parent_id,
            "image": self.image,
            "opengraph_image": self.opengraph_image,
            "deleted_at": _iso(self.deleted_at),
        }
        if not include_related:
            return data

        for key in ("products", "child_products"):
            if _is_loaded(self, key):
                data[key] = [product.to_dict() for product in getattr(self, key)]

        if include_viewed_with and _is_loaded(self, "categories_viewed_with"):
            data["categories_viewed_with"] = [
                category.to_dict(include_viewed_with=False)
                for category in self.categories_viewed_with
            ]

        return data


# ============================================================================
# Products
# ============================================================================


class Product(Base):
    """Product entity in the catalog.

    Attributes:
        id: Unique product identifier.
        name_ua: Product title.
        url: Product page slug.
        opengraph_image: OpenGraph preview image URL.
        main_category_id: Primary category of the product.
        deleted_at: Soft-delete timestamp.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name_ua: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    opengraph_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    main_category_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    options: Mapped[list["ProductOption"]] = relationship(
        "ProductOption",
        back_populates="product",
        cascade="all, delete-orphan",
    )
    attribute_values: Mapped[list["ProductAttributeValue"]] = relationship(
        "ProductAttributeValue",
        back_populates="product",
    )
    attributes: Mapped[list["Attribute"]] = relationship("Attribute", secondary=product_attributes)
    gallery: Mapped[list["ProductGallery"]] = relationship(
        "ProductGallery",
        back_populates="product",
        cascade="all, delete-orphan",
    )
    main_category: Mapped[Optional["Category"]] = relationship(
        "Category",
        foreign_keys=[main_category_id],
    )
    categories: Mapped[list["Category"]] = relationship(
        "Category",
        secondary=category_products,
        back_populates="products",
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Product(id={self.id}, name={self.name_ua[:30]})>"

    @property
    def is_deleted(self) -> bool:
        """Whether the product is soft-deleted."""
        return self.deleted_at is not None

    def to_dict(self) -> dict:
        """Convert to dictionary.

        The main category is a many-to-one reference and is resolved from
        the identity map without a liveness predicate, so a deleted main
        category is reported as None here.

        Returns:
            Dictionary representation.
        """
        data: dict[str, Any] = {
            "id": self.id,
            "name_ua": self.name_ua,
            "url": self.url,
            "opengraph_image": self.opengraph_image,
            "main_category_id": self.main_category_id,
            "deleted_at": _iso(self.deleted_at),
        }

        if _is_loaded(self, "options"):
            data["options"] = [option.to_dict(include_product=False) for option in self.options]
        if _is_loaded(self, "attribute_values"):
            data["attribute_values"] = [value.to_dict() for value in self.attribute_values]
        if _is_loaded(self, "attributes"):
            data["attributes"] = [attribute.to_dict() for attribute in self.attributes]
        if _is_loaded(self, "gallery"):
            data["gallery"] = [image.to_dict() for image in self.gallery]
        if _is_loaded(self, "main_category"):
            main = self.main_category
            data["main_category"] = (
                main.to_dict(include_related=False)
                if main is not None and not main.is_deleted
                else None
            )
        if _is_loaded(self, "categories"):
            data["categories"] = [
                category.to_dict(include_related=False) for category in self.categories
            ]

        return data


class ProductOption(Base):
    """Purchasable product option (a size/color combination, etc.).

    Attributes:
        id: Unique option identifier.
        product_id: Owning product.
        name_ua: Option name.
        type: Option type used for display ordering.
        sku: Stock Keeping Unit.
        price: Price in minor currency units.
        deleted_at: Soft-delete timestamp.
    """

    __tablename__ = "product_options"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name_ua: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    sku: Mapped[str | None] = mapped_column(String(100), nullable=True)
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    product: Mapped["Product"] = relationship("Product", back_populates="options")

    def __repr__(self) -> str:
        """String representation."""
        return f"<ProductOption(id={self.id}, name={self.name_ua})>"

    def to_dict(self, include_product: bool = True) -> dict:
        """Convert to dictionary.

        Args:
            include_product: Include the owning product when it was loaded.

        Returns:
            Dictionary representation.
        """
        data: dict[str, Any] = {
            "id": self.id,
            "product_id": self.product_id,
            "name_ua": self.name_ua,
            "type": self.type,
            "sku": self.sku,
            "price": self.price,
            "deleted_at": _iso(self.deleted_at),
        }
        if include_product and _is_loaded(self, "product") and self.product is not None:
            data["product"] = self.product.to_dict()
        return data


class Attribute(Base):
    """Product attribute definition (e.g. "Color")."""

    __tablename__ = "attributes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name_ua: Mapped[str] = mapped_column(String(255), nullable=False)

    def to_dict(self) -> dict:
        return {"id": self.id, "name_ua": self.name_ua}


class ProductAttributeValue(Base):
    """Attribute value carried by a product.

    Filter values with an attribute payload are matched against ``name_ua``.

    Attributes:
        id: Unique identifier.
        name_ua: Value name.
        product_id: Owning product (may be missing for orphaned values).
        attribute_id: Attribute definition this value belongs to.
    """

    __tablename__ = "product_attribute_values"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name_ua: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    product_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    attribute_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("attributes.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Relationships
    product: Mapped[Optional["Product"]] = relationship("Product", back_populates="attribute_values")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name_ua": self.name_ua,
            "product_id": self.product_id,
            "attribute_id": self.attribute_id,
        }


class ProductGallery(Base):
    """Product gallery image."""

    __tablename__ = "product_galleries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    product: Mapped["Product"] = relationship("Product", back_populates="gallery")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "image": self.image,
            "deleted_at": _iso(self.deleted_at),
        }


# ============================================================================
# Filters
# ============================================================================


class Filter(Base):
    """Facet shown on category pages.

    Attributes:
        id: Unique filter identifier.
        name_ua: Display name (e.g. "Color").
        status: Whether the filter is active.
        filter_values: Selectable values of this filter.
        categories: Categories the filter is attached to.
    """

    __tablename__ = "filters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name_ua: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    filter_values: Mapped[list["FilterValue"]] = relationship(
        "FilterValue",
        back_populates="filter",
        cascade="all, delete-orphan",
    )
    categories: Mapped[list["Category"]] = relationship("Category", secondary=filter_categories)

    def __repr__(self) -> str:
        """String representation."""
        return f"<Filter(id={self.id}, name={self.name_ua})>"

    def to_dict(self) -> dict:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        data: dict[str, Any] = {
            "id": self.id,
            "name_ua": self.name_ua,
            "status": self.status,
        }
        if _is_loaded(self, "filter_values"):
            data["filter_values"] = [value.to_dict() for value in self.filter_values]
        return data


class FilterValue(Base):
    """One selectable value of a filter.

    A value carries at most one payload: ``attribute_value`` (an attribute
    value name) or ``option_value`` (an option id). Use ``selector`` to read
    it as a typed variant. A value with neither payload selects nothing.

    Attributes:
        id: Unique identifier.
        filter_id: Owning filter.
        name_ua: Display name.
        status: Whether the value is active.
        url: Token used in category URLs.
        attribute_value: Attribute value name payload.
        option_value: Option id payload.
    """

    __tablename__ = "filter_values"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    filter_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("filters.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    name_ua: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    url: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    attribute_value: Mapped[str | None] = mapped_column(String(255), nullable=True)
    option_value: Mapped[str | None] = mapped_column(String(36), nullable=True)

    # Relationships
    filter: Mapped[Optional["Filter"]] = relationship("Filter", back_populates="filter_values")

    __table_args__ = (
        CheckConstraint(
            "attribute_value IS NULL OR option_value IS NULL",
            name="ck_filter_values_single_payload",
        ),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<FilterValue(id={self.id}, url={self.url})>"

    @validates("attribute_value", "option_value")
    def _validate_single_payload(self, key: str, value: str | None) -> str | None:
        other = "option_value" if key == "attribute_value" else "attribute_value"
        if value is not None and getattr(self, other) is not None:
            raise ValueError(
                "FilterValue carries either attribute_value or option_value, not both"
            )
        return value

    @property
    def selector(self) -> FacetSelector | None:
        """Typed payload of this value, or None when it selects nothing."""
        if self.attribute_value:
            return AttributeSelector(name=self.attribute_value)
        if self.option_value:
            return OptionSelector(option_id=self.option_value)
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        return {
            "id": self.id,
            "filter_id": self.filter_id,
            "name_ua": self.name_ua,
            "status": self.status,
            "url": self.url,
            "attribute_value": self.attribute_value,
            "option_value": self.option_value,
        }


# ============================================================================
# Tags
# ============================================================================


class Tag(Base):
    """Tag linking a category to landing pages."""

    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name_ua: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name_ua": self.name_ua,
            "url": self.url,
            "status": self.status,
        }
