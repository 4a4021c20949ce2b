"""Create catalog tables.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column(name: str = 'id') -> sa.Column:
    return sa.Column(name, sa.String(36), primary_key=True)


def _link_table(name: str, left: tuple[str, str], right: tuple[str, str]) -> None:
    """Create a many-to-many link table with a composite primary key."""
    (left_column, left_table), (right_column, right_table) = left, right
    op.create_table(
        name,
        sa.Column(left_column, sa.String(36),
                  sa.ForeignKey(f'{left_table}.id', ondelete='CASCADE'), primary_key=True),
        sa.Column(right_column, sa.String(36),
                  sa.ForeignKey(f'{right_table}.id', ondelete='CASCADE'), primary_key=True),
    )


def upgrade() -> None:
    """Create catalog, filter and tag tables."""
    # Categories table
    op.create_table(
        'categories',
        _id_column(),
        sa.Column('name_ua', sa.String(255), nullable=False, server_default=''),
        sa.Column('url', sa.String(255), nullable=False, index=True),
        sa.Column('parent_id', sa.String(36),
                  sa.ForeignKey('categories.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('image', sa.Text(), nullable=True),
        sa.Column('opengraph_image', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    )

    # Products and their options
    op.create_table(
        'products',
        _id_column(),
        sa.Column('name_ua', sa.String(500), nullable=False, server_default=''),
        sa.Column('url', sa.String(255), nullable=True),
        sa.Column('opengraph_image', sa.Text(), nullable=True),
        sa.Column('main_category_id', sa.String(36),
                  sa.ForeignKey('categories.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        'product_options',
        _id_column(),
        sa.Column('product_id', sa.String(36),
                  sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name_ua', sa.String(255), nullable=False, server_default=''),
        sa.Column('type', sa.String(50), nullable=True),
        sa.Column('sku', sa.String(100), nullable=True),
        sa.Column('price', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        'product_galleries',
        _id_column(),
        sa.Column('product_id', sa.String(36),
                  sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('image', sa.Text(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    )

    # Attributes
    op.create_table(
        'attributes',
        _id_column(),
        sa.Column('name_ua', sa.String(255), nullable=False),
    )

    op.create_table(
        'product_attribute_values',
        _id_column(),
        sa.Column('name_ua', sa.String(255), nullable=False, index=True),
        sa.Column('product_id', sa.String(36),
                  sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=True, index=True),
        sa.Column('attribute_id', sa.String(36),
                  sa.ForeignKey('attributes.id', ondelete='SET NULL'), nullable=True),
    )

    # Filters
    op.create_table(
        'filters',
        _id_column(),
        sa.Column('name_ua', sa.String(255), nullable=False, server_default=''),
        sa.Column('status', sa.Boolean(), nullable=False, server_default='true'),
    )

    op.create_table(
        'filter_values',
        _id_column(),
        sa.Column('filter_id', sa.String(36),
                  sa.ForeignKey('filters.id', ondelete='CASCADE'), nullable=True, index=True),
        sa.Column('name_ua', sa.String(255), nullable=False, server_default=''),
        sa.Column('status', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('url', sa.String(255), nullable=False, index=True),
        sa.Column('attribute_value', sa.String(255), nullable=True),
        sa.Column('option_value', sa.String(36), nullable=True),
        sa.CheckConstraint(
            'attribute_value IS NULL OR option_value IS NULL',
            name='ck_filter_values_single_payload',
        ),
    )

    # Tags
    op.create_table(
        'tags',
        _id_column(),
        sa.Column('name_ua', sa.String(255), nullable=False, server_default=''),
        sa.Column('url', sa.String(255), nullable=True),
        sa.Column('status', sa.Boolean(), nullable=False, server_default='true'),
    )

    # Link tables
    _link_table('category_products', ('category_id', 'categories'), ('product_id', 'products'))
    _link_table('category_child_products', ('category_id', 'categories'), ('product_id', 'products'))
    _link_table('category_viewed_with', ('category_id', 'categories'), ('viewed_category_id', 'categories'))
    _link_table('category_tags', ('category_id', 'categories'), ('tag_id', 'tags'))
    _link_table('product_attributes', ('product_id', 'products'), ('attribute_id', 'attributes'))
    _link_table('filter_categories', ('filter_id', 'filters'), ('category_id', 'categories'))


def downgrade() -> None:
    """Drop catalog, filter and tag tables."""
    for table in (
        'filter_categories',
        'product_attributes',
        'category_tags',
        'category_viewed_with',
        'category_child_products',
        'category_products',
        'tags',
        'filter_values',
        'filters',
        'product_attribute_values',
        'attributes',
        'product_galleries',
        'product_options',
        'products',
        'categories',
    ):
        op.drop_table(table)
