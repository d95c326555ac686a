"""
Alembic migration: Add collections, bundles and custom frame options.

Creates the collection and bundle tables with their product membership
tables, and the option table behind the custom frame builder.

Revision ID: 002
Revises: 001
Create Date: 2026-10-19 15:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# Revision identifiers, used by Alembic
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        'id',
        postgresql.UUID(as_uuid=True),
        nullable=False,
        server_default=sa.text('gen_random_uuid()'),
        comment='Unique identifier for the record',
    )


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column(
            'created_at',
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text('CURRENT_TIMESTAMP'),
            comment='Timestamp when record was created',
        ),
        sa.Column(
            'updated_at',
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text('CURRENT_TIMESTAMP'),
            comment='Timestamp when record was last updated',
        ),
    ]


def _membership_table(name: str, parent: str, parent_column: str) -> None:
    op.create_table(
        name,
        _id_column(),
        sa.Column(parent_column, postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('product_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            'created_at',
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text('CURRENT_TIMESTAMP'),
        ),
        sa.PrimaryKeyConstraint('id', name=f'pk_{name}'),
        sa.ForeignKeyConstraint(
            [parent_column],
            [f'{parent}.id'],
            name=f'fk_{name}_{parent_column}',
            ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['product_id'],
            ['products.id'],
            name=f'fk_{name}_product_id',
            ondelete='CASCADE',
        ),
    )
    op.create_index(f'ix_{name}_{parent_column}', name, [parent_column])
    op.create_index(f'ix_{name}_product_id', name, ['product_id'])


def upgrade() -> None:
    """
    Upgrade database schema with merchandising and custom frame tables.
    """
    # Collections
    op.create_table(
        'collections',
        _id_column(),
        sa.Column('name', sa.String(length=255), nullable=False, comment='Collection display name'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=1000), nullable=True),
        sa.Column(
            'featured',
            sa.Boolean(),
            nullable=False,
            server_default=sa.text('false'),
            comment='Highlighted on the storefront',
        ),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint('id', name='pk_collections'),
        comment='Curated product collections',
    )

    _membership_table('product_collections', 'collections', 'collection_id')
    op.create_unique_constraint(
        'uq_product_collections_collection_product',
        'product_collections',
        ['collection_id', 'product_id'],
    )

    # Bundles
    op.create_table(
        'bundles',
        _id_column(),
        sa.Column('name', sa.String(length=255), nullable=False, comment='Bundle display name'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=1000), nullable=True),
        sa.Column(
            'discount_percentage',
            sa.Numeric(precision=5, scale=2),
            nullable=False,
            server_default='0',
            comment='Percent off the summed product prices',
        ),
        sa.Column(
            'featured',
            sa.Boolean(),
            nullable=False,
            server_default=sa.text('false'),
            comment='Highlighted on the storefront',
        ),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint('id', name='pk_bundles'),
        sa.CheckConstraint(
            'discount_percentage >= 0 AND discount_percentage <= 100',
            name='ck_bundles_discount_percentage_range',
        ),
        comment='Discounted product bundles',
    )

    _membership_table('bundle_products', 'bundles', 'bundle_id')
    op.create_unique_constraint(
        'uq_bundle_products_bundle_product',
        'bundle_products',
        ['bundle_id', 'product_id'],
    )

    # Custom frame builder options
    op.create_table(
        'custom_frame_options',
        _id_column(),
        sa.Column(
            'category',
            sa.String(length=50),
            nullable=False,
            comment='Builder step the option belongs to',
        ),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'price_modifier',
            sa.Numeric(precision=10, scale=2),
            nullable=False,
            server_default='0',
            comment='Amount added to the quote',
        ),
        sa.Column('image_url', sa.String(length=1000), nullable=True),
        sa.Column('available', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint('id', name='pk_custom_frame_options'),
        sa.CheckConstraint(
            "category IN ('material', 'size', 'color', 'finish')",
            name='ck_custom_frame_options_category',
        ),
        comment='Options offered by the custom frame builder',
    )
    op.create_index(
        'ix_custom_frame_options_category_sort',
        'custom_frame_options',
        ['category', 'sort_order'],
    )


def downgrade() -> None:
    """
    Downgrade database schema by dropping merchandising and custom frame tables.
    """
    op.drop_index('ix_custom_frame_options_category_sort', table_name='custom_frame_options')
    op.drop_table('custom_frame_options')

    op.drop_index('ix_bundle_products_product_id', table_name='bundle_products')
    op.drop_index('ix_bundle_products_bundle_id', table_name='bundle_products')
    op.drop_table('bundle_products')
    op.drop_table('bundles')

    op.drop_index('ix_product_collections_product_id', table_name='product_collections')
    op.drop_index('ix_product_collections_collection_id', table_name='product_collections')
    op.drop_table('product_collections')
    op.drop_table('collections')
