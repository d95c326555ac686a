"""
Alembic migration: Create storefront schema.

Creates the catalogue, cart, wishlist, address, profile, role and order
tables together with the order status history log. Enum types, check
constraints and indexes mirror the ORM models.

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# Revision identifiers, used by Alembic
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ORDER_STATUSES = (
    'pending',
    'confirmed',
    'processing',
    'packed',
    'shipped',
    'out_for_delivery',
    'delivered',
    'cancelled',
    'refund_requested',
    'refunded',
)

order_status_enum = postgresql.ENUM(*ORDER_STATUSES, name='order_status', create_type=False)
payment_method_enum = postgresql.ENUM('cod', 'upi', 'card', name='payment_method', create_type=False)
payment_status_enum = postgresql.ENUM(
    'pending', 'paid', 'failed', 'refunded', name='payment_status', create_type=False
)
app_role_enum = postgresql.ENUM('admin', 'customer', name='app_role', create_type=False)


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


def upgrade() -> None:
    """
    Upgrade database schema to the initial storefront layout.
    """
    bind = op.get_bind()
    for enum_type in (order_status_enum, payment_method_enum, payment_status_enum, app_role_enum):
        enum_type.create(bind, checkfirst=True)

    # Products
    op.create_table(
        'products',
        _id_column(),
        sa.Column('name', sa.String(length=255), nullable=False, comment='Product display name'),
        sa.Column('description', sa.Text(), nullable=True, comment='Product description'),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False, comment='Unit price'),
        sa.Column('category', sa.String(length=100), nullable=True, comment='Product category'),
        sa.Column('material', sa.String(length=100), nullable=True),
        sa.Column('size', sa.String(length=100), nullable=True),
        sa.Column('color', sa.String(length=100), nullable=True),
        sa.Column('finish', sa.String(length=100), nullable=True),
        sa.Column('image_url', sa.String(length=1000), nullable=True, comment='Product image URL'),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0', comment='Units in stock'),
        sa.Column(
            'featured',
            sa.Boolean(),
            nullable=False,
            server_default=sa.text('false'),
            comment='Highlighted on the storefront',
        ),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint('id', name='pk_products'),
        sa.CheckConstraint('price >= 0', name='ck_products_price_non_negative'),
        sa.CheckConstraint('stock >= 0', name='ck_products_stock_non_negative'),
        comment='Catalogue of frames offered in the storefront',
    )
    op.create_index('ix_products_name', 'products', ['name'])
    op.create_index('ix_products_category', 'products', ['category'])
    op.create_index('ix_products_category_featured', 'products', ['category', 'featured'])

    # Cart and wishlist
    op.create_table(
        'cart_items',
        _id_column(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False, comment='Cart owner'),
        sa.Column(
            'product_id',
            postgresql.UUID(as_uuid=True),
            nullable=False,
            comment='Product in the cart',
        ),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1', comment='Number of units'),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint('id', name='pk_cart_items'),
        sa.ForeignKeyConstraint(
            ['product_id'],
            ['products.id'],
            name='fk_cart_items_product_id',
            ondelete='CASCADE',
        ),
        sa.UniqueConstraint('user_id', 'product_id', name='uq_cart_items_user_product'),
        sa.CheckConstraint('quantity >= 1', name='ck_cart_items_quantity_positive'),
    )
    op.create_index('ix_cart_items_user_id', 'cart_items', ['user_id'])

    op.create_table(
        'wishlist_items',
        _id_column(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('product_id', postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint('id', name='pk_wishlist_items'),
        sa.ForeignKeyConstraint(
            ['product_id'],
            ['products.id'],
            name='fk_wishlist_items_product_id',
            ondelete='CASCADE',
        ),
        sa.UniqueConstraint('user_id', 'product_id', name='uq_wishlist_items_user_product'),
    )
    op.create_index('ix_wishlist_items_user_id', 'wishlist_items', ['user_id'])

    # Addresses
    op.create_table(
        'addresses',
        _id_column(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False, comment='Address owner'),
        sa.Column('label', sa.String(length=50), nullable=False),
        sa.Column('street', sa.String(length=500), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('state', sa.String(length=100), nullable=False),
        sa.Column('postal_code', sa.String(length=20), nullable=False),
        sa.Column('country', sa.String(length=100), nullable=False, server_default='India'),
        sa.Column(
            'is_default',
            sa.Boolean(),
            nullable=False,
            server_default=sa.text('false'),
            comment='Default shipping address for the user',
        ),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint('id', name='pk_addresses'),
    )
    op.create_index('ix_addresses_user_id', 'addresses', ['user_id'])
    op.create_index('ix_addresses_user_default', 'addresses', ['user_id', 'is_default'])

    # Profiles and roles
    op.create_table(
        'profiles',
        sa.Column(
            'id',
            postgresql.UUID(as_uuid=True),
            nullable=False,
            comment='Identity provider user id',
        ),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('avatar_url', sa.String(length=1000), nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint('id', name='pk_profiles'),
    )
    op.create_index('ix_profiles_full_name', 'profiles', ['full_name'])

    op.create_table(
        'user_roles',
        _id_column(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('role', app_role_enum, nullable=False),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint('id', name='pk_user_roles'),
        sa.UniqueConstraint('user_id', 'role', name='uq_user_roles_user_role'),
    )
    op.create_index('ix_user_roles_user_id', 'user_roles', ['user_id'])

    # Orders
    op.create_table(
        'orders',
        _id_column(),
        sa.Column('order_number', sa.String(length=50), nullable=False, comment='Human-readable order number'),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False, comment='User who placed the order'),
        sa.Column('status', order_status_enum, nullable=False, server_default='pending', comment='Current order status'),
        sa.Column('payment_method', payment_method_enum, nullable=False, comment='Payment method chosen at checkout'),
        sa.Column('payment_status', payment_status_enum, nullable=False, server_default='pending', comment='Current payment status'),
        sa.Column('subtotal', sa.Numeric(precision=10, scale=2), nullable=False, comment='Sum of item price times quantity'),
        sa.Column('discount_amount', sa.Numeric(precision=10, scale=2), nullable=False, server_default='0', comment='Promo discount'),
        sa.Column('shipping_amount', sa.Numeric(precision=10, scale=2), nullable=False, server_default='0', comment='Shipping charges'),
        sa.Column('tax_amount', sa.Numeric(precision=10, scale=2), nullable=False, server_default='0', comment='Tax amount'),
        sa.Column('total', sa.Numeric(precision=10, scale=2), nullable=False, comment='Amount charged'),
        sa.Column('promo_code', sa.String(length=50), nullable=True),
        sa.Column(
            'shipping_address',
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            comment='Shipping address snapshot',
        ),
        sa.Column('tracking_number', sa.String(length=100), nullable=True, comment='Carrier tracking number'),
        sa.Column('idempotency_key', sa.String(length=255), nullable=True, comment='Client supplied checkout idempotency key'),
        sa.Column('confirmed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('shipped_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('delivered_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('refunded_at', sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint('id', name='pk_orders'),
        sa.UniqueConstraint('order_number', name='uq_orders_order_number'),
        sa.UniqueConstraint('user_id', 'idempotency_key', name='uq_orders_user_idempotency_key'),
        sa.CheckConstraint('subtotal >= 0', name='ck_orders_subtotal_non_negative'),
        sa.CheckConstraint('discount_amount >= 0', name='ck_orders_discount_non_negative'),
        sa.CheckConstraint('shipping_amount >= 0', name='ck_orders_shipping_non_negative'),
        sa.CheckConstraint('tax_amount >= 0', name='ck_orders_tax_non_negative'),
        sa.CheckConstraint('total >= 0', name='ck_orders_total_non_negative'),
        comment='Customer orders with status tracking',
    )
    op.create_index('ix_orders_user_id', 'orders', ['user_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_user_created', 'orders', ['user_id', 'created_at'])
    op.create_index('ix_orders_status_created', 'orders', ['status', 'created_at'])

    op.create_table(
        'order_items',
        _id_column(),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            'product_id',
            postgresql.UUID(as_uuid=True),
            nullable=True,
            comment='Ordered product; kept nullable so products can be deleted',
        ),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False, comment='Unit price at purchase time'),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint('id', name='pk_order_items'),
        sa.ForeignKeyConstraint(
            ['order_id'],
            ['orders.id'],
            name='fk_order_items_order_id',
            ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['product_id'],
            ['products.id'],
            name='fk_order_items_product_id',
            ondelete='SET NULL',
        ),
        sa.CheckConstraint('quantity >= 1', name='ck_order_items_quantity_positive'),
        sa.CheckConstraint('price >= 0', name='ck_order_items_price_non_negative'),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    op.create_table(
        'order_status_history',
        _id_column(),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('status', order_status_enum, nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('changed_by', postgresql.UUID(as_uuid=True), nullable=True, comment='User who made the change'),
        sa.Column(
            'created_at',
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text('CURRENT_TIMESTAMP'),
        ),
        sa.PrimaryKeyConstraint('id', name='pk_order_status_history'),
        sa.ForeignKeyConstraint(
            ['order_id'],
            ['orders.id'],
            name='fk_order_status_history_order_id',
            ondelete='CASCADE',
        ),
    )
    op.create_index('ix_order_status_history_order_id', 'order_status_history', ['order_id'])
    op.create_index(
        'ix_order_status_history_order_created',
        'order_status_history',
        ['order_id', 'created_at'],
    )


def downgrade() -> None:
    """
    Downgrade database schema by dropping all storefront tables and types.
    """
    op.drop_index('ix_order_status_history_order_created', table_name='order_status_history')
    op.drop_index('ix_order_status_history_order_id', table_name='order_status_history')
    op.drop_table('order_status_history')

    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_table('order_items')

    op.drop_index('ix_orders_status_created', table_name='orders')
    op.drop_index('ix_orders_user_created', table_name='orders')
    op.drop_index('ix_orders_status', table_name='orders')
    op.drop_index('ix_orders_user_id', table_name='orders')
    op.drop_table('orders')

    op.drop_index('ix_user_roles_user_id', table_name='user_roles')
    op.drop_table('user_roles')

    op.drop_index('ix_profiles_full_name', table_name='profiles')
    op.drop_table('profiles')

    op.drop_index('ix_addresses_user_default', table_name='addresses')
    op.drop_index('ix_addresses_user_id', table_name='addresses')
    op.drop_table('addresses')

    op.drop_index('ix_wishlist_items_user_id', table_name='wishlist_items')
    op.drop_table('wishlist_items')

    op.drop_index('ix_cart_items_user_id', table_name='cart_items')
    op.drop_table('cart_items')

    op.drop_index('ix_products_category_featured', table_name='products')
    op.drop_index('ix_products_category', table_name='products')
    op.drop_index('ix_products_name', table_name='products')
    op.drop_table('products')

    bind = op.get_bind()
    for enum_type in (app_role_enum, payment_status_enum, payment_method_enum, order_status_enum):
        enum_type.drop(bind, checkfirst=True)
