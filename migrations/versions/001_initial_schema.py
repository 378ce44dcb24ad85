"""
Alembic migration: Initial storefront schema.

Creates the categories, products, customers, orders and order_items tables
with foreign keys, indexes and check constraints. Product stock is
constrained to be non-negative.

Revision ID: 001
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Revision identifiers, used by Alembic
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create all storefront tables.
    """
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.Text(), nullable=False, comment='Category name'),
        sa.Column('description', sa.Text(), nullable=True, comment='Category description'),
        sa.PrimaryKeyConstraint('id', name='pk_categories'),
        comment='Product categories',
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.Text(), nullable=False, comment='Product name'),
        sa.Column('description', sa.Text(), nullable=True, comment='Product description'),
        sa.Column('sku', sa.Text(), nullable=False, comment='Unique stock keeping unit'),
        sa.Column(
            'price',
            sa.Numeric(precision=10, scale=2),
            nullable=False,
            comment='Current unit price',
        ),
        sa.Column('image_url', sa.Text(), nullable=True, comment='Product image URL'),
        sa.Column('category_id', sa.Integer(), nullable=True, comment='Category reference'),
        sa.Column(
            'stock',
            sa.Integer(),
            nullable=False,
            server_default='0',
            comment='Units on hand',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_products'),
        sa.ForeignKeyConstraint(
            ['category_id'],
            ['categories.id'],
            name='fk_products_category_id',
        ),
        sa.UniqueConstraint('sku', name='uq_products_sku'),
        sa.CheckConstraint('stock >= 0', name='ck_products_stock_non_negative'),
        sa.CheckConstraint('price >= 0', name='ck_products_price_non_negative'),
        comment='Catalog products with stock levels',
    )
    op.create_index('ix_products_category_id', 'products', ['category_id'])

    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.Text(), nullable=False, comment='Customer name'),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_customers'),
        comment='Customer registry',
    )

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=True, comment='Customer placing the order'),
        sa.Column(
            'order_date',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('now()'),
            comment='Timestamp when the order was persisted',
        ),
        sa.Column(
            'status',
            sa.String(length=20),
            nullable=False,
            server_default='pending',
            comment='Current order status',
        ),
        sa.Column(
            'total',
            sa.Numeric(precision=10, scale=2),
            nullable=False,
            comment='Order total amount',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_orders'),
        sa.ForeignKeyConstraint(
            ['customer_id'],
            ['customers.id'],
            name='fk_orders_customer_id',
            ondelete='SET NULL',
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'processing', 'completed', 'cancelled')",
            name='order_status',
        ),
        sa.CheckConstraint('total >= 0', name='ck_orders_total_non_negative'),
        comment='Customer orders',
    )
    op.create_index('ix_orders_customer_id', 'orders', ['customer_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False, comment='Owning order'),
        sa.Column('product_id', sa.Integer(), nullable=False, comment='Ordered product'),
        sa.Column('quantity', sa.Integer(), nullable=False, comment='Units ordered'),
        sa.Column(
            'unit_price',
            sa.Numeric(precision=10, scale=2),
            nullable=False,
            comment='Unit price snapshot at order time',
        ),
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
        ),
        sa.CheckConstraint('quantity > 0', name='ck_order_items_quantity_positive'),
        sa.CheckConstraint('unit_price >= 0', name='ck_order_items_unit_price_non_negative'),
        comment='Order line items',
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('ix_order_items_product_id', 'order_items', ['product_id'])


def downgrade() -> None:
    """
    Drop all storefront tables.
    """
    op.drop_index('ix_order_items_product_id', table_name='order_items')
    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_table('order_items')

    op.drop_index('ix_orders_status', table_name='orders')
    op.drop_index('ix_orders_customer_id', table_name='orders')
    op.drop_table('orders')

    op.drop_table('customers')

    op.drop_index('ix_products_category_id', table_name='products')
    op.drop_table('products')

    op.drop_table('categories')
