"""variant matrix schema: products, attributes, variants, locations, inventory

Revision ID: b7c1d2e3f4a5
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b7c1d2e3f4a5'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('summary', sa.Text()),
        sa.Column('content', sa.Text()),
        sa.Column('vendor', sa.String(255)),
        sa.Column('product_type', sa.String(255)),
        sa.Column('tags', sa.JSON()),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('stock_recorded_at', sa.DateTime(timezone=True)),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index('ix_products_status', 'products', ['status'])

    op.create_table(
        'locations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('code', sa.String(50)),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('default_location', sa.Boolean(), nullable=False),
        sa.Column('inventory_management', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True)),
    )
    op.create_index('ix_locations_code', 'locations', ['code'], unique=True)

    op.create_table(
        'product_attributes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('values', sa.JSON()),
        sa.Column('value_keys', sa.JSON()),
        sa.Column('position', sa.Integer()),
    )
    op.create_index('ix_product_attributes_product_id', 'product_attributes', ['product_id'])

    op.create_table(
        'variants',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('key', sa.String(255), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('option1', sa.String(100)),
        sa.Column('option2', sa.String(100)),
        sa.Column('option3', sa.String(100)),
        sa.Column('sku', sa.String(100)),
        sa.Column('barcode', sa.String(100)),
        sa.Column('price', sa.Numeric(12, 2)),
        sa.Column('compare_at_price', sa.Numeric(12, 2)),
        sa.Column('cost_price', sa.Numeric(12, 2)),
        sa.Column('tracked', sa.Boolean(), nullable=False),
        sa.Column('lot_management', sa.Boolean(), nullable=False),
        sa.Column('requires_shipping', sa.Boolean(), nullable=False),
        sa.Column('position', sa.Integer()),
        sa.Column('weight', sa.Float()),
        sa.Column('weight_unit', sa.String(10)),
        sa.Column('unit', sa.String(50)),
        sa.Column('image', sa.JSON()),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index('ix_variants_product_id', 'variants', ['product_id'])
    op.create_index('ix_variants_sku', 'variants', ['sku'])

    op.create_table(
        'inventory_levels',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('variant_id', sa.Integer(), sa.ForeignKey('variants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('location_id', sa.Integer(), sa.ForeignKey('locations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('available', sa.Integer(), nullable=False),
        sa.Column('on_hand', sa.Integer(), nullable=False),
        sa.Column('recorded_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
        sa.UniqueConstraint('variant_id', 'location_id', name='uq_inventory_level'),
    )
    op.create_index('ix_inventory_levels_variant_id', 'inventory_levels', ['variant_id'])
    op.create_index('ix_inventory_levels_location_id', 'inventory_levels', ['location_id'])

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('admin_id', sa.BigInteger()),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='SET NULL')),
        sa.Column('payload', sa.JSON()),
        sa.Column('created_at', sa.DateTime(timezone=True)),
    )
    op.create_index('ix_audit_log_admin_id', 'audit_log', ['admin_id'])
    op.create_index('ix_audit_log_product_id', 'audit_log', ['product_id'])
    op.create_index('ix_audit_log_created_at', 'audit_log', ['created_at'])


def downgrade():
    op.drop_table('audit_log')
    op.drop_table('inventory_levels')
    op.drop_table('variants')
    op.drop_table('product_attributes')
    op.drop_table('locations')
    op.drop_table('products')
