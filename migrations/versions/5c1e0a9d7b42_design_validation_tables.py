"""design validation tables: designs, vendor_products, design_product_links, audit_log

Revision ID: 5c1e0a9d7b42
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c1e0a9d7b42'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'designs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.BigInteger(), nullable=False),
        sa.Column('content_hash', sa.String(length=64), nullable=False),
        sa.Column('storage_url', sa.String(length=1024), nullable=False),
        sa.Column('storage_key', sa.String(length=512), nullable=False),
        sa.Column('byte_size', sa.Integer(), nullable=False),
        sa.Column('format', sa.String(length=20), nullable=False),
        sa.Column('dimensions', sa.JSON(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('validation_state', sa.String(length=20), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('validated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('validated_by', sa.BigInteger(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('vendor_id', 'content_hash', name='uq_design_vendor_hash'),
    )
    op.create_index('ix_designs_vendor_id', 'designs', ['vendor_id'])
    op.create_index('ix_designs_validation_state', 'designs', ['validation_state'])

    op.create_table(
        'vendor_products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.BigInteger(), nullable=False),
        sa.Column('base_product_id', sa.Integer(), nullable=False),
        sa.Column('design_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('sizes', sa.JSON(), nullable=True),
        sa.Column('colors', sa.JSON(), nullable=True),
        sa.Column('base_name', sa.String(length=255), nullable=True),
        sa.Column('base_price', sa.Integer(), nullable=True),
        sa.Column('base_images', sa.JSON(), nullable=True),
        sa.Column('base_sizes', sa.JSON(), nullable=True),
        sa.Column('post_validation_action', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('is_validated', sa.Boolean(), nullable=False),
        sa.Column('validated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('legacy_design_url', sa.String(length=1024), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['design_id'], ['designs.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_vendor_products_vendor_id', 'vendor_products', ['vendor_id'])
    op.create_index('ix_vendor_products_base_product_id', 'vendor_products', ['base_product_id'])
    op.create_index('ix_vendor_products_design_id', 'vendor_products', ['design_id'])
    op.create_index('ix_vendor_products_status', 'vendor_products', ['status'])

    op.create_table(
        'design_product_links',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('design_id', sa.Integer(), nullable=False),
        sa.Column('vendor_product_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['design_id'], ['designs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['vendor_product_id'], ['vendor_products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('design_id', 'vendor_product_id', name='uq_design_product_link'),
    )
    op.create_index('ix_design_product_links_design_id', 'design_product_links', ['design_id'])
    op.create_index(
        'ix_design_product_links_vendor_product_id', 'design_product_links', ['vendor_product_id']
    )

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('actor_id', sa.BigInteger(), nullable=True),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('design_id', sa.Integer(), nullable=True),
        sa.Column('vendor_product_id', sa.Integer(), nullable=True),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['design_id'], ['designs.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['vendor_product_id'], ['vendor_products.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_audit_log_actor_id', 'audit_log', ['actor_id'])
    op.create_index('ix_audit_log_design_id', 'audit_log', ['design_id'])
    op.create_index('ix_audit_log_vendor_product_id', 'audit_log', ['vendor_product_id'])
    op.create_index('ix_audit_log_created_at', 'audit_log', ['created_at'])


def downgrade():
    op.drop_table('audit_log')
    op.drop_table('design_product_links')
    op.drop_table('vendor_products')
    op.drop_table('designs')
