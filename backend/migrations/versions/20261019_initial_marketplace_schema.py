"""initial marketplace schema

Revision ID: gs0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the complete GreenScore marketplace schema:
- users, projects: sellers/buyers and the sites stock is held at
- materials: listed lots with advisory edit lock and optimistic version counter
- order_requests, orders: FCFS request ledger and confirmed sales
- internal_transfers: project-to-project stock movements
- notifications, transaction_history: user events and the audit trail
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'gs0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _enum(name, *values):
    return sa.Enum(*values, name=name, native_enum=False, length=32)


def upgrade():
    # ============================================================================
    # users / projects
    # ============================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=64), nullable=True),
        sa.Column('user_type', _enum('usertype', 'seller', 'buyer', 'admin'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_users_user_type', 'users', ['user_type'])

    op.create_table(
        'projects',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('seller_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['seller_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_projects_seller_id', 'projects', ['seller_id'])
    op.create_index('ix_projects_seller_name', 'projects', ['seller_id', 'name'])

    # ============================================================================
    # materials: quantity never negative; version_id for optimistic locking
    # ============================================================================
    op.create_table(
        'materials',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('listing_id', sa.String(length=32), nullable=True),
        sa.Column('seller_id', sa.String(length=36), nullable=False),
        sa.Column('project_id', sa.String(length=36), nullable=True),
        sa.Column('material', sa.String(length=255), nullable=False),
        sa.Column('brand', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=128), nullable=False),
        sa.Column('condition', sa.String(length=32), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit', sa.String(length=32), nullable=False),
        sa.Column('price_today', sa.Numeric(12, 2), nullable=False),
        sa.Column('mrp', sa.Numeric(12, 2), nullable=False),
        sa.Column('price_purchased', sa.Numeric(12, 2), nullable=False),
        sa.Column('inventory_value', sa.Numeric(14, 2), nullable=False),
        sa.Column('inventory_type', _enum('inventorytype', 'surplus', 'damaged', 'liquidation',
                                          'new', 'used', 'manual'), nullable=False),
        sa.Column('listing_type', _enum('listingtype', 'resale', 'internal_transfer', 'sold',
                                        'acquired'), nullable=False),
        sa.Column('acquisition_type', _enum('acquisitiontype', 'purchased', 'acquired'), nullable=False),
        sa.Column('specs', sa.Text(), nullable=True),
        sa.Column('photo', sa.String(length=512), nullable=True),
        sa.Column('specs_photo', sa.String(length=512), nullable=True),
        sa.Column('dimensions', sa.String(length=255), nullable=True),
        sa.Column('weight', sa.Float(), nullable=True),
        sa.Column('location_details', sa.String(length=255), nullable=True),
        sa.Column('is_being_edited', sa.Boolean(), nullable=False),
        sa.Column('edited_by', sa.String(length=36), nullable=True),
        sa.Column('edit_started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint('quantity >= 0', name='ck_materials_quantity_non_negative'),
        sa.ForeignKeyConstraint(['seller_id'], ['users.id']),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.ForeignKeyConstraint(['edited_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('listing_id'),
    )
    op.create_index('ix_materials_seller_id', 'materials', ['seller_id'])
    op.create_index('ix_materials_project_id', 'materials', ['project_id'])
    op.create_index('ix_materials_listing_type', 'materials', ['listing_type'])
    op.create_index('ix_materials_seller_project', 'materials', ['seller_id', 'project_id'])
    op.create_index('ix_materials_listing', 'materials', ['listing_type', 'acquisition_type'])

    # ============================================================================
    # order_requests / orders
    # ============================================================================
    op.create_table(
        'order_requests',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('material_id', sa.String(length=36), nullable=True),
        sa.Column('buyer_id', sa.String(length=36), nullable=False),
        sa.Column('seller_id', sa.String(length=36), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', _enum('requeststatus', 'pending', 'approved', 'partially_approved',
                                  'declined'), nullable=False),
        sa.Column('fulfilled_quantity', sa.Integer(), nullable=True),
        sa.Column('buyer_company', sa.String(length=255), nullable=True),
        sa.Column('buyer_contact_person', sa.String(length=255), nullable=True),
        sa.Column('buyer_email', sa.String(length=255), nullable=True),
        sa.Column('buyer_phone', sa.String(length=64), nullable=True),
        sa.Column('delivery_address', sa.Text(), nullable=True),
        sa.Column('delivery_notes', sa.Text(), nullable=True),
        sa.Column('seller_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('quantity > 0', name='ck_order_requests_quantity_positive'),
        sa.ForeignKeyConstraint(['material_id'], ['materials.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['buyer_id'], ['users.id']),
        sa.ForeignKeyConstraint(['seller_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_order_requests_buyer_id', 'order_requests', ['buyer_id'])
    op.create_index('ix_order_requests_material_status', 'order_requests', ['material_id', 'status'])
    op.create_index('ix_order_requests_seller_status', 'order_requests', ['seller_id', 'status'])

    op.create_table(
        'orders',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('order_request_id', sa.String(length=36), nullable=False),
        sa.Column('buyer_id', sa.String(length=36), nullable=False),
        sa.Column('seller_id', sa.String(length=36), nullable=False),
        sa.Column('material_id', sa.String(length=36), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('platform_fee', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', _enum('orderstatus', 'confirmed', 'shipped', 'delivered', 'completed'),
                  nullable=False),
        sa.Column('shipping_address', sa.Text(), nullable=True),
        sa.Column('delivery_notes', sa.Text(), nullable=True),
        sa.Column('tracking_number', sa.String(length=128), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('shipped_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('delivered_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['order_request_id'], ['order_requests.id']),
        sa.ForeignKeyConstraint(['buyer_id'], ['users.id']),
        sa.ForeignKeyConstraint(['seller_id'], ['users.id']),
        sa.ForeignKeyConstraint(['material_id'], ['materials.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_request_id'),
    )
    op.create_index('ix_orders_buyer_id', 'orders', ['buyer_id'])
    op.create_index('ix_orders_seller_id', 'orders', ['seller_id'])
    op.create_index('ix_orders_material_id', 'orders', ['material_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])

    # ============================================================================
    # internal_transfers: material_id has no FK; the source row may be deleted
    # ============================================================================
    op.create_table(
        'internal_transfers',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('material_id', sa.String(length=36), nullable=False),
        sa.Column('destination_material_id', sa.String(length=36), nullable=False),
        sa.Column('material_name', sa.String(length=255), nullable=False),
        sa.Column('from_project_id', sa.String(length=36), nullable=False),
        sa.Column('to_project_id', sa.String(length=36), nullable=False),
        sa.Column('quantity_transferred', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('quantity_transferred > 0', name='ck_internal_transfers_quantity_positive'),
        sa.CheckConstraint('from_project_id <> to_project_id', name='ck_internal_transfers_distinct_projects'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['from_project_id'], ['projects.id']),
        sa.ForeignKeyConstraint(['to_project_id'], ['projects.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_internal_transfers_user_id', 'internal_transfers', ['user_id'])
    op.create_index('ix_internal_transfers_material_id', 'internal_transfers', ['material_id'])

    # ============================================================================
    # notifications / transaction_history
    # ============================================================================
    op.create_table(
        'notifications',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', _enum('notificationtype', 'info', 'order_request', 'order_approved',
                                'order_declined', 'order_status', 'internal_transfer'), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('related_id', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('ix_notifications_user_read', 'notifications', ['user_id', 'read'])

    op.create_table(
        'transaction_history',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('seller_id', sa.String(length=36), nullable=False),
        sa.Column('material_id', sa.String(length=36), nullable=True),
        sa.Column('listing_id', sa.String(length=32), nullable=True),
        sa.Column('transaction_type', _enum('transactiontype', 'sale', 'internal_transfer',
                                            'listing_created', 'listing_updated'), nullable=False),
        sa.Column('buyer_id', sa.String(length=36), nullable=True),
        sa.Column('order_id', sa.String(length=36), nullable=True),
        sa.Column('transfer_id', sa.String(length=36), nullable=True),
        sa.Column('from_project_id', sa.String(length=36), nullable=True),
        sa.Column('to_project_id', sa.String(length=36), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('total_amount', sa.Numeric(14, 2), nullable=True),
        sa.Column('material_name', sa.String(length=255), nullable=False),
        sa.Column('buyer_company', sa.String(length=255), nullable=True),
        sa.Column('buyer_contact', sa.String(length=255), nullable=True),
        sa.Column('delivery_address', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['seller_id'], ['users.id']),
        sa.ForeignKeyConstraint(['buyer_id'], ['users.id']),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id']),
        sa.ForeignKeyConstraint(['transfer_id'], ['internal_transfers.id']),
        sa.ForeignKeyConstraint(['from_project_id'], ['projects.id']),
        sa.ForeignKeyConstraint(['to_project_id'], ['projects.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_transaction_history_transaction_type', 'transaction_history', ['transaction_type'])
    op.create_index('ix_transaction_history_seller_created', 'transaction_history', ['seller_id', 'created_at'])


def downgrade():
    op.drop_table('transaction_history')
    op.drop_table('notifications')
    op.drop_table('internal_transfers')
    op.drop_table('orders')
    op.drop_table('order_requests')
    op.drop_table('materials')
    op.drop_table('projects')
    op.drop_table('users')
