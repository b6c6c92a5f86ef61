"""Initial schema: tenants, identity, masters, KYC, lots, sales, settings, audit, sync

Revision ID: 20250301_initial
Revises:
Create Date: 2025-03-01

This migration creates:
1. Tenancy and identity (tenants, users, session_tokens, security_events)
2. Master registry and KYC records
3. Lots with material rows, logistics, melting and disbursement details
4. Sales orders, document sequences, global settings
5. Audit trail and sync receipts
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20250301_initial'
down_revision = None
branch_labels = None
depends_on = None


def _now():
    return sa.text('(CURRENT_TIMESTAMP)')


def upgrade():
    # ==========================================================================
    # 1. TENANCY AND IDENTITY
    # ==========================================================================
    op.create_table('tenants',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('code', sa.String(length=32), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=_now(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_tenants'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('tenants', schema=None) as batch_op:
        batch_op.create_index('ix_tenants_code', ['code'], unique=True)
        batch_op.create_index('ix_tenants_is_active', ['is_active'], unique=False)

    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=_now(), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], name='fk_users_tenant_id_tenants'),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index('ix_users_tenant_id', ['tenant_id'], unique=False)
        batch_op.create_index('ix_users_username', ['username'], unique=True)

    op.create_table('session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('token_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=_now(), nullable=False),
        sa.Column('last_used_at', sa.DateTime(timezone=True), server_default=_now(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revoked_reason', sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], name='fk_session_tokens_tenant_id_tenants'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_session_tokens_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_session_tokens'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('session_tokens', schema=None) as batch_op:
        batch_op.create_index('ix_session_tokens_user_active', ['user_id', 'is_revoked'], unique=False)
        batch_op.create_index('ix_session_tokens_user_id', ['user_id'], unique=False)
        batch_op.create_index('ix_session_tokens_tenant_id', ['tenant_id'], unique=False)
        batch_op.create_index('ix_session_tokens_token_hash', ['token_hash'], unique=True)
        batch_op.create_index('ix_session_tokens_expires_at', ['expires_at'], unique=False)
        batch_op.create_index('ix_session_tokens_is_revoked', ['is_revoked'], unique=False)

    op.create_table('security_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('event_type', sa.String(length=64), nullable=False),
        sa.Column('resource', sa.String(length=128), nullable=True),
        sa.Column('action', sa.String(length=64), nullable=True),
        sa.Column('success', sa.Boolean(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), server_default=_now(), nullable=False),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], name='fk_security_events_tenant_id_tenants'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_security_events_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_security_events'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('security_events', schema=None) as batch_op:
        batch_op.create_index('ix_security_events_tenant_occurred', ['tenant_id', 'occurred_at'], unique=False)
        batch_op.create_index('ix_security_events_tenant_id', ['tenant_id'], unique=False)
        batch_op.create_index('ix_security_events_user_id', ['user_id'], unique=False)
        batch_op.create_index('ix_security_events_event_type', ['event_type'], unique=False)
        batch_op.create_index('ix_security_events_success', ['success'], unique=False)
        batch_op.create_index('ix_security_events_occurred_at', ['occurred_at'], unique=False)

    # ==========================================================================
    # 2. MASTER REGISTRY AND KYC
    # ==========================================================================
    op.create_table('master_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('record_id', sa.String(length=64), nullable=False),
        sa.Column('kind', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('identifier', sa.String(length=64), nullable=False),
        sa.Column('secondary', sa.String(length=128), nullable=True),
        sa.Column('record_date', sa.Date(), nullable=True),
        sa.Column('kyc_status', sa.String(length=16), nullable=True),
        sa.Column('details', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=_now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=_now(), nullable=False),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], name='fk_master_records_tenant_id_tenants'),
        sa.PrimaryKeyConstraint('id', name='pk_master_records'),
        sa.UniqueConstraint('tenant_id', 'record_id', name='uq_master_records_tenant_record'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('master_records', schema=None) as batch_op:
        batch_op.create_index('ix_master_records_tenant_kind', ['tenant_id', 'kind'], unique=False)
        batch_op.create_index('ix_master_records_tenant_id', ['tenant_id'], unique=False)

    op.create_table('kyc_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('identity_masked', sa.String(length=32), nullable=False),
        sa.Column('identity_digest', sa.String(length=64), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('customer_record_id', sa.String(length=64), nullable=True),
        sa.Column('verified_by_user_id', sa.Integer(), nullable=True),
        sa.Column('verified_at', sa.DateTime(timezone=True), server_default=_now(), nullable=False),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], name='fk_kyc_records_tenant_id_tenants'),
        sa.ForeignKeyConstraint(['verified_by_user_id'], ['users.id'], name='fk_kyc_records_verified_by_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_kyc_records'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('kyc_records', schema=None) as batch_op:
        batch_op.create_index('ix_kyc_records_tenant_verified', ['tenant_id', 'verified_at'], unique=False)
        batch_op.create_index('ix_kyc_records_tenant_id', ['tenant_id'], unique=False)
        batch_op.create_index('ix_kyc_records_identity_masked', ['identity_masked'], unique=False)
        batch_op.create_index('ix_kyc_records_identity_digest', ['identity_digest'], unique=False)

    # ==========================================================================
    # 3. LOTS
    # ==========================================================================
    op.create_table('lots',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('lot_no', sa.String(length=64), nullable=False),
        sa.Column('branch', sa.String(length=128), nullable=True),
        sa.Column('ref_no', sa.String(length=64), nullable=True),
        sa.Column('lot_date', sa.Date(), nullable=True),
        sa.Column('customer_identity', sa.String(length=32), nullable=True),
        sa.Column('customer_name', sa.String(length=255), nullable=True),
        sa.Column('phase', sa.String(length=32), nullable=False),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('created_by_user_id', sa.Integer(), nullable=True),
        sa.Column('decided_by_user_id', sa.Integer(), nullable=True),
        sa.Column('invoiced_by_user_id', sa.Integer(), nullable=True),
        sa.Column('verified_by_user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=_now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=_now(), nullable=False),
        sa.Column('decided_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('invoiced_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('gst_enabled', sa.Boolean(), nullable=True),
        sa.Column('subtotal_paise', sa.BigInteger(), nullable=True),
        sa.Column('gst_paise', sa.BigInteger(), nullable=True),
        sa.Column('grand_total_paise', sa.BigInteger(), nullable=True),
        sa.Column('applied_gold_rate_paise', sa.BigInteger(), nullable=True),
        sa.Column('applied_silver_rate_paise', sa.BigInteger(), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], name='fk_lots_tenant_id_tenants'),
        sa.ForeignKeyConstraint(['created_by_user_id'], ['users.id'], name='fk_lots_created_by_user_id_users'),
        sa.ForeignKeyConstraint(['decided_by_user_id'], ['users.id'], name='fk_lots_decided_by_user_id_users'),
        sa.ForeignKeyConstraint(['invoiced_by_user_id'], ['users.id'], name='fk_lots_invoiced_by_user_id_users'),
        sa.ForeignKeyConstraint(['verified_by_user_id'], ['users.id'], name='fk_lots_verified_by_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_lots'),
        sa.UniqueConstraint('tenant_id', 'lot_no', name='uq_lots_tenant_lot_no'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('lots', schema=None) as batch_op:
        batch_op.create_index('ix_lots_tenant_phase', ['tenant_id', 'phase'], unique=False)
        batch_op.create_index('ix_lots_tenant_id', ['tenant_id'], unique=False)

    op.create_table('material_rows',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('lot_id', sa.Integer(), nullable=False),
        sa.Column('s_no', sa.Integer(), nullable=False),
        sa.Column('product', sa.String(length=255), nullable=False),
        sa.Column('piece', sa.Integer(), nullable=False),
        sa.Column('weight_mg', sa.BigInteger(), nullable=False),
        sa.Column('purity', sa.String(length=16), nullable=True),
        sa.Column('waste_bps', sa.Integer(), nullable=False),
        sa.Column('net_weight_mg', sa.BigInteger(), nullable=False),
        sa.Column('rate_paise', sa.BigInteger(), nullable=True),
        sa.Column('amount_paise', sa.BigInteger(), nullable=True),
        sa.ForeignKeyConstraint(['lot_id'], ['lots.id'], name='fk_material_rows_lot_id_lots', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_material_rows'),
        sa.UniqueConstraint('lot_id', 's_no', name='uq_material_rows_lot_sno'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('material_rows', schema=None) as batch_op:
        batch_op.create_index('ix_material_rows_lot_id', ['lot_id'], unique=False)

    op.create_table('logistics_details',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('lot_id', sa.Integer(), nullable=False),
        sa.Column('vehicle_no', sa.String(length=32), nullable=False),
        sa.Column('driver_name', sa.String(length=128), nullable=True),
        sa.Column('seal_number', sa.String(length=64), nullable=False),
        sa.Column('dispatched_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('dispatched_by_user_id', sa.Integer(), nullable=True),
        sa.Column('received_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('received_by_user_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['lot_id'], ['lots.id'], name='fk_logistics_details_lot_id_lots', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['dispatched_by_user_id'], ['users.id'], name='fk_logistics_details_dispatched_by_user_id_users'),
        sa.ForeignKeyConstraint(['received_by_user_id'], ['users.id'], name='fk_logistics_details_received_by_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_logistics_details'),
        sa.UniqueConstraint('lot_id', name='uq_logistics_details_lot_id'),
    )

    op.create_table('melting_details',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('lot_id', sa.Integer(), nullable=False),
        sa.Column('input_weight_mg', sa.BigInteger(), nullable=False),
        sa.Column('output_weight_mg', sa.BigInteger(), nullable=False),
        sa.Column('loss_weight_mg', sa.BigInteger(), nullable=False),
        sa.Column('loss_bps', sa.Integer(), nullable=False),
        sa.Column('loss_flagged', sa.Boolean(), nullable=False),
        sa.Column('operator', sa.String(length=128), nullable=True),
        sa.Column('temperature', sa.Integer(), nullable=True),
        sa.Column('melted_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('melted_by_user_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['lot_id'], ['lots.id'], name='fk_melting_details_lot_id_lots', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['melted_by_user_id'], ['users.id'], name='fk_melting_details_melted_by_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_melting_details'),
        sa.UniqueConstraint('lot_id', name='uq_melting_details_lot_id'),
    )

    op.create_table('disbursement_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('lot_id', sa.Integer(), nullable=False),
        sa.Column('payment_mode', sa.String(length=16), nullable=False),
        sa.Column('reference_no', sa.String(length=64), nullable=True),
        sa.Column('amount_paise', sa.BigInteger(), nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('verified_by_user_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['lot_id'], ['lots.id'], name='fk_disbursement_records_lot_id_lots', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['verified_by_user_id'], ['users.id'], name='fk_disbursement_records_verified_by_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_disbursement_records'),
        sa.UniqueConstraint('lot_id', name='uq_disbursement_records_lot_id'),
    )

    # ==========================================================================
    # 4. SALES, DOCUMENT SEQUENCES, SETTINGS
    # ==========================================================================
    op.create_table('sales_orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('order_no', sa.String(length=32), nullable=False),
        sa.Column('buyer', sa.String(length=255), nullable=False),
        sa.Column('order_date', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('total_amount_paise', sa.BigInteger(), nullable=False),
        sa.Column('created_by_user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=_now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=_now(), nullable=False),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], name='fk_sales_orders_tenant_id_tenants'),
        sa.ForeignKeyConstraint(['created_by_user_id'], ['users.id'], name='fk_sales_orders_created_by_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_sales_orders'),
        sa.UniqueConstraint('tenant_id', 'order_no', name='uq_sales_orders_tenant_order_no'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('sales_orders', schema=None) as batch_op:
        batch_op.create_index('ix_sales_orders_tenant_id', ['tenant_id'], unique=False)

    op.create_table('sales_order_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('line_no', sa.Integer(), nullable=False),
        sa.Column('product', sa.String(length=255), nullable=False),
        sa.Column('quantity_mg', sa.BigInteger(), nullable=False),
        sa.Column('unit_price_paise', sa.BigInteger(), nullable=False),
        sa.Column('line_total_paise', sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['sales_orders.id'], name='fk_sales_order_items_order_id_sales_orders', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_sales_order_items'),
        sa.UniqueConstraint('order_id', 'line_no', name='uq_sales_order_items_line'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('sales_order_items', schema=None) as batch_op:
        batch_op.create_index('ix_sales_order_items_order_id', ['order_id'], unique=False)

    op.create_table('document_sequences',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('document_type', sa.String(length=32), nullable=False),
        sa.Column('next_number', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=_now(), nullable=False),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], name='fk_document_sequences_tenant_id_tenants'),
        sa.PrimaryKeyConstraint('id', name='pk_document_sequences'),
        sa.UniqueConstraint('tenant_id', 'document_type', name='uq_doc_sequences_tenant_type'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('document_sequences', schema=None) as batch_op:
        batch_op.create_index('ix_document_sequences_tenant_id', ['tenant_id'], unique=False)
        batch_op.create_index('ix_document_sequences_document_type', ['document_type'], unique=False)

    op.create_table('global_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(length=128), nullable=False),
        sa.Column('value', sa.Text(), nullable=True),
        sa.Column('updated_by_user_id', sa.Integer(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=_now(), nullable=False),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], name='fk_global_settings_tenant_id_tenants'),
        sa.ForeignKeyConstraint(['updated_by_user_id'], ['users.id'], name='fk_global_settings_updated_by_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_global_settings'),
        sa.UniqueConstraint('tenant_id', 'key', name='uq_global_settings_tenant_key'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('global_settings', schema=None) as batch_op:
        batch_op.create_index('ix_global_settings_tenant_id', ['tenant_id'], unique=False)

    # ==========================================================================
    # 5. AUDIT TRAIL AND SYNC RECEIPTS
    # ==========================================================================
    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('module', sa.String(length=64), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=_now(), nullable=False),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], name='fk_audit_logs_tenant_id_tenants'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_audit_logs_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_audit_logs'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('audit_logs', schema=None) as batch_op:
        batch_op.create_index('ix_audit_logs_tenant_created', ['tenant_id', 'created_at'], unique=False)
        batch_op.create_index('ix_audit_logs_tenant_id', ['tenant_id'], unique=False)

    op.create_table('sync_receipts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('client_mutation_id', sa.String(length=128), nullable=False),
        sa.Column('op', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('error_kind', sa.String(length=64), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('result', sa.JSON(), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=_now(), nullable=False),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], name='fk_sync_receipts_tenant_id_tenants'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_sync_receipts_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_sync_receipts'),
        sa.UniqueConstraint('tenant_id', 'client_mutation_id', name='uq_sync_receipts_tenant_mutation'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('sync_receipts', schema=None) as batch_op:
        batch_op.create_index('ix_sync_receipts_tenant_id', ['tenant_id'], unique=False)


def downgrade():
    for table in (
        'sync_receipts',
        'audit_logs',
        'global_settings',
        'document_sequences',
        'sales_order_items',
        'sales_orders',
        'disbursement_records',
        'melting_details',
        'logistics_details',
        'material_rows',
        'lots',
        'kyc_records',
        'master_records',
        'security_events',
        'session_tokens',
        'users',
        'tenants',
    ):
        op.drop_table(table)
