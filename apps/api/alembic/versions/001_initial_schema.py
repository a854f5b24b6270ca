"""Initial schema: users, records, permissions, prescriptions, claims, ledger.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('username', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('role', sa.String(50), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('specialization', sa.Text(), nullable=True),
        sa.Column('license_number', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'medical_records',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('patient_id', sa.String(36), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('file_type', sa.String(100), nullable=False),
        sa.Column('file_url', sa.Text(), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('record_type', sa.String(100), nullable=False),
        sa.Column('uploaded_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['patient_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_medical_records_patient_id', 'medical_records', ['patient_id'])
    op.create_index('ix_medical_records_uploaded_at', 'medical_records', ['uploaded_at'])

    op.create_table(
        'access_permissions',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('record_id', sa.String(36), nullable=False),
        sa.Column('granted_to_id', sa.String(36), nullable=False),
        sa.Column('granted_by_id', sa.String(36), nullable=False),
        sa.Column('access_level', sa.String(50), nullable=False),
        sa.Column('granted_at', sa.DateTime(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['record_id'], ['medical_records.id'], ),
        sa.ForeignKeyConstraint(['granted_to_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['granted_by_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_access_permissions_record_id', 'access_permissions', ['record_id'])
    op.create_index('ix_access_permissions_granted_to_id', 'access_permissions', ['granted_to_id'])
    op.create_index('ix_access_permissions_granted_by_id', 'access_permissions', ['granted_by_id'])
    op.create_index('ix_access_permissions_is_active', 'access_permissions', ['is_active'])

    op.create_table(
        'prescriptions',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('patient_id', sa.String(36), nullable=False),
        sa.Column('doctor_id', sa.String(36), nullable=False),
        sa.Column('diagnosis', sa.Text(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(50), nullable=False),
        sa.Column('dispensed_by_id', sa.String(36), nullable=True),
        sa.Column('dispensed_at', sa.DateTime(), nullable=True),
        sa.Column('blockchain_hash', sa.String(64), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['patient_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['doctor_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['dispensed_by_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_prescriptions_patient_id', 'prescriptions', ['patient_id'])
    op.create_index('ix_prescriptions_doctor_id', 'prescriptions', ['doctor_id'])
    op.create_index('ix_prescriptions_dispensed_by_id', 'prescriptions', ['dispensed_by_id'])
    op.create_index('ix_prescriptions_status', 'prescriptions', ['status'])

    op.create_table(
        'prescription_items',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('prescription_id', sa.String(36), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('medication_name', sa.String(255), nullable=False),
        sa.Column('dosage', sa.String(255), nullable=False),
        sa.Column('frequency', sa.String(255), nullable=False),
        sa.Column('duration', sa.String(255), nullable=False),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['prescription_id'], ['prescriptions.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_prescription_items_prescription_id', 'prescription_items', ['prescription_id'])

    op.create_table(
        'insurance_claims',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('patient_id', sa.String(36), nullable=False),
        sa.Column('agent_id', sa.String(36), nullable=True),
        sa.Column('policy_number', sa.String(255), nullable=False),
        sa.Column('policy_provider', sa.String(255), nullable=False),
        sa.Column('claim_amount', sa.Integer(), nullable=False),
        sa.Column('claim_type', sa.String(50), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('status', sa.String(50), nullable=False),
        sa.Column('supporting_documents', sa.JSON(), nullable=False),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('blockchain_hash', sa.String(64), nullable=False),
        sa.Column('submitted_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['patient_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['agent_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_insurance_claims_patient_id', 'insurance_claims', ['patient_id'])
    op.create_index('ix_insurance_claims_agent_id', 'insurance_claims', ['agent_id'])
    op.create_index('ix_insurance_claims_status', 'insurance_claims', ['status'])

    op.create_table(
        'ledger_entries',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('sequence', sa.BigInteger(), nullable=False),
        sa.Column('transaction_hash', sa.String(64), nullable=False),
        sa.Column('actor_id', sa.String(36), nullable=False),
        sa.Column('action_type', sa.String(50), nullable=False),
        sa.Column('resource_type', sa.String(50), nullable=False),
        sa.Column('resource_id', sa.String(36), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=False),
        sa.Column('previous_hash', sa.String(64), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['actor_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('sequence', name='uq_ledger_entries_sequence'),
    )
    op.create_index('ix_ledger_entries_sequence', 'ledger_entries', ['sequence'])
    op.create_index('ix_ledger_entries_transaction_hash', 'ledger_entries', ['transaction_hash'], unique=True)
    op.create_index('ix_ledger_entries_actor_id', 'ledger_entries', ['actor_id'])
    op.create_index('ix_ledger_entries_action_type', 'ledger_entries', ['action_type'])
    op.create_index('ix_ledger_entries_resource_id', 'ledger_entries', ['resource_id'])
    op.create_index('ix_ledger_entries_previous_hash', 'ledger_entries', ['previous_hash'])
    op.create_index('ix_ledger_entries_timestamp', 'ledger_entries', ['timestamp'])


def downgrade() -> None:
    op.drop_table('ledger_entries')
    op.drop_table('insurance_claims')
    op.drop_table('prescription_items')
    op.drop_table('prescriptions')
    op.drop_table('access_permissions')
    op.drop_table('medical_records')
    op.drop_table('users')
