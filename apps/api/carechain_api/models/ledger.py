"""Audit ledger models."""

from datetime import datetime

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, JSON, String, UniqueConstraint

from carechain_api.db.base import Base
from carechain_api.models.user import generate_uuid

GENESIS_HASH = "genesis"

ACTION_TYPES = (
    "grant_access",
    "revoke_access",
    "upload_record",
    "create_prescription",
    "dispense_prescription",
    "submit_claim",
    "update_claim_status",
)

RESOURCE_TYPES = (
    "medical_record",
    "prescription",
    "access_permission",
    "insurance_claim",
)


class LedgerEntry(Base):
    """Append-only audit ledger with hash chaining."""

    __tablename__ = "ledger_entries"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    sequence = Column(BigInteger, nullable=False, index=True)  # 1-based chain position
    transaction_hash = Column(String(64), nullable=False, unique=True, index=True)
    actor_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    action_type = Column(String(50), nullable=False, index=True)
    resource_type = Column(String(50), nullable=False)
    resource_id = Column(String(36), nullable=False, index=True)
    metadata_json = Column("metadata", JSON, nullable=False, default=dict)
    previous_hash = Column(String(64), nullable=False, index=True)  # "genesis" for the first entry
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Two appends from the same tip collide here instead of forking the chain
    __table_args__ = (
        UniqueConstraint("sequence", name="uq_ledger_entries_sequence"),
    )
