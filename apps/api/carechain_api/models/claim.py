"""Insurance claim model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String, Text

from carechain_api.db.base import Base
from carechain_api.models.user import generate_uuid


class InsuranceClaim(Base):
    """Claim submitted by a patient and reviewed by an insurance agent."""

    __tablename__ = "insurance_claims"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    patient_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    agent_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    policy_number = Column(String(255), nullable=False)
    policy_provider = Column(String(255), nullable=False)
    claim_amount = Column(Integer, nullable=False)
    claim_type = Column(String(50), nullable=False)  # hospitalization, outpatient, pharmacy
    description = Column(Text, nullable=False)
    status = Column(String(50), default="submitted", nullable=False, index=True)
    supporting_documents = Column(JSON, nullable=False, default=list)
    review_notes = Column(Text, nullable=True)
    blockchain_hash = Column(String(64), nullable=False)
    submitted_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
