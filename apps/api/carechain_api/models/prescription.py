"""E-prescription models."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from carechain_api.db.base import Base
from carechain_api.models.user import generate_uuid


class Prescription(Base):
    """Prescription written by a doctor for a patient."""

    __tablename__ = "prescriptions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    patient_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    doctor_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    diagnosis = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(String(50), default="pending", nullable=False, index=True)  # pending, verified, dispensed
    dispensed_by_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    dispensed_at = Column(DateTime, nullable=True)
    blockchain_hash = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    items = relationship(
        "PrescriptionItem",
        back_populates="prescription",
        cascade="all, delete-orphan",
        order_by="PrescriptionItem.position",
    )


class PrescriptionItem(Base):
    """Single medication line of a prescription."""

    __tablename__ = "prescription_items"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    prescription_id = Column(String(36), ForeignKey("prescriptions.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    medication_name = Column(String(255), nullable=False)
    dosage = Column(String(255), nullable=False)
    frequency = Column(String(255), nullable=False)
    duration = Column(String(255), nullable=False)
    instructions = Column(Text, nullable=True)

    # Relationships
    prescription = relationship("Prescription", back_populates="items")
