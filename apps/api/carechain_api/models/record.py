"""Medical record and access permission models."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from carechain_api.db.base import Base
from carechain_api.models.user import generate_uuid


class MedicalRecord(Base):
    """Patient-owned medical record. File contents are not stored."""

    __tablename__ = "medical_records"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    patient_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    file_type = Column(String(100), nullable=False)  # pdf, image, etc.
    file_url = Column(Text, nullable=False)  # stubbed reference
    file_size = Column(Integer, nullable=False)
    record_type = Column(String(100), nullable=False)  # lab_report, imaging, etc.
    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    patient = relationship("User", back_populates="medical_records")
    access_permissions = relationship("AccessPermission", back_populates="record")


class AccessPermission(Base):
    """View/download grant on a single record. Revoked rows are kept for audit."""

    __tablename__ = "access_permissions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    record_id = Column(String(36), ForeignKey("medical_records.id"), nullable=False, index=True)
    granted_to_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    granted_by_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    access_level = Column(String(50), nullable=False, default="view")  # view, download
    granted_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    revoked_at = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Relationships
    record = relationship("MedicalRecord", back_populates="access_permissions")
    granted_to = relationship("User", foreign_keys=[granted_to_id])
    granted_by = relationship("User", foreign_keys=[granted_by_id])
