"""User model for portal actors."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import relationship

from carechain_api.db.base import Base


def generate_uuid() -> str:
    """Generate an opaque primary key."""
    return str(uuid.uuid4())


class User(Base):
    """Portal actor: patient, doctor, pharmacy or insurance agent."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, index=True)  # patient, doctor, pharmacy, insurance
    phone = Column(String(50), nullable=True)
    specialization = Column(Text, nullable=True)  # doctors
    license_number = Column(String(100), nullable=True)  # doctors, pharmacies
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    medical_records = relationship("MedicalRecord", back_populates="patient")
