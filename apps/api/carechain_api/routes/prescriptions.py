"""Prescription endpoints."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from carechain_api.auth.actor import get_current_user
from carechain_api.db.session import get_db
from carechain_api.ledger.service import LedgerService
from carechain_api.models import User
from carechain_api.services.prescriptions import PrescriptionService

router = APIRouter(prefix="/v1", tags=["prescriptions"])


class Medication(BaseModel):
    """Medication line."""

    medication_name: str
    dosage: str
    frequency: str
    duration: str
    instructions: Optional[str] = None


class PrescriptionCreate(BaseModel):
    """Prescription creation request."""

    patient_id: str
    diagnosis: str
    notes: Optional[str] = None
    medications: list[Medication] = Field(..., min_length=1)


class MedicationResponse(Medication):
    """Stored medication line."""

    id: str

    class Config:
        from_attributes = True


class PrescriptionResponse(BaseModel):
    """Prescription response."""

    id: str
    patient_id: str
    doctor_id: str
    diagnosis: str
    notes: Optional[str] = None
    status: str
    dispensed_by_id: Optional[str] = None
    dispensed_at: Optional[datetime] = None
    blockchain_hash: str
    created_at: datetime
    items: list[MedicationResponse] = Field(default_factory=list)

    class Config:
        from_attributes = True


class PrescriptionVerification(PrescriptionResponse):
    """Prescription with its stamp presented for pharmacy verification."""

    verified: bool
    message: str


@router.post("/prescriptions", response_model=PrescriptionResponse, status_code=status.HTTP_201_CREATED)
async def create_prescription(
    data: PrescriptionCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Write a prescription."""
    return PrescriptionService(db).create(
        user.id,
        data.patient_id,
        data.diagnosis,
        [med.model_dump() for med in data.medications],
        notes=data.notes,
    )


@router.get("/prescriptions", response_model=list[PrescriptionResponse])
async def list_prescriptions(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Prescriptions visible to the caller."""
    return PrescriptionService(db).list_for_actor(user)


@router.get("/prescriptions/{prescription_id}", response_model=PrescriptionResponse)
async def get_prescription(
    prescription_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """A single prescription with its items."""
    return PrescriptionService(db).get_for_actor(user, prescription_id)


@router.get("/prescriptions/{prescription_id}/verify", response_model=PrescriptionVerification)
async def verify_prescription(
    prescription_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Show a prescription and its hash stamp to a verifying pharmacy."""
    prescription = PrescriptionService(db).get_for_actor(user, prescription_id)
    response = PrescriptionResponse.model_validate(prescription)
    created = [
        entry
        for entry in LedgerService(db).list_entries(resource_id=prescription.id)
        if entry.action_type == "create_prescription"
    ]
    verified = bool(prescription.blockchain_hash) and bool(created)
    return PrescriptionVerification(
        **response.model_dump(),
        verified=verified,
        message="Stamp present and creation recorded in ledger"
        if verified
        else "No ledger entry records the creation of this prescription",
    )


@router.post("/prescriptions/{prescription_id}/dispense", response_model=PrescriptionResponse)
async def dispense_prescription(
    prescription_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Dispense a prescription."""
    return PrescriptionService(db).dispense(user.id, prescription_id)
