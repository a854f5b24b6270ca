"""Per-role dashboard statistics."""

from datetime import datetime

from sqlalchemy.orm import Session

from carechain_api.access.service import AccessControlService
from carechain_api.ledger.service import LedgerService
from carechain_api.models import AccessPermission, MedicalRecord, Prescription, User
from carechain_api.services.claims import ClaimService
from carechain_api.services.prescriptions import PrescriptionService


def patient_stats(db: Session, user: User) -> dict:
    records = db.query(MedicalRecord).filter(MedicalRecord.patient_id == user.id).count()
    shared = (
        db.query(AccessPermission.record_id)
        .join(MedicalRecord, AccessPermission.record_id == MedicalRecord.id)
        .filter(
            MedicalRecord.patient_id == user.id,
            AccessPermission.is_active == True,  # noqa: E712
        )
        .distinct()
        .count()
    )
    return {
        "total_records": records,
        "shared_records": shared,
        "ledger_transactions": len(LedgerService(db).list_entries(actor_id=user.id)),
    }


def doctor_stats(db: Session, user: User) -> dict:
    prescriptions = PrescriptionService(db).list_for_actor(user)
    return {
        "total_prescriptions": len(prescriptions),
        "pending_prescriptions": sum(1 for p in prescriptions if p.status == "pending"),
        "dispensed_prescriptions": sum(1 for p in prescriptions if p.status == "dispensed"),
        "total_patients": len({p.patient_id for p in prescriptions}),
        "shared_records": len(AccessControlService(db).list_accessible_records(user.id)),
    }


def pharmacy_stats(db: Session, user: User) -> dict:
    dispensed = db.query(Prescription).filter(Prescription.dispensed_by_id == user.id).all()
    today = datetime.utcnow().date()
    dispensed_today = sum(1 for p in dispensed if p.dispensed_at and p.dispensed_at.date() == today)
    return {
        "dispensed_today": dispensed_today,
        "total_dispensed": len(dispensed),
    }


def insurance_stats(db: Session, user: User) -> dict:
    claims = ClaimService(db).list_for_actor(user)
    return {
        "total_claims": len(claims),
        "pending_claims": sum(1 for c in claims if c.status in ("submitted", "under_review")),
        "approved_claims": sum(1 for c in claims if c.status in ("approved", "paid")),
        "rejected_claims": sum(1 for c in claims if c.status == "rejected"),
    }


STATS_BY_ROLE = {
    "patient": patient_stats,
    "doctor": doctor_stats,
    "pharmacy": pharmacy_stats,
    "insurance": insurance_stats,
}


def stats_for(db: Session, user: User) -> dict:
    """Dashboard statistics for the caller's role."""
    return {"role": user.role, **STATS_BY_ROLE[user.role](db, user)}
