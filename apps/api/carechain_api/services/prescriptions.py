"""E-prescription workflow."""

import logging
from datetime import datetime
from typing import Optional

from carechain_api.errors import AuthorizationError, InvalidStateError, ResourceNotFoundError, ValidationError
from carechain_api.ledger.hashing import create_resource_hash
from carechain_api.models import Prescription, PrescriptionItem, User
from carechain_api.services.base import BaseService

logger = logging.getLogger(__name__)

MEDICATION_FIELDS = ("medication_name", "dosage", "frequency", "duration")


class PrescriptionService(BaseService):
    """Doctors write prescriptions, pharmacies dispense them."""

    def create(
        self,
        doctor_id: str,
        patient_id: str,
        diagnosis: str,
        medications: list[dict],
        notes: Optional[str] = None,
    ) -> Prescription:
        """Create a stamped prescription with its medication lines."""
        self._enforce_actor(doctor_id)
        if not patient_id or not diagnosis:
            raise ValidationError("patient_id and diagnosis are required")
        if not medications:
            raise ValidationError("At least one medication is required")
        for med in medications:
            missing = [field for field in MEDICATION_FIELDS if not med.get(field)]
            if missing:
                raise ValidationError("Medication is missing fields", {"missing": ",".join(missing)})

        patient = self.db.query(User).filter(User.id == patient_id, User.role == "patient").first()
        if patient is None:
            raise ResourceNotFoundError("Patient not found", {"patient_id": patient_id})

        blockchain_hash = create_resource_hash(
            {
                "doctor_id": doctor_id,
                "patient_id": patient_id,
                "diagnosis": diagnosis,
                "medications": medications,
                "timestamp": datetime.utcnow().isoformat(),
            }
        )

        prescription = Prescription(
            patient_id=patient_id,
            doctor_id=doctor_id,
            diagnosis=diagnosis,
            notes=notes or "",
            status="pending",
            blockchain_hash=blockchain_hash,
        )
        for position, med in enumerate(medications):
            prescription.items.append(
                PrescriptionItem(
                    position=position,
                    medication_name=med["medication_name"],
                    dosage=med["dosage"],
                    frequency=med["frequency"],
                    duration=med["duration"],
                    instructions=med.get("instructions") or "",
                )
            )
        with self._unit_of_work():
            self.db.add(prescription)
            self.db.flush()
            self.ledger.append(
                doctor_id,
                "create_prescription",
                "prescription",
                prescription.id,
                {"patient_id": patient_id, "diagnosis": diagnosis},
            )
        self.db.refresh(prescription)
        logger.info(
            "Prescription created",
            extra={"doctor_id": doctor_id, "prescription_id": prescription.id},
        )
        return prescription

    def get(self, prescription_id: str) -> Prescription:
        """Get a prescription or raise ResourceNotFoundError."""
        prescription = self.db.query(Prescription).filter(Prescription.id == prescription_id).first()
        if prescription is None:
            raise ResourceNotFoundError("Prescription not found", {"prescription_id": prescription_id})
        return prescription

    def get_for_actor(self, actor: User, prescription_id: str) -> Prescription:
        """Patients and doctors see only their own prescriptions; pharmacies and insurers see all."""
        prescription = self.get(prescription_id)
        if actor.role == "patient" and prescription.patient_id != actor.id:
            raise AuthorizationError("Access denied.", {"prescription_id": prescription_id})
        if actor.role == "doctor" and prescription.doctor_id != actor.id:
            raise AuthorizationError("Access denied.", {"prescription_id": prescription_id})
        return prescription

    def dispense(self, pharmacy_id: str, prescription_id: str) -> Prescription:
        """Mark a prescription dispensed by pharmacy_id."""
        self._enforce_actor(pharmacy_id)
        prescription = self.get(prescription_id)
        if prescription.status == "dispensed":
            raise InvalidStateError(
                "Prescription already dispensed",
                {"prescription_id": prescription_id},
            )

        with self._unit_of_work():
            prescription.status = "dispensed"
            prescription.dispensed_by_id = pharmacy_id
            prescription.dispensed_at = datetime.utcnow()
            self.db.flush()
            self.ledger.append(
                pharmacy_id,
                "dispense_prescription",
                "prescription",
                prescription_id,
                {"patient_id": prescription.patient_id},
            )
        self.db.refresh(prescription)
        logger.info(
            "Prescription dispensed",
            extra={"pharmacy_id": pharmacy_id, "prescription_id": prescription_id},
        )
        return prescription

    def list_for_actor(self, actor: User) -> list[Prescription]:
        """Prescriptions visible to actor, newest first."""
        query = self.db.query(Prescription)
        if actor.role == "doctor":
            query = query.filter(Prescription.doctor_id == actor.id)
        elif actor.role == "patient":
            query = query.filter(Prescription.patient_id == actor.id)
        return query.order_by(Prescription.created_at.desc()).all()
