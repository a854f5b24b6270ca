"""Tests for record, prescription and claim workflows and their audit trail."""

import pytest
from sqlalchemy.orm import Session

from carechain_api.access.service import AccessControlService
from carechain_api.errors import AuthorizationError, InvalidStateError, ResourceNotFoundError, ValidationError
from carechain_api.ledger.service import LedgerService
from carechain_api.models import InsuranceClaim, LedgerEntry, MedicalRecord, Prescription, User
from carechain_api.services.claims import ClaimService
from carechain_api.services.prescriptions import PrescriptionService
from carechain_api.services.records import RecordService
from carechain_api.services.stats import stats_for

MEDICATIONS = [
    {"medication_name": "Amoxicillin", "dosage": "500mg", "frequency": "3x daily", "duration": "7 days"},
    {
        "medication_name": "Ibuprofen",
        "dosage": "200mg",
        "frequency": "as needed",
        "duration": "5 days",
        "instructions": "Take with food",
    },
]


def _actions(db: Session) -> list[str]:
    return [e.action_type for e in db.query(LedgerEntry).order_by(LedgerEntry.sequence).all()]


class TestRecords:
    def test_upload_stores_stub_reference_and_audits(self, db: Session, patient):
        record = RecordService(db).upload(
            patient.id,
            title="MRI",
            record_type="imaging",
            file_type="image/dicom",
            file_size=4096,
            file_name="mri.dcm",
        )

        assert record.patient_id == patient.id
        assert record.file_url.startswith("/uploads/")
        assert record.file_url.endswith("-mri.dcm")

        entry = db.query(LedgerEntry).one()
        assert entry.action_type == "upload_record"
        assert entry.resource_id == record.id
        assert entry.previous_hash == "genesis"

    def test_upload_requires_title(self, db: Session, patient):
        with pytest.raises(ValidationError):
            RecordService(db).upload(
                patient.id, title="", record_type="imaging", file_type="image/png", file_size=1, file_name="x.png"
            )
        assert db.query(MedicalRecord).count() == 0
        assert db.query(LedgerEntry).count() == 0

    def test_list_for_patient(self, db: Session, record, other_patient):
        service = RecordService(db)
        assert [r.id for r in service.list_for_patient("patient-A")] == [record.id]
        assert service.list_for_patient(other_patient.id) == []

    def test_get_for_actor_requires_ownership_or_grant(self, db: Session, record, doctor):
        service = RecordService(db)
        assert service.get_for_actor("patient-A", record.id).id == record.id

        with pytest.raises(AuthorizationError):
            service.get_for_actor(doctor.id, record.id)

        AccessControlService(db).grant("patient-A", record.id, doctor.id)
        assert service.get_for_actor(doctor.id, record.id).id == record.id

    def test_get_for_actor_hides_missing_records(self, db: Session, patient):
        with pytest.raises(AuthorizationError):
            RecordService(db).get_for_actor(patient.id, "r404")


class TestPrescriptions:
    def test_create_keeps_medication_order(self, db: Session, doctor, patient):
        prescription = PrescriptionService(db).create(doctor.id, patient.id, "Infection", MEDICATIONS)

        assert prescription.status == "pending"
        assert len(prescription.blockchain_hash) == 64
        assert [item.medication_name for item in prescription.items] == ["Amoxicillin", "Ibuprofen"]
        assert prescription.items[1].instructions == "Take with food"
        assert _actions(db) == ["create_prescription"]

    def test_create_requires_a_known_patient(self, db: Session, doctor, pharmacy):
        service = PrescriptionService(db)
        with pytest.raises(ResourceNotFoundError):
            service.create(doctor.id, "nobody", "Infection", MEDICATIONS)
        with pytest.raises(ResourceNotFoundError):
            service.create(doctor.id, pharmacy.id, "Infection", MEDICATIONS)
        assert db.query(Prescription).count() == 0

    @pytest.mark.parametrize(
        "medications",
        [
            [],
            [{"medication_name": "Amoxicillin", "dosage": "500mg", "frequency": "3x daily"}],
        ],
    )
    def test_create_validates_medications(self, db: Session, doctor, patient, medications):
        with pytest.raises(ValidationError):
            PrescriptionService(db).create(doctor.id, patient.id, "Infection", medications)
        assert db.query(LedgerEntry).count() == 0

    def test_dispense_once(self, db: Session, doctor, patient, pharmacy):
        service = PrescriptionService(db)
        prescription = service.create(doctor.id, patient.id, "Infection", MEDICATIONS)

        dispensed = service.dispense(pharmacy.id, prescription.id)
        assert dispensed.status == "dispensed"
        assert dispensed.dispensed_by_id == pharmacy.id
        assert dispensed.dispensed_at is not None

        with pytest.raises(InvalidStateError):
            service.dispense(pharmacy.id, prescription.id)

        assert _actions(db) == ["create_prescription", "dispense_prescription"]
        assert LedgerService(db).verify_integrity()

    def test_dispense_unknown_prescription(self, db: Session, pharmacy):
        with pytest.raises(ResourceNotFoundError):
            PrescriptionService(db).dispense(pharmacy.id, "rx-404")

    def test_visibility(self, db: Session, doctor, patient, other_patient, pharmacy):
        service = PrescriptionService(db)
        prescription = service.create(doctor.id, patient.id, "Infection", MEDICATIONS)

        assert service.get_for_actor(patient, prescription.id).id == prescription.id
        assert service.get_for_actor(pharmacy, prescription.id).id == prescription.id
        with pytest.raises(AuthorizationError):
            service.get_for_actor(other_patient, prescription.id)

        assert [p.id for p in service.list_for_actor(doctor)] == [prescription.id]
        assert service.list_for_actor(other_patient) == []


class TestClaims:
    def _submit(self, db: Session, patient_id: str) -> InsuranceClaim:
        return ClaimService(db).submit(
            patient_id,
            policy_number="POL-1",
            policy_provider="Acme Health",
            claim_amount=1200,
            claim_type="outpatient",
            description="Clinic visit",
            supporting_documents=["/uploads/1-receipt.pdf"],
        )

    def test_submit(self, db: Session, patient):
        claim = self._submit(db, patient.id)

        assert claim.status == "submitted"
        assert claim.agent_id is None
        assert claim.supporting_documents == ["/uploads/1-receipt.pdf"]
        assert _actions(db) == ["submit_claim"]

    @pytest.mark.parametrize(
        "overrides",
        [{"claim_type": "dental"}, {"claim_amount": 0}, {"policy_number": ""}],
    )
    def test_submit_validation(self, db: Session, patient, overrides):
        kwargs = {
            "policy_number": "POL-1",
            "policy_provider": "Acme Health",
            "claim_amount": 1200,
            "claim_type": "outpatient",
            "description": "Clinic visit",
        }
        kwargs.update(overrides)
        with pytest.raises(ValidationError):
            ClaimService(db).submit(patient.id, **kwargs)
        assert db.query(InsuranceClaim).count() == 0

    def test_update_status_assigns_agent(self, db: Session, patient, insurer):
        claim = self._submit(db, patient.id)

        updated = ClaimService(db).update_status(insurer.id, claim.id, "approved", "Covered")

        assert updated.status == "approved"
        assert updated.agent_id == insurer.id
        assert updated.review_notes == "Covered"
        entry = db.query(LedgerEntry).filter(LedgerEntry.action_type == "update_claim_status").one()
        assert entry.metadata_json == {"previous_status": "submitted", "new_status": "approved"}
        assert LedgerService(db).verify_integrity()

    def test_update_status_rejects_unknown_status(self, db: Session, patient, insurer):
        claim = self._submit(db, patient.id)
        with pytest.raises(ValidationError):
            ClaimService(db).update_status(insurer.id, claim.id, "lost")

    def test_update_unknown_claim(self, db: Session, insurer):
        with pytest.raises(ResourceNotFoundError):
            ClaimService(db).update_status(insurer.id, "claim-404", "approved")

    def test_agents_see_their_own_and_unassigned_claims(self, db: Session, patient, other_patient, insurer):
        other_agent = User(
            id="insurer-F", username="insurer-F", email="insurer-F@example.com", full_name="Insurer F", role="insurance"
        )
        db.add(other_agent)
        db.commit()
        reviewed_elsewhere = self._submit(db, patient.id)
        unassigned = self._submit(db, other_patient.id)
        ClaimService(db).update_status(other_agent.id, reviewed_elsewhere.id, "under_review")

        visible = {c.id for c in ClaimService(db).list_for_actor(insurer)}
        assert visible == {unassigned.id}

        own = {c.id for c in ClaimService(db).list_for_actor(patient)}
        assert own == {reviewed_elsewhere.id}


def test_stats_per_role(db: Session, record, doctor, pharmacy, insurer):
    AccessControlService(db).grant("patient-A", record.id, doctor.id)
    prescription = PrescriptionService(db).create(doctor.id, "patient-A", "Infection", MEDICATIONS)
    PrescriptionService(db).dispense(pharmacy.id, prescription.id)

    patient_stats = stats_for(db, record.patient)
    assert patient_stats["role"] == "patient"
    assert patient_stats["total_records"] == 1
    assert patient_stats["shared_records"] == 1
    assert patient_stats["ledger_transactions"] == 1

    doctor_stats = stats_for(db, doctor)
    assert doctor_stats["total_prescriptions"] == 1
    assert doctor_stats["dispensed_prescriptions"] == 1
    assert doctor_stats["shared_records"] == 1

    assert stats_for(db, pharmacy)["total_dispensed"] == 1
    assert stats_for(db, pharmacy)["dispensed_today"] == 1
    assert stats_for(db, insurer)["total_claims"] == 0


def test_chain_spans_every_workflow(db: Session, patient, doctor, pharmacy, insurer):
    record = RecordService(db).upload(
        patient.id, title="Scan", record_type="imaging", file_type="image/png", file_size=10, file_name="scan.png"
    )
    permission = AccessControlService(db).grant(patient.id, record.id, doctor.id)
    prescription = PrescriptionService(db).create(doctor.id, patient.id, "Sprain", MEDICATIONS[:1])
    PrescriptionService(db).dispense(pharmacy.id, prescription.id)
    claim = ClaimService(db).submit(
        patient.id,
        policy_number="POL-2",
        policy_provider="Acme Health",
        claim_amount=90,
        claim_type="pharmacy",
        description="Medication",
    )
    ClaimService(db).update_status(insurer.id, claim.id, "paid")
    AccessControlService(db).revoke(patient.id, permission.id)

    entries = db.query(LedgerEntry).order_by(LedgerEntry.sequence).all()
    assert [e.action_type for e in entries] == [
        "upload_record",
        "grant_access",
        "create_prescription",
        "dispense_prescription",
        "submit_claim",
        "update_claim_status",
        "revoke_access",
    ]
    assert [e.sequence for e in entries] == list(range(1, 8))
    assert LedgerService(db).verify_integrity()
