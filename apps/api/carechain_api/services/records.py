"""Medical record uploads (file storage is stubbed)."""

import logging
import time
from typing import Optional

from carechain_api.access.service import AccessControlService
from carechain_api.errors import AuthorizationError, ValidationError
from carechain_api.models import MedicalRecord
from carechain_api.services.base import BaseService
from carechain_api.settings import get_settings

logger = logging.getLogger(__name__)


class RecordService(BaseService):
    """Create and read patient-owned medical records."""

    def upload(
        self,
        patient_id: str,
        title: str,
        record_type: str,
        file_type: str,
        file_size: int,
        file_name: str,
        description: Optional[str] = None,
    ) -> MedicalRecord:
        """Store record metadata under a stub file reference and audit it."""
        self._enforce_actor(patient_id)
        if not title or not record_type or not file_name:
            raise ValidationError("title, record_type and file_name are required")
        if file_size < 0:
            raise ValidationError("file_size must not be negative", {"file_size": file_size})

        prefix = get_settings().upload_url_prefix.rstrip("/")
        record = MedicalRecord(
            patient_id=patient_id,
            title=title,
            description=description or "",
            file_type=file_type,
            file_url=f"{prefix}/{int(time.time() * 1000)}-{file_name}",
            file_size=file_size,
            record_type=record_type,
        )
        with self._unit_of_work():
            self.db.add(record)
            self.db.flush()
            self.ledger.append(
                patient_id,
                "upload_record",
                "medical_record",
                record.id,
                {"title": title, "file_type": file_type},
            )
        self.db.refresh(record)
        logger.info("Medical record uploaded", extra={"patient_id": patient_id, "record_id": record.id})
        return record

    def list_for_patient(self, patient_id: str) -> list[MedicalRecord]:
        """Records owned by patient_id, newest first."""
        return (
            self.db.query(MedicalRecord)
            .filter(MedicalRecord.patient_id == patient_id)
            .order_by(MedicalRecord.uploaded_at.desc())
            .all()
        )

    def get_for_actor(self, actor_id: str, record_id: str) -> MedicalRecord:
        """Return the record if actor_id owns it or holds an active grant."""
        access = AccessControlService(self.db, self.ledger)
        if not access.can_view(actor_id, record_id):
            raise AuthorizationError("Access denied. You do not have access to this record.", {"record_id": record_id})
        return self.db.query(MedicalRecord).filter(MedicalRecord.id == record_id).one()
