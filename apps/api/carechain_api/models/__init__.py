"""Database models - import all models here for Alembic discovery."""

from carechain_api.models.claim import InsuranceClaim
from carechain_api.models.ledger import LedgerEntry
from carechain_api.models.prescription import Prescription, PrescriptionItem
from carechain_api.models.record import AccessPermission, MedicalRecord
from carechain_api.models.user import User

__all__ = [
    "User",
    "MedicalRecord",
    "AccessPermission",
    "Prescription",
    "PrescriptionItem",
    "InsuranceClaim",
    "LedgerEntry",
]
