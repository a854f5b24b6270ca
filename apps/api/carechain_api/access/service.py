"""Access control for patient-owned medical records."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from carechain_api.errors import AuthorizationError, PermissionNotFoundError, ResourceNotFoundError, ValidationError
from carechain_api.ledger.service import LedgerService
from carechain_api.models import AccessPermission, MedicalRecord, User
from carechain_api.services.base import BaseService
from carechain_api.settings import get_settings
from carechain_api.utils.metrics import access_decisions

logger = logging.getLogger(__name__)

ACCESS_LEVELS = ("view", "download")


class AccessControlService(BaseService):
    """Grant, revoke and inspect view permissions on medical records.

    Only the owning patient may grant or list permissions for a record, and
    only the original granter may revoke. A missing record is reported as an
    authorization failure so callers cannot learn which record ids exist.
    Every grant and revoke appends exactly one ledger entry in the same
    transaction as the permission change.
    """

    def __init__(self, db: Session, ledger: Optional[LedgerService] = None):
        """Initialize access control service."""
        super().__init__(db, ledger)

    def _get_owned_record(self, owner_id: str, record_id: str, operation: str) -> MedicalRecord:
        """Return the record if owner_id owns it, otherwise deny."""
        record = self.db.query(MedicalRecord).filter(MedicalRecord.id == record_id).first()
        if record is None or record.patient_id != owner_id:
            access_decisions.labels(operation=operation, outcome="denied").inc()
            logger.warning(
                "Access control denied: requester does not own record",
                extra={"requester_id": owner_id, "record_id": record_id, "operation": operation},
            )
            raise AuthorizationError(
                "Access denied. You can only manage access to your own records.",
                {"record_id": record_id},
            )
        return record

    def grant(
        self,
        owner_id: str,
        record_id: str,
        grantee_id: str,
        access_level: Optional[str] = None,
    ) -> AccessPermission:
        """Grant grantee_id access to a record owned by owner_id.

        Duplicate grants to the same grantee create independent permissions.
        """
        self._enforce_actor(owner_id)
        access_level = access_level or get_settings().default_access_level
        if access_level not in ACCESS_LEVELS:
            raise ValidationError("Unknown access level", {"access_level": access_level})
        if not grantee_id:
            raise ValidationError("grantee_id must be provided")

        self._get_owned_record(owner_id, record_id, "grant")

        grantee = self.db.query(User).filter(User.id == grantee_id).first()
        if grantee is None:
            access_decisions.labels(operation="grant", outcome="unknown_grantee").inc()
            raise ResourceNotFoundError("Grantee not found", {"grantee_id": grantee_id})

        permission = AccessPermission(
            record_id=record_id,
            granted_to_id=grantee_id,
            granted_by_id=owner_id,
            access_level=access_level,
            granted_at=datetime.utcnow(),
            is_active=True,
        )
        with self._unit_of_work():
            self.db.add(permission)
            self.db.flush()
            self.ledger.append(
                owner_id,
                "grant_access",
                "medical_record",
                record_id,
                {"granted_to": grantee_id, "access_level": access_level, "permission_id": permission.id},
            )
        self.db.refresh(permission)

        access_decisions.labels(operation="grant", outcome="allowed").inc()
        logger.info(
            "Access granted",
            extra={"owner_id": owner_id, "record_id": record_id, "grantee_id": grantee_id},
        )
        return permission

    def revoke(self, requester_id: str, permission_id: str) -> AccessPermission:
        """Revoke a permission. Only its granter may do so.

        Revoking an already revoked permission succeeds again: revoked_at is
        re-stamped and another ledger entry is appended.
        """
        self._enforce_actor(requester_id)
        permission = (
            self.db.query(AccessPermission)
            .filter(AccessPermission.id == permission_id)
            .first()
        )
        if permission is None:
            access_decisions.labels(operation="revoke", outcome="not_found").inc()
            raise PermissionNotFoundError("Permission not found", {"permission_id": permission_id})

        if permission.granted_by_id != requester_id:
            access_decisions.labels(operation="revoke", outcome="denied").inc()
            logger.warning(
                "Access control denied: requester did not grant permission",
                extra={"requester_id": requester_id, "permission_id": permission_id},
            )
            raise AuthorizationError(
                "Access denied. You can only revoke permissions you granted.",
                {"permission_id": permission_id},
            )

        with self._unit_of_work():
            permission.is_active = False
            permission.revoked_at = datetime.utcnow()
            self.db.flush()
            self.ledger.append(
                requester_id,
                "revoke_access",
                "access_permission",
                permission_id,
                {"record_id": permission.record_id, "revoked_from": permission.granted_to_id},
            )
        self.db.refresh(permission)

        access_decisions.labels(operation="revoke", outcome="allowed").inc()
        logger.info(
            "Access revoked",
            extra={"requester_id": requester_id, "permission_id": permission_id},
        )
        return permission

    def list_permissions_for_record(self, requester_id: str, record_id: str) -> list[AccessPermission]:
        """Active and revoked permissions on a record, visible to its owner only."""
        self._get_owned_record(requester_id, record_id, "list")
        return (
            self.db.query(AccessPermission)
            .filter(AccessPermission.record_id == record_id)
            .order_by(AccessPermission.granted_at.asc())
            .all()
        )

    def list_permissions_for_owner(self, owner_id: str) -> list[AccessPermission]:
        """Every permission across the records owned by owner_id."""
        return (
            self.db.query(AccessPermission)
            .join(MedicalRecord, AccessPermission.record_id == MedicalRecord.id)
            .filter(MedicalRecord.patient_id == owner_id)
            .order_by(AccessPermission.granted_at.asc())
            .all()
        )

    def list_accessible_records(self, grantee_id: str) -> list[MedicalRecord]:
        """Records for which grantee_id holds at least one active permission."""
        return (
            self.db.query(MedicalRecord)
            .join(AccessPermission, AccessPermission.record_id == MedicalRecord.id)
            .filter(
                AccessPermission.granted_to_id == grantee_id,
                AccessPermission.is_active == True,  # noqa: E712
            )
            .distinct()
            .order_by(MedicalRecord.uploaded_at.desc())
            .all()
        )

    def can_view(self, actor_id: str, record_id: str) -> bool:
        """True if actor_id owns the record or holds an active permission on it."""
        record = self.db.query(MedicalRecord).filter(MedicalRecord.id == record_id).first()
        if record is None:
            return False
        if record.patient_id == actor_id:
            return True
        active = (
            self.db.query(AccessPermission)
            .filter(
                AccessPermission.record_id == record_id,
                AccessPermission.granted_to_id == actor_id,
                AccessPermission.is_active == True,  # noqa: E712
            )
            .first()
        )
        return active is not None
