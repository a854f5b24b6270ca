"""Audit ledger service with hash chaining."""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from carechain_api.errors import ChainForkError, LedgerValidationError, StorageError
from carechain_api.ledger.hashing import canonical_json, create_resource_hash, salted_digest
from carechain_api.models import LedgerEntry
from carechain_api.models.ledger import ACTION_TYPES, GENESIS_HASH, RESOURCE_TYPES
from carechain_api.utils.metrics import (
    chain_verifications,
    ledger_append_duration,
    ledger_append_failures,
    ledger_appends,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BrokenLink:
    """First position where the chain linkage does not hold."""

    sequence: int
    entry_id: str
    expected_previous_hash: str
    found_previous_hash: str


class LedgerService:
    """Tamper-evident audit ledger with hash chaining.

    Appends are flushed inside the caller's transaction so that the state
    change being audited and its ledger entry commit or roll back together.
    """

    def __init__(self, db: Session):
        """Initialize ledger service."""
        self.db = db

    def _get_tip(self) -> Optional[LedgerEntry]:
        """Get the most recently appended entry."""
        return (
            self.db.query(LedgerEntry)
            .order_by(LedgerEntry.sequence.desc())
            .first()
        )

    @staticmethod
    def _validate(actor_id, action_type, resource_type, resource_id, metadata):
        for name, value in (
            ("actor_id", actor_id),
            ("action_type", action_type),
            ("resource_type", resource_type),
            ("resource_id", resource_id),
        ):
            if not value or not isinstance(value, str):
                raise LedgerValidationError(f"{name} must be a non-empty string", {name: value})
        if action_type not in ACTION_TYPES:
            raise LedgerValidationError("Unknown action type", {"action_type": action_type})
        if resource_type not in RESOURCE_TYPES:
            raise LedgerValidationError("Unknown resource type", {"resource_type": resource_type})
        if not isinstance(metadata, dict):
            raise LedgerValidationError("metadata must be a mapping")
        try:
            canonical_json(metadata)
        except (TypeError, ValueError) as e:
            raise LedgerValidationError(f"metadata is not serializable: {e}") from e

    def append(
        self,
        actor_id: str,
        action_type: str,
        resource_type: str,
        resource_id: str,
        metadata: Optional[dict] = None,
    ) -> LedgerEntry:
        """Append an entry chained to the current tip.

        Raises ChainForkError if another caller appended from the same tip
        first and StorageError if the write is rejected. In both cases the
        session is rolled back and no entry exists.
        """
        metadata = {} if metadata is None else metadata
        self._validate(actor_id, action_type, resource_type, resource_id, metadata)

        started = time.perf_counter()
        tip = self._get_tip()
        previous_hash = tip.transaction_hash if tip else GENESIS_HASH
        sequence = tip.sequence + 1 if tip else 1

        # Never move backwards relative to the tip, even if the clock does
        timestamp = datetime.utcnow()
        if tip and tip.timestamp > timestamp:
            timestamp = tip.timestamp

        entry_data = {
            "actor_id": actor_id,
            "action_type": action_type,
            "resource_type": resource_type,
            "resource_id": resource_id,
            "metadata": metadata,
            "previous_hash": previous_hash,
            "timestamp": timestamp.isoformat(),
        }
        transaction_hash = salted_digest(entry_data)

        entry = LedgerEntry(
            sequence=sequence,
            transaction_hash=transaction_hash,
            actor_id=actor_id,
            action_type=action_type,
            resource_type=resource_type,
            resource_id=resource_id,
            metadata_json=metadata,
            previous_hash=previous_hash,
            timestamp=timestamp,
        )

        try:
            self.db.add(entry)
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            current_tip = self._get_tip()
            if current_tip is not None and current_tip.sequence >= sequence:
                ledger_append_failures.labels(reason="fork").inc()
                logger.warning(
                    "Ledger append lost the race for the tip",
                    extra={"actor_id": actor_id, "action_type": action_type, "sequence": sequence},
                )
                raise ChainForkError(
                    "Ledger tip changed during append",
                    {"expected_previous_hash": previous_hash, "sequence": sequence},
                ) from e
            ledger_append_failures.labels(reason="storage").inc()
            raise StorageError(f"Ledger write rejected: {e.orig}") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            ledger_append_failures.labels(reason="storage").inc()
            logger.error(
                f"Ledger write failed: {e}",
                extra={"actor_id": actor_id, "action_type": action_type},
            )
            raise StorageError(f"Ledger write failed: {e}") from e

        ledger_appends.labels(action_type=action_type).inc()
        ledger_append_duration.observe(time.perf_counter() - started)
        logger.info(
            "Ledger entry appended",
            extra={
                "actor_id": actor_id,
                "action_type": action_type,
                "resource_type": resource_type,
                "resource_id": resource_id,
                "sequence": sequence,
            },
        )
        return entry

    def find_broken_link(self) -> Optional[BrokenLink]:
        """Return the first entry whose previous_hash does not match its predecessor."""
        entries = (
            self.db.query(LedgerEntry)
            .order_by(LedgerEntry.sequence.asc())
            .all()
        )

        expected = GENESIS_HASH
        for entry in entries:
            if entry.previous_hash != expected:
                return BrokenLink(
                    sequence=entry.sequence,
                    entry_id=entry.id,
                    expected_previous_hash=expected,
                    found_previous_hash=entry.previous_hash,
                )
            expected = entry.transaction_hash
        return None

    def verify_integrity(self) -> bool:
        """Verify hash chain linkage.

        Only linkage is checked. Stored hashes cannot be recomputed because
        the salt is discarded, so payload edits are not detected here.
        """
        broken = self.find_broken_link()
        if broken is not None:
            chain_verifications.labels(result="broken").inc()
            logger.warning(
                "Ledger chain linkage broken",
                extra={"sequence": broken.sequence, "entry_id": broken.entry_id},
            )
            return False
        chain_verifications.labels(result="valid").inc()
        return True

    def list_entries(
        self,
        actor_id: Optional[str] = None,
        resource_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[LedgerEntry]:
        """List entries newest first, optionally filtered by actor or resource."""
        query = self.db.query(LedgerEntry)
        if actor_id:
            query = query.filter(LedgerEntry.actor_id == actor_id)
        if resource_id:
            query = query.filter(LedgerEntry.resource_id == resource_id)
        query = query.order_by(LedgerEntry.sequence.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def create_resource_hash(resource_data) -> str:
        """Salted digest for stamping prescriptions and claims."""
        return create_resource_hash(resource_data)
