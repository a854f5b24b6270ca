"""Base service class with transactional audit guardrails."""

import logging
from contextlib import contextmanager
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from carechain_api.errors import StorageError, ValidationError
from carechain_api.ledger.service import LedgerService

logger = logging.getLogger(__name__)


class BaseService:
    """Base service whose mutations commit together with their ledger entry."""

    def __init__(self, db: Session, ledger: Optional[LedgerService] = None):
        """Initialize service with a session and the ledger sharing it."""
        self.db = db
        self.ledger = ledger or LedgerService(db)

    def _enforce_actor(self, actor_id: Optional[str]) -> str:
        """Enforce actor_id is set and return it."""
        if not actor_id:
            raise ValidationError("actor_id must be provided for audited operations")
        return actor_id

    @contextmanager
    def _unit_of_work(self):
        """Commit the state change and its ledger entry together, or neither."""
        try:
            yield
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Unit of work rolled back: {e}")
            raise StorageError(f"Write failed: {e}") from e
        except Exception:
            self.db.rollback()
            raise
