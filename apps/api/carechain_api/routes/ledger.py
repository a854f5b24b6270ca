"""Audit ledger endpoints."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from carechain_api.auth.actor import get_current_user
from carechain_api.db.session import get_db
from carechain_api.ledger.service import LedgerService
from carechain_api.models import User

router = APIRouter(prefix="/v1", tags=["ledger"])


class LedgerEntryResponse(BaseModel):
    """Ledger entry response."""

    id: str
    sequence: int
    transaction_hash: str
    actor_id: str
    action_type: str
    resource_type: str
    resource_id: str
    metadata: dict = Field(default_factory=dict, validation_alias="metadata_json")
    previous_hash: str
    timestamp: datetime

    class Config:
        from_attributes = True


class IntegrityResponse(BaseModel):
    """Chain verification result."""

    valid: bool
    broken_at_sequence: Optional[int] = None
    entry_id: Optional[str] = None
    expected_previous_hash: Optional[str] = None
    found_previous_hash: Optional[str] = None


@router.get("/ledger/transactions", response_model=list[LedgerEntryResponse])
async def list_transactions(
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Ledger entries recorded for the caller's actions, newest first."""
    return LedgerService(db).list_entries(actor_id=user.id, limit=limit)


@router.get("/ledger/verify", response_model=IntegrityResponse)
async def verify_ledger(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Check chain linkage across the whole ledger."""
    service = LedgerService(db)
    if service.verify_integrity():
        return IntegrityResponse(valid=True)
    broken = service.find_broken_link()
    return IntegrityResponse(
        valid=False,
        broken_at_sequence=broken.sequence if broken else None,
        entry_id=broken.entry_id if broken else None,
        expected_previous_hash=broken.expected_previous_hash if broken else None,
        found_previous_hash=broken.found_previous_hash if broken else None,
    )

