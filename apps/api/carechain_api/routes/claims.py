"""Insurance claim endpoints."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from carechain_api.auth.actor import get_current_user
from carechain_api.db.session import get_db
from carechain_api.models import User
from carechain_api.services.claims import ClaimService

router = APIRouter(prefix="/v1", tags=["claims"])


class ClaimCreate(BaseModel):
    """Claim submission request."""

    policy_number: str
    policy_provider: str
    claim_amount: int = Field(..., gt=0)
    claim_type: str = Field(..., description="hospitalization, outpatient or pharmacy")
    description: str
    supporting_documents: list[str] = Field(default_factory=list)


class ClaimStatusUpdate(BaseModel):
    """Claim status update request."""

    status: str = Field(..., description="submitted, under_review, approved, rejected or paid")
    review_notes: Optional[str] = None


class ClaimResponse(BaseModel):
    """Claim response."""

    id: str
    patient_id: str
    agent_id: Optional[str] = None
    policy_number: str
    policy_provider: str
    claim_amount: int
    claim_type: str
    description: str
    status: str
    supporting_documents: list[str] = Field(default_factory=list)
    review_notes: Optional[str] = None
    blockchain_hash: str
    submitted_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


@router.post("/claims", response_model=ClaimResponse, status_code=status.HTTP_201_CREATED)
async def submit_claim(
    data: ClaimCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Submit a claim for the calling patient."""
    return ClaimService(db).submit(user.id, **data.model_dump())


@router.get("/claims", response_model=list[ClaimResponse])
async def list_claims(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Claims visible to the caller."""
    return ClaimService(db).list_for_actor(user)


@router.patch("/claims/{claim_id}", response_model=ClaimResponse)
async def update_claim_status(
    claim_id: str,
    data: ClaimStatusUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Review a claim."""
    return ClaimService(db).update_status(user.id, claim_id, data.status, data.review_notes)
