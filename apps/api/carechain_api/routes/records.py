"""Medical record endpoints."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from carechain_api.access.service import AccessControlService
from carechain_api.auth.actor import get_current_user
from carechain_api.db.session import get_db
from carechain_api.models import User
from carechain_api.services.records import RecordService

router = APIRouter(prefix="/v1", tags=["medical-records"])


class RecordUpload(BaseModel):
    """Record metadata. File bytes are not accepted; uploads are stubbed."""

    title: str
    record_type: str = Field(..., description="lab_report, imaging, prescription, etc.")
    file_name: str
    file_type: str = Field(..., description="MIME type of the original file")
    file_size: int = Field(..., ge=0)
    description: Optional[str] = None


class RecordResponse(BaseModel):
    """Medical record response."""

    id: str
    patient_id: str
    title: str
    description: Optional[str] = None
    file_type: str
    file_url: str
    file_size: int
    record_type: str
    uploaded_at: datetime

    class Config:
        from_attributes = True


@router.post("/medical-records", response_model=RecordResponse, status_code=status.HTTP_201_CREATED)
async def upload_record(
    data: RecordUpload,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Register a medical record for the calling patient."""
    return RecordService(db).upload(
        user.id,
        title=data.title,
        record_type=data.record_type,
        file_type=data.file_type,
        file_size=data.file_size,
        file_name=data.file_name,
        description=data.description,
    )


@router.get("/medical-records", response_model=list[RecordResponse])
async def list_records(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Records owned by the calling patient."""
    return RecordService(db).list_for_patient(user.id)


@router.get("/medical-records/shared", response_model=list[RecordResponse])
async def list_shared_records(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Records shared with the caller through an active permission."""
    return AccessControlService(db).list_accessible_records(user.id)


@router.get("/medical-records/{record_id}", response_model=RecordResponse)
async def get_record(
    record_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """A single record, for its owner or an active grantee."""
    return RecordService(db).get_for_actor(user.id, record_id)
