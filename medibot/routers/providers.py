"""Healthcare provider endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from medibot.cache.invalidation import invalidate
from medibot.core.database import get_db
from medibot.dependencies.auth import get_current_provider
from medibot.models.user import User
from medibot.schemas.patient import PrescriptionCreate, PrescriptionRead
from medibot.services.provider_service import ProviderService

router = APIRouter(prefix="/providers/me", tags=["providers"])


@router.get("/prescriptions", response_model=list[PrescriptionRead])
async def issued_prescriptions(
    user: User = Depends(get_current_provider),
    db: Session = Depends(get_db),
):
    return ProviderService.issued_prescriptions(db, user)


@router.post("/prescriptions", status_code=201)
async def issue_prescription(
    payload: PrescriptionCreate,
    user: User = Depends(get_current_provider),
    db: Session = Depends(get_db),
):
    prescription = ProviderService.issue_prescription(db, user, payload.model_dump())
    return {
        "success": True,
        "data": PrescriptionRead.model_validate(prescription),
        "invalidates": await invalidate("issue_prescription"),
    }
