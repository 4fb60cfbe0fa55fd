"""Current user endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from medibot.core.database import get_db
from medibot.dependencies.auth import get_current_account
from medibot.models.user import User
from medibot.services.auth_service import AuthService
from medibot.services.dashboard_service import DashboardService

router = APIRouter(tags=["users"])


@router.get("/users/me")
async def get_me(user: User = Depends(get_current_account)):
    data = AuthService.session_user(user)
    data["status"] = user.status
    data["last_login"] = user.last_login
    return {"success": True, "data": data}


@router.get("/dashboard")
async def get_dashboard(
    user: User = Depends(get_current_account),
    db: Session = Depends(get_db),
):
    """The view for the caller's role: ``{role, view, data}``."""
    return {"success": True, "data": DashboardService.for_user(db, user)}
