from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from datetime import datetime, timezone
from medibot.core.constants import UserRole
from medibot.core.database import get_db
from medibot.core.security import decode_token
from medibot.models.user import User
from medibot.models.session import UserSession
from medibot.services.role_router import effective_role

security = HTTPBearer()

def get_current_user_from_token(
    token: str,
    db: Session,
):
    """
    Verify a JWT access token string and return its payload.
    """
    payload = decode_token(token)

    if payload is None or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )

    user_id = int(payload.get("sub"))
    jti = payload.get("jti")

    # Check if token is revoked
    session = db.query(UserSession).filter(
        UserSession.user_id == user_id,
        UserSession.token_jti == jti,
        UserSession.is_revoked == False,
    ).first()

    if not session:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token revoked or invalid",
        )

    now = datetime.now(timezone.utc).replace(tzinfo=None)
    if session.expires_at and session.expires_at < now:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
        )

    user = db.query(User).filter(User.id == user_id).first()
    if not user or user.is_deleted:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return {
        **payload,
        "jti": jti,
    }

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
):
    """Verify JWT token and return its payload"""
    return get_current_user_from_token(credentials.credentials, db)

async def get_current_account(
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    """Load the user row behind the token; the role is read from here, not from the token"""
    return db.query(User).filter(User.id == int(current_user["sub"])).first()


def _require_role(user: User, role: UserRole, detail: str) -> User:
    if effective_role(user.role) is not role:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
    return user

async def get_current_patient(
    user: User = Depends(get_current_account),
) -> User:
    """Verify current user is a patient"""
    return _require_role(user, UserRole.PATIENT, "Only patients can access this resource")

async def get_current_pharmacy_admin(
    user: User = Depends(get_current_account),
) -> User:
    """Verify current user administers a pharmacy"""
    return _require_role(user, UserRole.PHARMACY_ADMIN, "Pharmacy admin access required")

async def get_current_super_admin(
    user: User = Depends(get_current_account),
) -> User:
    """Verify current user is a super admin"""
    return _require_role(user, UserRole.SUPER_ADMIN, "Super admin access required")

async def get_current_provider(
    user: User = Depends(get_current_account),
) -> User:
    """Verify current user is a healthcare provider"""
    return _require_role(user, UserRole.HEALTHCARE_PROVIDER, "Only healthcare providers can access this resource")
