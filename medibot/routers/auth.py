from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from medibot.core.database import get_db
from medibot.schemas.auth import (
    SignUpRequest, SignInRequest, RefreshTokenRequest,
    ForgotPasswordRequest, ResetPasswordRequest,
)
from medibot.services.auth_service import AuthService
from medibot.utils.errors import UserNotFoundError
from medibot.dependencies.auth import get_current_user
from medibot.dependencies.rate_limit import rate_limit
from medibot.utils.helpers import get_client_ip
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/sign-up", status_code=201)
async def sign_up(
    payload: SignUpRequest,
    request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    """
    Register with email/password and start a session
    - Role defaults to patient
    - The role profile is created with the account
    """
    AuthService.sign_up(
        db=db,
        email=payload.email,
        password=payload.password,
        role=payload.role,
        name=payload.name,
    )
    result = AuthService.sign_in(
        db=db,
        email=payload.email,
        password=payload.password,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent", ""),
    )
    return {"success": True, "data": result}


@router.post("/sign-in", status_code=200)
async def sign_in(
    payload: SignInRequest,
    request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    result = AuthService.sign_in(
        db=db,
        email=payload.email,
        password=payload.password,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent", ""),
    )
    return {"success": True, "data": result}


@router.post("/refresh", status_code=200)
async def refresh_tokens(
    payload: RefreshTokenRequest,
    request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    """Rotate the refresh token and issue a new access token."""
    result = AuthService.refresh_tokens(
        db=db,
        refresh_token=payload.refresh_token,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent", ""),
    )
    return {"success": True, "data": result}


@router.post("/sign-out", status_code=200)
async def sign_out(
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    AuthService.sign_out(db, current_user["sub"], current_user["jti"])
    return {"success": True, "data": {"message": "Signed out"}}


@router.get("/session", status_code=200)
async def get_session(
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Current session user: id, email, role and profile name."""
    return {"success": True, "data": AuthService.get_session_user(db, current_user["sub"])}


@router.post("/forgot-password", status_code=200)
async def forgot_password(
    payload: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    """Request a password reset email."""
    try:
        result = AuthService.send_password_reset(db=db, email=payload.email)
        return {"success": True, "data": result}
    except UserNotFoundError:
        # Don't reveal whether the email exists
        return {"success": True, "data": {"message": "If the email exists, a reset link was sent."}}
    except Exception as e:
        logger.error("Password reset request failed", exc_info=e)
        raise HTTPException(status_code=400, detail="Could not send the password reset email")


@router.post("/reset-password", status_code=200)
async def reset_password(
    payload: ResetPasswordRequest,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    """Reset password using the token sent by email."""
    result = AuthService.reset_password(db=db, token=payload.token, new_password=payload.new_password)
    return {"success": True, "data": result}
