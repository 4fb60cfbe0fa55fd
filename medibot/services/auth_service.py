from sqlalchemy.orm import Session
from medibot.models.user import User
from medibot.models.session import UserSession
from medibot.core.constants import UserRole
from medibot.core.security import (
    hash_password, verify_password, create_access_token,
    create_refresh_token, create_password_reset_token,
    decode_token, hash_token, TokenType,
)
from medibot.core.config import settings
from medibot.services import email_service
from medibot.services.profile_service import ProfileService
from datetime import datetime, timedelta, timezone
from medibot.utils.errors import (
    InvalidCredentialsError, UserNotFoundError, UserAlreadyExistsError,
)
import logging

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class AuthService:

    @staticmethod
    def sign_up(
        db: Session,
        email: str,
        password: str,
        role: str = UserRole.PATIENT.value,
        name: str | None = None,
        pharmacy_id: int | None = None,
    ) -> User:
        """
        Register a user and create the profile for their role
        - The role is stored on the user row
        - Exactly one role profile is created alongside it
        """
        email = email.strip().lower()
        existing_user = db.query(User).filter(User.email == email).first()
        if existing_user:
            raise UserAlreadyExistsError("Email already registered")

        role_enum = UserRole(role)
        new_user = User(
            email=email,
            password_hash=hash_password(password),
            role=role_enum.value,
            status="active",
        )
        db.add(new_user)
        db.flush()

        ProfileService.create_for_role(db, new_user, role_enum, name=name, pharmacy_id=pharmacy_id)
        db.commit()
        db.refresh(new_user)

        logger.info("Registered user %s with role %s", new_user.id, role_enum.value)
        return new_user

    @staticmethod
    def sign_in(db: Session, email: str, password: str, ip_address: str = "", user_agent: str = "") -> dict:
        """
        Email/password login
        - Verify credentials
        - Create access & refresh tokens
        - Track session
        """
        user = db.query(User).filter(User.email == email.strip().lower()).first()
        if not user or user.is_deleted or not verify_password(password, user.password_hash or ""):
            raise InvalidCredentialsError("Invalid email or password")

        if user.status == "suspended":
            raise InvalidCredentialsError("Account suspended. Contact support.")

        access_token, access_jti = create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role,
        )
        refresh_token, refresh_jti = create_refresh_token(user.id)

        now = _utcnow()
        session = UserSession(
            user_id=user.id,
            token_jti=access_jti,
            refresh_jti=refresh_jti,
            refresh_token_hash=hash_token(refresh_token),
            ip_address=ip_address,
            user_agent=user_agent,
            expires_at=now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_expires_at=now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )
        db.add(session)

        user.last_login = now
        db.commit()

        return AuthService._token_payload(user, access_token, refresh_token)

    @staticmethod
    def refresh_tokens(
        db: Session,
        refresh_token: str,
        ip_address: str = "",
        user_agent: str = "",
    ) -> dict:
        """
        Refresh access token using a valid refresh token with rotation.
        - Validate refresh JWT and session record
        - Rotate refresh token (new jti, hashed storage)
        - Issue new access token
        """
        payload = decode_token(refresh_token, TokenType.REFRESH)
        if not payload:
            raise InvalidCredentialsError("Invalid refresh token")

        user_id = int(payload.get("sub"))
        refresh_jti = payload.get("jti")
        if not refresh_jti:
            raise InvalidCredentialsError("Invalid refresh token")

        session = (
            db.query(UserSession)
            .filter(
                UserSession.user_id == user_id,
                UserSession.refresh_jti == refresh_jti,
                UserSession.is_revoked == False,
            )
            .first()
        )
        if not session:
            raise InvalidCredentialsError("Invalid or revoked refresh token")

        now = _utcnow()
        if session.refresh_expires_at and session.refresh_expires_at < now:
            session.is_revoked = True
            session.revoked_at = now
            session.revoked_reason = "refresh_expired"
            db.commit()
            raise InvalidCredentialsError("Refresh token expired")

        if session.refresh_token_hash != hash_token(refresh_token):
            session.is_revoked = True
            session.revoked_at = now
            session.revoked_reason = "refresh_mismatch"
            db.commit()
            raise InvalidCredentialsError("Invalid refresh token")

        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise UserNotFoundError("User not found")

        access_token, access_jti = create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role,
        )
        new_refresh_token, new_refresh_jti = create_refresh_token(user.id)

        # Rotate session tokens
        session.token_jti = access_jti
        session.refresh_jti = new_refresh_jti
        session.refresh_token_hash = hash_token(new_refresh_token)
        session.refresh_expires_at = now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        session.expires_at = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        session.ip_address = ip_address
        session.user_agent = user_agent

        user.last_login = now
        db.commit()

        return AuthService._token_payload(user, access_token, new_refresh_token)

    @staticmethod
    def sign_out(db: Session, user_id: int, jti: str) -> bool:
        """Revoke the session that issued the current access token."""
        session = db.query(UserSession).filter(
            UserSession.user_id == int(user_id),
            UserSession.token_jti == jti,
        ).first()
        if not session:
            return False

        session.is_revoked = True
        session.revoked_at = _utcnow()
        session.revoked_reason = "logout"
        session.refresh_token_hash = ""
        db.commit()
        return True

    @staticmethod
    def revoke_all_sessions(db: Session, user_id: int, reason: str) -> int:
        now = _utcnow()
        sessions = db.query(UserSession).filter(
            UserSession.user_id == int(user_id),
            UserSession.is_revoked == False,
        ).all()
        for session in sessions:
            session.is_revoked = True
            session.revoked_at = now
            session.revoked_reason = reason
        return len(sessions)

    @staticmethod
    def get_session_user(db: Session, user_id: int) -> dict:
        user = db.query(User).filter(User.id == int(user_id)).first()
        if not user or user.is_deleted:
            raise UserNotFoundError("User not found")
        return AuthService.session_user(user)

    @staticmethod
    def session_user(user: User) -> dict:
        return {
            "id": user.id,
            "email": user.email,
            "role": user.role,
            "name": ProfileService.profile_name(user),
        }

    @staticmethod
    def send_password_reset(db: Session, email: str) -> dict:
        """Generate a password reset token for the given email and send an email."""
        user = db.query(User).filter(User.email == email.strip().lower()).first()
        if not user:
            raise UserNotFoundError("User not found")

        token, _ = create_password_reset_token(user.id)
        reset_url = f"{settings.FRONTEND_URL.rstrip('/')}/reset-password" if settings.FRONTEND_URL else None
        try:
            email_service.send_password_reset_email(
                user.email, ProfileService.profile_name(user) or user.email, token, reset_url
            )
        except Exception as e:
            logger.error("Failed to send password reset email", exc_info=e)
            raise Exception("Failed to send password reset email")

        return {"message": "Password reset email sent"}

    @staticmethod
    def reset_password(db: Session, token: str, new_password: str) -> dict:
        """Reset the user's password using a password-reset token."""
        payload = decode_token(token, TokenType.PASSWORD_RESET)
        if not payload:
            raise InvalidCredentialsError("Invalid or expired reset token")

        user = db.query(User).filter(User.id == int(payload.get("sub"))).first()
        if not user:
            raise UserNotFoundError("User not found")

        user.password_hash = hash_password(new_password)
        AuthService.revoke_all_sessions(db, user.id, "password_reset")
        db.commit()

        return {"message": "Password updated successfully"}

    @staticmethod
    def _token_payload(user: User, access_token: str, refresh_token: str) -> dict:
        return {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "token_type": "bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            "user": AuthService.session_user(user),
        }
