"""Early JWT check for requests that carry a bearer token.

Route dependencies (`get_current_user` and the role checks) still enforce
auth. This middleware rejects malformed, revoked or expired tokens before
routing and exposes the decoded payload as `request.state.auth`. Requests
without an Authorization header pass through untouched, which keeps the
public locator and auth endpoints open.
"""
from datetime import datetime, timezone
from starlette.requests import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from medibot.core.security import decode_token
from medibot.core.database import SessionLocal
from medibot.models.session import UserSession


def _reject(detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"detail": detail},
        headers={"WWW-Authenticate": "Bearer"},
    )


class JWTMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request.state.auth = None
        auth_header = request.headers.get("authorization")
        if not auth_header:
            return await call_next(request)

        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() != "bearer" or not token:
            return _reject("Invalid authorization header")

        payload = decode_token(token)
        if not payload or not payload.get("jti") or not payload.get("sub"):
            return _reject("Invalid token")

        db = SessionLocal()
        try:
            session = db.query(UserSession).filter(
                UserSession.user_id == int(payload["sub"]),
                UserSession.token_jti == payload["jti"],
                UserSession.is_revoked == False,
            ).first()
            expired = bool(
                session
                and session.expires_at
                and session.expires_at < datetime.now(timezone.utc).replace(tzinfo=None)
            )
        finally:
            db.close()

        if not session:
            return _reject("Token revoked or invalid")
        if expired:
            return _reject("Token expired")

        request.state.auth = payload
        return await call_next(request)
