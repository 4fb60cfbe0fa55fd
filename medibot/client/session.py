"""Client-side session context for the MediBot API.

Holds the signed-in user and tokens, and tells listeners when the session
changes. Failures come back as ``AuthResult.error`` carrying the server's
message; nothing is retried.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"
INITIAL_SESSION = "INITIAL_SESSION"

AuthListener = Callable[[str, Optional[dict]], Any]


@dataclass
class AuthResult:
    data: Optional[dict] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _error_message(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except ValueError:
        detail = None
    if isinstance(detail, list):
        # request validation errors
        detail = "; ".join(str(item.get("msg", item)) for item in detail)
    return detail or f"Request failed with status {response.status_code}"


class SessionContext:
    def __init__(self, client: httpx.AsyncClient):
        self.client = client
        self.user: Optional[dict] = None
        self.loading = True
        self.access_token: Optional[str] = None
        self.refresh_token: Optional[str] = None
        self._listeners: list[AuthListener] = []

    # ---- listeners ----

    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        """Register ``callback(event, user)``; the returned callable unsubscribes it."""
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, event: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, self.user)
            except Exception:
                logger.exception("Auth listener failed for %s", event)

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.access_token}"} if self.access_token else {}

    def _store(self, data: dict) -> None:
        self.access_token = data["access_token"]
        self.refresh_token = data["refresh_token"]
        self.user = data["user"]

    def _clear(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.user = None

    # ---- operations ----

    async def load_session(self, access_token: Optional[str] = None, refresh_token: Optional[str] = None) -> AuthResult:
        """Resolve the current user from stored tokens, then emit INITIAL_SESSION."""
        self.loading = True
        if access_token:
            self.access_token = access_token
        if refresh_token:
            self.refresh_token = refresh_token
        try:
            if not self.access_token:
                self.user = None
                return AuthResult()
            response = await self.client.get("/auth/session", headers=self.headers)
            if response.status_code != 200:
                message = _error_message(response)
                logger.error("Failed to load session: %s", message)
                self._clear()
                return AuthResult(error=message)
            self.user = response.json()["data"]
            return AuthResult(data={"user": self.user})
        finally:
            self.loading = False
            self._emit(INITIAL_SESSION)

    async def sign_up(self, email: str, password: str, role: str = "patient", name: Optional[str] = None) -> AuthResult:
        payload = {"email": email, "password": password, "role": role}
        if name:
            payload["name"] = name
        return await self._authenticate("/auth/sign-up", payload, SIGNED_IN)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        return await self._authenticate("/auth/sign-in", {"email": email, "password": password}, SIGNED_IN)

    async def refresh(self) -> AuthResult:
        if not self.refresh_token:
            return AuthResult(error="No refresh token")
        return await self._authenticate("/auth/refresh", {"refresh_token": self.refresh_token}, TOKEN_REFRESHED)

    async def sign_out(self) -> AuthResult:
        error = None
        if self.access_token:
            response = await self.client.post("/auth/sign-out", headers=self.headers)
            if response.status_code != 200:
                error = _error_message(response)
                logger.error("Sign out failed: %s", error)
        self._clear()
        self._emit(SIGNED_OUT)
        return AuthResult(error=error)

    async def _authenticate(self, path: str, payload: dict, event: str) -> AuthResult:
        response = await self.client.post(path, json=payload)
        if response.status_code not in (200, 201):
            message = _error_message(response)
            logger.error("%s failed: %s", path, message)
            return AuthResult(error=message)
        data = response.json()["data"]
        self._store(data)
        self._emit(event)
        return AuthResult(data=data)

    async def dashboard(self) -> AuthResult:
        """Fetch the role dashboard for the signed-in user."""
        response = await self.client.get("/dashboard", headers=self.headers)
        if response.status_code != 200:
            return AuthResult(error=_error_message(response))
        return AuthResult(data=response.json()["data"])
