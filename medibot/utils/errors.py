"""Custom error definitions for API exceptions."""
from fastapi import HTTPException
from starlette import status


class Unauthorized(HTTPException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class InvalidCredentialsError(HTTPException):
    def __init__(self, detail: str = "Invalid credentials"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class UserNotFoundError(HTTPException):
    def __init__(self, detail: str = "User not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class UserAlreadyExistsError(HTTPException):
    def __init__(self, detail: str = "User already exists"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class PermissionDeniedError(HTTPException):
    def __init__(self, detail: str = "Permission denied"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnknownRoleError(HTTPException):
    def __init__(self, role: str | None = None):
        self.role = role
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=f"Unrecognised role: {role!r}")


class PharmacyNotAssignedError(HTTPException):
    def __init__(self, detail: str = "No pharmacy is assigned to this account"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InsufficientStockError(HTTPException):
    def __init__(self, medicine_id: int | None = None, requested: int | None = None):
        self.medicine_id = medicine_id
        self.requested = requested
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Insufficient stock for medicine {medicine_id} (requested {requested})",
        )


class InvalidStatusTransition(HTTPException):
    def __init__(self, current: str, target: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot change pharmacy status from {current} to {target}",
        )
