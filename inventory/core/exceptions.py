"""
서비스 계층 예외: 각 클래스가 HTTP 상태코드와 클라이언트용 메시지를 가짐

main.py의 exception handler가 {"success": false, "message": ...} 형태로 변환한다.
서버 로그에는 더 구체적인 원인을 남기고, 클라이언트에는 아래 메시지만 노출.
"""
from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, errors: list[str] | None = None):
        if message is not None:
            self.message = message
        self.errors = errors
        super().__init__(self.message)


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    message = "Resource already exists"


class WeakPasswordError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Password does not meet security requirements"


class InvalidCredentialsError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid email or password"


class AccountDeactivatedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Account has been deactivated"


class AccountLockedError(AppError):
    status_code = status.HTTP_423_LOCKED
    message = "Account is temporarily locked due to too many failed attempts"


class MissingTokenError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Access token required"


class InvalidTokenError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid or expired token"


class UserUnavailableError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "User not found or inactive"


class StaleTokenError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Password has been changed. Please login again"


class UnauthenticatedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authentication required"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Insufficient permissions"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class RateLimitedError(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    message = "Too many requests from this IP, please try again later"
