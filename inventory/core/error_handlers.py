from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.config import settings
from core.exceptions import AppError
from core.logger import get_logger

logger = get_logger("errors")


def _error_response(status_code: int, message: str, **extra) -> JSONResponse:
    """실패 응답 공통 형태: {"success": false, "message": ...}"""
    body = {"success": False, "message": message}
    body.update({k: v for k, v in extra.items() if v is not None})
    return JSONResponse(status_code=status_code, content=body)


def _field_name(loc: tuple) -> str:
    # ("body", "email") → "email", ("query", "page") → "page"
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header", "cookie")]
    return ".".join(parts) or str(loc[-1] if loc else "")


def register_exception_handlers(app: FastAPI) -> None:
    """서비스 예외 / 요청 검증 실패 / 예상치 못한 예외를 공통 응답으로 변환"""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        logger.info(
            f"{type(exc).__name__}: {exc.message}",
            extra={"extra_data": {
                "path": request.url.path,
                "method": request.method,
                "status": exc.status_code,
            }},
        )
        return _error_response(exc.status_code, exc.message, errors=exc.errors)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"field": _field_name(tuple(err.get("loc", ()))), "message": err.get("msg", "")}
            for err in exc.errors()
        ]
        return _error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", errors=errors)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        # 상세 내용은 서버 로그에만. 개발 모드에서만 메시지를 응답에 포함
        logger.exception(
            "Unhandled error",
            extra={"extra_data": {"path": request.url.path, "method": request.method}},
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            error=str(exc) if settings.is_development else None,
        )
