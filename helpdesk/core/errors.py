from __future__ import annotations

from typing import Any, Iterable, Sequence, TypeVar

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class HelpdeskError(Exception):
    """Base class for every error that is reported to API callers."""

    code = "error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, *, fields: Sequence[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.fields = list(fields or [])

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "error": self.code,
            "message": self.message,
            "fields": self.fields,
        }


class ValidationError(HelpdeskError):
    code = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(HelpdeskError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(HelpdeskError):
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(HelpdeskError):
    code = "conflict"
    status_code = status.HTTP_409_CONFLICT


class InternalError(HelpdeskError):
    code = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Internal server error.", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


def _field_name(err: dict[str, Any]) -> str:
    # FastAPI prefixes locations with "body"/"query"/"path".
    loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
    return ".".join(loc) or "__root__"


def _unique(names: Iterable[str]) -> list[str]:
    out: list[str] = []
    for name in names:
        if name not in out:
            out.append(name)
    return out


def validation_error_from(errors: Sequence[dict[str, Any]]) -> ValidationError:
    fields = _unique(_field_name(err) for err in errors)
    missing = _unique(_field_name(err) for err in errors if err.get("type") == "missing")
    if missing and len(missing) == len(fields):
        message = f"Missing required fields: {', '.join(missing)}."
    else:
        invalid = [err for err in errors if err.get("type") != "missing"]
        detail = invalid[0].get("msg", "invalid input") if invalid else "invalid input"
        message = f"Invalid value for {', '.join(fields)}: {detail}."
    return ValidationError(message, fields=fields)


def validate_payload(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    """Build ``model`` from ``data`` or raise :class:`ValidationError` naming the bad fields."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise validation_error_from(exc.errors()) from exc


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HelpdeskError)
    async def _helpdesk_error(request: Request, exc: HelpdeskError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("{method} {path} failed: {error}", method=request.method, path=request.url.path, error=exc.message)
        else:
            logger.info(
                "{method} {path} rejected ({code}): {error}",
                method=request.method,
                path=request.url.path,
                code=exc.code,
                error=exc.message,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = validation_error_from(exc.errors())
        logger.info("{method} {path} rejected: {error}", method=request.method, path=request.url.path, error=error.message)
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:  # noqa: ARG001
        logger.exception("Unhandled error for {method} {path}", method=request.method, path=request.url.path)
        error = InternalError()
        return JSONResponse(status_code=error.status_code, content=error.to_dict())
