"""Translation of application errors into HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from dnd_companion.exceptions import (
    AlreadyExistsError,
    CompanionError,
    CredentialError,
    NotFoundError,
    PermissionDeniedError,
    ResetTokenError,
    TokenError,
    ValidationError,
)
from dnd_companion.schemas.fields import EMPTY_MESSAGE

logger = logging.getLogger(__name__)

STATUS_CODES: list[tuple[type[CompanionError], int]] = [
    (CredentialError, status.HTTP_401_UNAUTHORIZED),
    (TokenError, status.HTTP_401_UNAUTHORIZED),
    (ResetTokenError, status.HTTP_400_BAD_REQUEST),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (AlreadyExistsError, status.HTTP_409_CONFLICT),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
]


def status_for(error: CompanionError) -> int:
    for error_type, code in STATUS_CODES:
        if isinstance(error, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


def _field_message(error: dict) -> str:
    if error["type"] in ("missing", "string_too_short"):
        return EMPTY_MESSAGE
    if error["type"] == "value_error":
        if "email" in error["msg"]:
            return "Must be a valid email address!"
        return error["msg"].removeprefix("Value error, ")
    return error["msg"]


def validation_errors(exc: RequestValidationError) -> dict[str, str]:
    """Flatten pydantic errors into ``{field: message}``, first error per field wins."""
    errors: dict[str, str] = {}
    for error in exc.errors():
        names = [str(part) for part in error["loc"] if part not in ("body", "query", "path")]
        field = names[-1] if names else "body"
        errors.setdefault(field, _field_message(error))
    return errors


async def handle_companion_error(request: Request, exc: CompanionError) -> JSONResponse:
    code = status_for(exc)
    content: dict = {"detail": exc.message}
    field = getattr(exc, "field", None)
    if field:
        content["errors"] = {field: exc.message}

    headers = None
    if code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=code, content=content, headers=headers)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = validation_errors(exc)
    logger.debug(f"Validation failed on {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation failed", "errors": errors},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CompanionError, handle_companion_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
