import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from catering.core.errors import CateringError

logger = logging.getLogger(__name__)


async def catering_error_handler(_: Request, exc: CateringError):
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def http_error_handler(_: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


async def validation_error_handler(_: Request, exc: RequestValidationError):
    details = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        details.append(
            {
                "field": ".".join(location),
                "message": error.get("msg", ""),
                "type": error.get("type", ""),
            }
        )
    return JSONResponse(status_code=400, content={"error": "Validation failed", "details": details})


def _unhandled_error_handler(expose_errors: bool):
    async def unhandled_error_handler(_: Request, exc: Exception):
        logger.exception("Unhandled error", exc_info=exc)
        content = {"error": "Internal server error"}
        if expose_errors:
            content["message"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    return unhandled_error_handler


def register_error_handlers(app: FastAPI, *, expose_errors: bool = False) -> None:
    """Every error leaves the API as {"error": message}.

    expose_errors adds the exception text to 500 responses, for dev only.
    """
    app.add_exception_handler(CateringError, catering_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler(expose_errors))
