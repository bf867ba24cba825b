"""Uniform response envelope: {success, data?, error?, message?, timestamp}"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from registration_admin.domain.results import ErrorKind, Result

STATUS_BY_ERROR = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.STORE: 400,
    ErrorKind.NOT_FOUND: 404,
}


def envelope(
    success: bool,
    status_code: int,
    data: Any = None,
    error: Optional[str] = None,
    message: Optional[str] = None,
) -> JSONResponse:
    body: dict = {"success": success}
    if data is not None:
        body["data"] = data
    if error is not None:
        body["error"] = error
    if message is not None:
        body["message"] = message
    body["timestamp"] = datetime.now(timezone.utc).isoformat()
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def result_response(result: Result, success_status: int = 200, message: Optional[str] = None) -> JSONResponse:
    """Map a coordinator result onto the envelope; partial values ride along with errors"""
    data = result.value.as_dict() if hasattr(result.value, "as_dict") else result.value
    if result.ok:
        return envelope(True, success_status, data=data, message=message)
    return envelope(False, STATUS_BY_ERROR[result.error.kind], data=data, error=result.error.message)


def unexpected_error(operation: str, exc: Exception, request_id: str) -> JSONResponse:
    logging.error(f"Unexpected error in {operation}: {exc}", extra={"request_id": request_id}, exc_info=exc)
    return envelope(False, 500, error="An unexpected error occurred")
