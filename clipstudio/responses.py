"""
ClipStudio API Response Utilities
Error codes and the JSON shape used for client-facing failures
"""
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from typing import Any, Dict, Optional
from datetime import datetime, timezone

from .logging_config import api_logger


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================
# ERROR RESPONSES
# ============================================================

class ApiException(HTTPException):
    """API exception with a machine-readable error code"""

    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict] = None,
    ):
        self.error_code = error_code or f"ERR_{status_code}"
        self.details = details
        super().__init__(status_code=status_code, detail=message)


def not_found(resource: str = "Resource", id: str = None):
    message = f"{resource} not found" if not id else f"{resource} not found: {id}"
    raise ApiException(404, message, "NOT_FOUND")


def job_failed(message: str, job_id: Optional[str]) -> JSONResponse:
    """500 response for a job that was created and then failed"""
    content: Dict[str, Any] = {"error": message}
    if job_id:
        content["jobId"] = job_id
    return JSONResponse(status_code=500, content=content)


# ============================================================
# EXCEPTION HANDLER
# ============================================================

async def api_exception_handler(request: Request, exc: ApiException) -> JSONResponse:
    """Render ApiException as {"ok": false, "error": ...}"""
    api_logger.warning(
        f"API Error: {exc.detail}",
        status_code=exc.status_code,
        error_code=exc.error_code,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "ok": False,
            "error": exc.detail,
            "error_code": exc.error_code,
            "details": exc.details,
            "timestamp": _now(),
        },
    )
