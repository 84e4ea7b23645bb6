from __future__ import annotations

from fastapi.responses import JSONResponse


def error_response(status_code: int, message: str) -> JSONResponse:
    """Error body used by every endpoint: {"error": message}."""
    return JSONResponse(status_code=status_code, content={'error': message})
