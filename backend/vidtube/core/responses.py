# vidtube/core/responses.py
"""
Success envelope shared by every endpoint:
    {"statusCode": int, "success": true, "data": ..., "message": str}
"""
from fastapi.responses import JSONResponse


def envelope(data=None, message: str = "Success", status_code: int = 200) -> dict:
    return {
        "statusCode": status_code,
        "success": status_code < 400,
        "data": data if data is not None else {},
        "message": message,
    }


def api_response(data=None, message: str = "Success", status_code: int = 200) -> JSONResponse:
    """Build the JSON response for a successful request."""
    return JSONResponse(status_code=status_code, content=envelope(data, message, status_code))
