"""JSON envelope shared by every API endpoint.

Success: {"success": true, "data": ...}
Failure: {"success": false, "error": "<message>"}
"""
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success_response(data: Any = None, status_code: int = 200, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": True, "data": jsonable_encoder(data)},
                        headers=headers)


def error_response(message: str, status_code: int = 400, details: Any = None,
                   headers: Optional[dict] = None) -> JSONResponse:
    content = {"success": False, "error": message}
    if details is not None:
        content["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


__all__ = ['success_response', 'error_response', 'validation_message']


def validation_message(errors) -> str:
    """Readable one-line summary of pydantic/FastAPI validation errors."""
    parts = []
    for err in errors:
        loc = [str(p) for p in err.get('loc', ()) if p not in ('body', 'query', 'path')]
        msg = err.get('msg', 'Invalid value')
        if msg.startswith('Value error, '):
            msg = msg[len('Value error, '):]
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return '; '.join(parts) or 'Invalid request'
