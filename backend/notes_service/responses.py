"""
Notes Service — Envelope Builder
================================

What:  The single function that builds every /api response body.
Who:   Note routes (success) and the error normalizer (failures).

Shape:
    {"success": bool, "message"?: str, "data"?: Note | [Note], "errors"?: {field: [str]}}

Keys whose value is not supplied are omitted, never sent as null. `data`
is only included when the caller passes it, so an empty list stays an
empty list.
"""

from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

_OMITTED: Any = object()


def envelope(
    success: bool,
    status_code: int = 200,
    message: Optional[str] = None,
    data: Any = _OMITTED,
    errors: Optional[Dict[str, List[str]]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Build the uniform response envelope as a JSONResponse."""
    content: Dict[str, Any] = {"success": success}
    if message is not None:
        content["message"] = message
    if data is not _OMITTED:
        content["data"] = jsonable_encoder(data)
    if errors is not None:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content, headers=headers)
