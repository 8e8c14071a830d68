from typing import Any, List, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

DEFAULT_SUCCESS_MESSAGE = "Request processed successfully"


def success_response(
    data: Any = None,
    message: str = DEFAULT_SUCCESS_MESSAGE,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """
    Wrap a result in the success envelope.

    Args:
        data: anything jsonable_encoder understands (ORM rows go through
            their pydantic schema first)
        message: human readable message
        status_code: 200 by default, 201 for creations

    Returns:
        JSONResponse: {"success": true, "data": ..., "message": ...}
    """
    return JSONResponse(
        status_code=status_code,
        content={"success": True, "data": jsonable_encoder(data), "message": message},
    )


def error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[List[str]] = None,
) -> JSONResponse:
    content = {"success": False, "error": error, "message": message}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def serialize(schema, obj):
    """Validate an ORM row (or list of rows) through a pydantic schema."""
    if obj is None:
        return None
    if isinstance(obj, list):
        return [schema.model_validate(item) for item in obj]
    return schema.model_validate(obj)
