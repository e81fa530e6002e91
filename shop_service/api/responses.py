# shop_service/api/responses.py
from typing import Any, Optional

from fastapi import Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def envelope(success: bool, data: Any = None, message: Optional[str] = None, error: Optional[str] = None) -> dict:
    """Uniform response body; absent keys are left out."""
    body = {"success": success}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if error:
        body["error"] = error
    return body


def _dump(data: Any, schema: Optional[type]) -> Any:
    if schema is None or data is None:
        return jsonable_encoder(data)
    if isinstance(data, (list, tuple)):
        return [schema.model_validate(item).model_dump(mode="json") for item in data]
    return schema.model_validate(data).model_dump(mode="json")


def success_response(data: Any = None, message: str = None, schema: type = None,
                     status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=envelope(True, _dump(data, schema), message))


def created_response(data: Any = None, schema: type = None,
                     message: str = "Resource created successfully") -> JSONResponse:
    return success_response(data, message, schema, status_code=status.HTTP_201_CREATED)


def error_response(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=envelope(False, error=error))


def no_content_response() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)
