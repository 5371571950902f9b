"""Request/response helpers shared by the route handlers."""

from typing import Any, TypeVar
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from .config import settings
from .errors import DecodeError

ModelT = TypeVar("ModelT", bound=BaseModel)


def normalize_email(email: str) -> str:
    """Convert email to lowercase and strip whitespace."""
    return email.strip().lower()


def _describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    kind = first["type"]
    if kind == "json_invalid":
        return "body contains badly-formed JSON"
    if kind == "extra_forbidden":
        return f"body contains unknown key '{first['loc'][-1]}'"
    if kind == "missing":
        return f"body is missing required key '{first['loc'][-1]}'"
    if kind == "model_type":
        return "body must contain a single JSON object"
    location = ".".join(str(part) for part in first["loc"])
    return f"body contains an invalid value for '{location}': {first['msg']}"


async def read_json(request: Request, model: type[ModelT]) -> ModelT:
    """Decode the request body into ``model``.

    Raises:
        DecodeError: body empty, too large, not a single JSON object, or
            not matching the model
    """
    body = await request.body()
    if len(body) > settings.MAX_BODY_BYTES:
        raise DecodeError(f"body must not be larger than {settings.MAX_BODY_BYTES} bytes")
    if not body.strip():
        raise DecodeError("body must not be empty")
    try:
        return model.model_validate_json(body)
    except ValidationError as e:
        raise DecodeError(_describe_validation_error(e)) from e


def write_json(status_code: int, message: str, data: Any = None) -> JSONResponse:
    """Write a success envelope; ``data`` is omitted when None."""
    content: dict[str, Any] = {"error": False, "message": message}
    if data is not None:
        content["data"] = jsonable_encoder(data)
    return JSONResponse(status_code=status_code, content=content)


def error_json(message: str, status_code: int = 400, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": True, "message": message},
        headers=headers,
    )
