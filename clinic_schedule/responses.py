"""Decoding of backend responses.

The backend is inconsistent about envelopes: the same route may answer with
a bare payload, with {"status": true, "data": ...}, or with an object holding
a named list. Every response goes through unwrap_envelope() once, here, and
anything that still does not match the expected shape raises
ResponseShapeError instead of being guessed at further down.
"""
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from clinic_schedule.errors import ApiError, ResponseShapeError

ModelT = TypeVar("ModelT", bound=BaseModel)


def unwrap_envelope(payload: Any, expected: type = list, key: Optional[str] = None) -> Any:
    """
    Strip the optional {"data": ...} envelope and check the payload type.

    Args:
        payload: Decoded JSON body
        expected: list or dict
        key: Name of the list property when the payload is an object
             holding the list (e.g. "appointments")

    Returns:
        The unwrapped payload; a null list payload decodes to []

    Raises:
        ApiError: If the envelope reports status false
        ResponseShapeError: If the payload is not of the expected type
    """
    if isinstance(payload, dict) and payload.get("status") is False:
        raise ApiError(payload.get("message"))

    if isinstance(payload, dict) and "data" in payload:
        payload = payload["data"]

    if key and isinstance(payload, dict) and key in payload:
        payload = payload[key]

    if payload is None and expected is list:
        return []

    if not isinstance(payload, expected):
        raise ResponseShapeError(
            f"Expected {expected.__name__} payload, got {type(payload).__name__}"
        )
    return payload


def decode_many(model: Type[ModelT], payload: Any, key: Optional[str] = None) -> List[ModelT]:
    """Decode a list response into model instances."""
    items = unwrap_envelope(payload, list, key)
    try:
        return [model.model_validate(item) for item in items]
    except ValidationError as e:
        raise ResponseShapeError(f"Unexpected {model.__name__} record: {e}") from e


def decode_one(model: Type[ModelT], payload: Any) -> ModelT:
    """Decode a single-record response into a model instance."""
    item = unwrap_envelope(payload, dict)
    try:
        return model.model_validate(item)
    except ValidationError as e:
        raise ResponseShapeError(f"Unexpected {model.__name__} record: {e}") from e
