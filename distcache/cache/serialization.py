"""
distcache — Value Serialization

Shared wire policy for both backends: values are stored as UTF-8 JSON text.

- Encoding goes through pydantic_core so sets, tuples, datetimes, dataclasses
  and pydantic models are accepted alongside plain JSON types.
- Decoding without a model returns the plain JSON value; with a model the
  payload is validated by a pydantic TypeAdapter (a JSON array read as
  ``set[str]`` comes back as a set).
- Undecodable payloads decode to None, never raise.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError, to_json

from ..errors import CacheSerializationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_PREVIEW_LENGTH = 100


@lru_cache(maxsize=256)
def _adapter(model: Any) -> TypeAdapter[Any]:
    return TypeAdapter(model)


def dumps(value: Any) -> str:
    """
    Serialize a value to JSON text.

    Raises:
        CacheSerializationError: If the value has no JSON representation
    """
    try:
        return to_json(value).decode("utf-8")
    except PydanticSerializationError as e:
        raise CacheSerializationError(
            f"Value of type {type(value).__name__} is not JSON serializable: {e}",
            details={"value_type": type(value).__name__, "error": str(e)},
        ) from e


def loads(data: str | bytes | None, model: type[T] | Any = None) -> T | Any | None:
    """
    Deserialize JSON text, optionally validating it as ``model``.

    Args:
        data: Stored payload (None means absent)
        model: Target type understood by pydantic, or None for plain JSON

    Returns:
        Decoded value, or None if data is absent or cannot be decoded
    """
    if data is None:
        return None

    try:
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        if model is None:
            return json.loads(data)
        return _adapter(model).validate_json(data)
    except (ValueError, UnicodeDecodeError, PydanticValidationError) as e:
        preview = data[:_PREVIEW_LENGTH] if len(data) > _PREVIEW_LENGTH else data
        logger.warning(
            f"Failed to decode cached payload, treating as absent: {e}",
            extra={"data_preview": preview, "model": getattr(model, "__name__", str(model)), "error": str(e)},
        )
        return None
