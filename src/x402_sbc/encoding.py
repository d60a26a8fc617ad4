"""
Header encoding utilities for the x402 protocol
"""

import base64
import json
from typing import Any, TypeVar, overload

from pydantic import BaseModel

M = TypeVar("M", bound=BaseModel)


def encode_base64(data: str | bytes) -> str:
    """Encode data to base64"""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.b64encode(data).decode("utf-8")


def decode_base64(data: str) -> str:
    """Decode strict base64 to string"""
    return base64.b64decode(data, validate=True).decode("utf-8")


def to_wire(value: Any) -> Any:
    """Convert a model to its camelCase JSON form; plain values pass through."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True)
    return value


def encode_header(value: Any) -> str:
    """Encode a model or JSON-compatible value as base64(JSON) for an HTTP header"""
    return encode_base64(json.dumps(to_wire(value), separators=(",", ":")))


@overload
def decode_header(encoded: str) -> Any: ...


@overload
def decode_header(encoded: str, model_class: type[M]) -> M: ...


def decode_header(encoded: str, model_class: Any = None) -> Any:
    """
    Decode a base64(JSON) HTTP header.

    Raises:
        ValueError: If the header is not valid base64 or JSON
        pydantic.ValidationError: If the JSON does not match model_class
    """
    data = json.loads(decode_base64(encoded.strip()))
    if model_class is not None:
        return model_class.model_validate(data)
    return data
