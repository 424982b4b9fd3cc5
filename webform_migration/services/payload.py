"""Decoding of the serialized 'extra' payload attached to legacy components."""

import json
from typing import Any, Dict, Optional, Union

import phpserialize

from ..models.errors import DecodeError

FALSE_STRINGS = {"", "0", "false", "no", "off"}


def decode_payload(payload: Optional[Union[str, bytes, Dict[str, Any]]]) -> Dict[str, Any]:
    """
    Decode a component's extra payload into a mapping.

    The legacy system stores a PHP-serialized array; JSON objects are also
    accepted, as is an already-decoded mapping. An empty payload decodes
    to an empty mapping.

    Raises:
        DecodeError: if the payload is neither, or does not decode to a mapping
    """
    if payload is None:
        return {}
    if isinstance(payload, dict):
        return dict(payload)

    if isinstance(payload, str):
        raw = payload.encode("utf-8")
    elif isinstance(payload, (bytes, bytearray)):
        raw = bytes(payload)
    else:
        raise DecodeError(f"Unsupported payload type {type(payload).__name__}")

    if not raw.strip():
        return {}

    if raw.lstrip().startswith(b"{"):
        try:
            data = json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodeError(f"Invalid JSON payload: {e}")
    else:
        try:
            data = phpserialize.loads(raw, decode_strings=True)
        except (ValueError, TypeError, UnicodeDecodeError) as e:
            raise DecodeError(f"Invalid serialized payload: {e}")

    if not isinstance(data, dict):
        raise DecodeError(f"Payload decoded to {type(data).__name__}, expected a mapping")

    return data


def as_bool(value: Any) -> bool:
    """Interpret a loosely typed legacy flag ('1', 1, True, '0', '', None...)."""
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_STRINGS
    return bool(value)


def as_text(value: Any) -> str:
    """Interpret a loosely typed legacy string value; missing becomes ''."""
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def split_lines(value: Any) -> list:
    """Split a newline-delimited option list, stripping CR and dropping blank lines."""
    lines = []
    for line in as_text(value).split("\n"):
        line = line.replace("\r", "")
        if line.strip():
            lines.append(line)
    return lines
