"""JSON encoding used by the structured log formatter."""

from typing import Any

import msgspec

__all__ = ("encode_json",)


def _default(value: Any) -> Any:
    return repr(value)


_encoder = msgspec.json.Encoder(enc_hook=_default)


def encode_json(data: Any) -> str:
    """Encode ``data`` as a JSON string.

    Values msgspec cannot serialize natively are written as their ``repr``.

    Args:
        data: The object to encode.

    Returns:
        The JSON document as text.
    """
    return _encoder.encode(data).decode("utf-8")
