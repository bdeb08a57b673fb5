"""Decoding of JSON text frames into caller-chosen event types."""
from __future__ import annotations
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from binance_stream.errors import DecodeError

T = TypeVar("T")


class CombinedStreamEvent(BaseModel, Generic[T]):
    """Envelope wrapping every payload on a combined-stream connection."""

    stream: str
    data: T


def decode_event(adapter: TypeAdapter[T], text: str) -> T:
    """
    Validate one text frame against the adapter's type.

    Args:
        adapter: TypeAdapter built for the event type
        text: Raw JSON text payload

    Returns:
        Decoded event instance

    Raises:
        DecodeError: Payload is not valid JSON or does not match the type
    """
    try:
        return adapter.validate_json(text)
    except ValidationError as exc:
        raise DecodeError(
            f"Failed to decode event: {exc}", payload=text
        ) from exc


def event_adapter(event_type: Any) -> TypeAdapter[Any]:
    """Build the TypeAdapter used to decode frames into event_type."""
    return TypeAdapter(event_type)


__all__ = ["CombinedStreamEvent", "decode_event", "event_adapter"]
