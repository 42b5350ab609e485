from __future__ import annotations

from typing import Type, TypeVar

from pydantic import ValidationError

from domain.common.exceptions import DecodeError
from grpc_app.messages.namenode import WireMessage


M = TypeVar("M", bound=WireMessage)


def encode_message(message: WireMessage) -> bytes:
    return message.model_dump_json().encode("utf-8")


def decode_message(message_type: Type[M], data: bytes) -> M:
    """Parse a response payload, rejecting anything incomplete or ill-typed."""
    try:
        return message_type.model_validate_json(data)
    except ValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        loc = ".".join(str(p) for p in first.get("loc", ()))
        raise DecodeError(
            f"Malformed {message_type.__name__}: {first.get('msg', 'invalid payload')}"
            + (f" at {loc}" if loc else ""),
            message_type=message_type.__name__,
        ) from exc
