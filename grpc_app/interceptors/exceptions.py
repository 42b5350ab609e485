"""Translate transport faults into the protocol error taxonomy.

A server reports a remote exception by aborting the call and attaching the
exception class name as trailing metadata (`x-error-type`); the status
details carry the exception message.
"""
from __future__ import annotations

from typing import Optional

import grpc

from domain.common.exceptions import NamenodeProtocolError, RemoteError, TransportError


REMOTE_EXCEPTION_META_KEY = "x-error-type"

# Without a remote class these statuses mean the call never completed remotely
_TRANSPORT_STATUSES = frozenset({
    grpc.StatusCode.UNAVAILABLE,
    grpc.StatusCode.DEADLINE_EXCEEDED,
    grpc.StatusCode.CANCELLED,
    # message size limits are enforced by the channel itself
    grpc.StatusCode.RESOURCE_EXHAUSTED,
})

# INTERNAL details grpc reports for codec failures on the client side
_CLIENT_CODEC_FAILURES = (
    "Exception serializing request",
    "Exception deserializing response",
)


def _status(exc: BaseException) -> Optional[grpc.StatusCode]:
    try:
        if hasattr(exc, "code") and callable(getattr(exc, "code")):
            return exc.code()  # type: ignore[attr-defined]
    except Exception:
        return None
    return None


def _details(exc: BaseException) -> str:
    try:
        if hasattr(exc, "details") and callable(getattr(exc, "details")):
            return exc.details() or ""  # type: ignore[attr-defined]
    except Exception:
        pass
    return str(exc)


def remote_class_name(exc: BaseException) -> Optional[str]:
    """Return the remote exception class carried in trailing metadata, if any."""
    try:
        md = exc.trailing_metadata() if callable(getattr(exc, "trailing_metadata", None)) else None  # type: ignore[attr-defined]
    except Exception:
        md = None
    for key, value in md or ():
        if key == REMOTE_EXCEPTION_META_KEY and value:
            return value.decode("utf-8") if isinstance(value, bytes) else str(value)
    return None


def translate_rpc_error(exc: BaseException) -> NamenodeProtocolError:
    """Unwrap a failed call exactly once.

    Errors that already belong to the protocol taxonomy are returned as-is.
    """
    if isinstance(exc, NamenodeProtocolError):
        return exc

    status = _status(exc)
    status_name = status.name if status is not None else None
    message = _details(exc)

    class_name = remote_class_name(exc)
    if class_name:
        return RemoteError(class_name, message, status=status_name)
    if status is None or status in _TRANSPORT_STATUSES:
        return TransportError(message, status=status_name)
    if status == grpc.StatusCode.INTERNAL and message.startswith(_CLIENT_CODEC_FAILURES):
        return TransportError(message, status=status_name)
    return RemoteError(status_name, message, status=status_name)
