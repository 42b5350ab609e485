from __future__ import annotations

import uuid
import contextvars
from collections import namedtuple
from contextlib import contextmanager
from typing import Callable, Iterator, Sequence, Tuple

import grpc
import structlog


REQUEST_ID_META_KEY = "x-request-id"
_request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("grpc_request_id", default=None)


def get_request_id() -> str | None:
    return _request_id_var.get()


@contextmanager
def request_id_scope(request_id: str | None = None) -> Iterator[str]:
    """Bind one request id to every call (and retry) issued inside the block."""
    rid = request_id or str(uuid.uuid4())
    token = _request_id_var.set(rid)
    try:
        with structlog.contextvars.bound_contextvars(request_id=rid):
            yield rid
    finally:
        _request_id_var.reset(token)


class _ClientCallDetails(
    namedtuple(
        "_ClientCallDetails",
        ("method", "timeout", "metadata", "credentials", "wait_for_ready", "compression"),
    ),
    grpc.ClientCallDetails,
):
    pass


def with_metadata(
    details: grpc.ClientCallDetails, extra: Sequence[Tuple[str, str]]
) -> grpc.ClientCallDetails:
    metadata = list(details.metadata or [])
    metadata.extend(extra)
    return _ClientCallDetails(
        details.method,
        details.timeout,
        metadata,
        details.credentials,
        getattr(details, "wait_for_ready", None),
        getattr(details, "compression", None),
    )


class RequestIdInterceptor(grpc.UnaryUnaryClientInterceptor):
    def intercept_unary_unary(
        self,
        continuation: Callable[[grpc.ClientCallDetails, object], object],
        client_call_details: grpc.ClientCallDetails,
        request: object,
    ):
        present = dict(client_call_details.metadata or [])
        if REQUEST_ID_META_KEY in present:
            return continuation(client_call_details, request)
        request_id = get_request_id() or str(uuid.uuid4())
        return continuation(with_metadata(client_call_details, ((REQUEST_ID_META_KEY, request_id),)), request)
