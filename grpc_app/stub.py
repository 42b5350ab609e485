"""Transport stub for the namenode protocol service.

One unary-unary callable per operation, bound on a (possibly intercepted)
`grpc.Channel`. Responses arrive as raw bytes and are decoded after the call
so that malformed payloads surface as DecodeError rather than as a transport
status.
"""
from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

import grpc

from core.config import NamenodeSettings
from domain.namenode.entity import ProtocolOperation
from grpc_app.interceptors.auth import AuthInterceptor
from grpc_app.interceptors.logging import LoggingInterceptor
from grpc_app.interceptors.request_id import RequestIdInterceptor
from grpc_app.messages import OPERATION_MESSAGES, WireMessage, decode_message, encode_message


SERVICE_NAME = "namenode.v1.NamenodeProtocolService"


def method_path(operation: ProtocolOperation) -> str:
    return f"/{SERVICE_NAME}/{operation.value}"


@runtime_checkable
class NamenodeTransport(Protocol):
    """A bound handle that performs one round trip per `invoke`."""

    def invoke(
        self, operation: ProtocolOperation, request: WireMessage, *, timeout: Optional[float] = None
    ) -> WireMessage: ...

    def close(self) -> None: ...


class NamenodeProtocolStub:
    def __init__(self, channel: grpc.Channel, *, timeout: Optional[float] = None) -> None:
        self._channel = channel
        self._timeout = timeout
        self._methods = {
            op: channel.unary_unary(
                method_path(op),
                request_serializer=encode_message,
                response_deserializer=None,
            )
            for op in ProtocolOperation
        }

    def invoke(
        self, operation: ProtocolOperation, request: WireMessage, *, timeout: Optional[float] = None
    ) -> WireMessage:
        request_type, response_type = OPERATION_MESSAGES[operation]
        if not isinstance(request, request_type):
            raise TypeError(
                f"{operation.value} expects {request_type.__name__}, got {type(request).__name__}"
            )
        raw = self._methods[operation](request, timeout=timeout if timeout is not None else self._timeout)
        return decode_message(response_type, raw)

    def close(self) -> None:
        self._channel.close()


def _read(path: Optional[str]) -> Optional[bytes]:
    if not path:
        return None
    with open(path, "rb") as f:
        return f.read()


def create_channel(cfg: NamenodeSettings) -> grpc.Channel:
    """Open a channel to the configured endpoint, wrapped with the client interceptors."""
    options = [
        ("grpc.max_send_message_length", cfg.max_message_length),
        ("grpc.max_receive_message_length", cfg.max_message_length),
    ]

    if cfg.tls.enabled:
        if bool(cfg.tls.cert) != bool(cfg.tls.key):
            raise RuntimeError("GRPC TLS client cert and key must be provided together")
        creds = grpc.ssl_channel_credentials(
            root_certificates=_read(cfg.tls.ca),
            private_key=_read(cfg.tls.key),
            certificate_chain=_read(cfg.tls.cert),
        )
        channel = grpc.secure_channel(cfg.address, creds, options=options)
    else:
        channel = grpc.insecure_channel(cfg.address, options=options)

    return grpc.intercept_channel(
        channel,
        RequestIdInterceptor(),
        AuthInterceptor(user=cfg.user, token=cfg.token),
        LoggingInterceptor(),
    )
