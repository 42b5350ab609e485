"""领域层协议异常定义，供领域、传输层与调用方共同使用。

The client surfaces exactly four failure kinds. Each keeps enough structure
(remote class name, message, status) for callers to tell causes apart.
"""
from __future__ import annotations

from typing import Optional
from shared.codes import ProtocolErrorCode


class NamenodeProtocolError(Exception):
    """协议异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "ProtocolError",
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        super().__init__(self.message)


class RemoteError(NamenodeProtocolError):
    """The remote peer ran the call and reported an exception of ``class_name``."""

    def __init__(self, class_name: str, message: str, *, status: Optional[str] = None):
        self.class_name = class_name
        self.status = status
        details = {"class_name": class_name}
        if status:
            details["status"] = status
        super().__init__(
            code=ProtocolErrorCode.REMOTE_ERROR,
            message=message,
            error_type=class_name,
            details=details,
        )

    def matches(self, *class_names: str) -> bool:
        return self.class_name in class_names

    def __str__(self) -> str:
        return f"{self.class_name}: {self.message}"


class TransportError(NamenodeProtocolError):
    def __init__(self, message: str, *, status: Optional[str] = None):
        self.status = status
        super().__init__(
            code=ProtocolErrorCode.TRANSPORT_ERROR,
            message=message,
            error_type="TransportError",
            details={"status": status} if status else None,
        )


class DecodeError(NamenodeProtocolError):
    def __init__(self, message: str, *, message_type: Optional[str] = None):
        self.message_type = message_type
        super().__init__(
            code=ProtocolErrorCode.DECODE_ERROR,
            message=message,
            error_type="DecodeError",
            details={"message_type": message_type} if message_type else None,
        )


class ClosedError(NamenodeProtocolError):
    def __init__(self, message: str = "Namenode protocol client is closed"):
        super().__init__(
            code=ProtocolErrorCode.CLIENT_CLOSED,
            message=message,
            error_type="ClientClosed",
        )
