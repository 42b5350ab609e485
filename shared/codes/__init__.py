"""
Shared error codes used across layers (Domain/Core/gRPC).

This package exposes ProtocolErrorCode at `shared.codes` so that the
domain error taxonomy and the transport layer agree on a single set.
"""
from enum import IntEnum


class ProtocolErrorCode(IntEnum):
    """协议错误码定义（单一来源）"""

    # Success
    SUCCESS = 0

    # Remote peer executed the call and reported a failure (1xxxx)
    REMOTE_ERROR = 10000

    # Networking / serialization below the protocol layer (2xxxx)
    TRANSPORT_ERROR = 20000

    # Response received but not convertible into a domain value (3xxxx)
    DECODE_ERROR = 30000

    # Client lifecycle (4xxxx)
    CLIENT_CLOSED = 40000


__all__ = ["ProtocolErrorCode"]
