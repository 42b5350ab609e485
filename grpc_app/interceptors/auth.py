from __future__ import annotations

from typing import Callable, List, Optional, Tuple

import grpc

from grpc_app.interceptors.request_id import with_metadata


REMOTE_USER_META_KEY = "x-remote-user"


class AuthInterceptor(grpc.UnaryUnaryClientInterceptor):
    """Attach caller identity to every outgoing call.

    - `x-remote-user: <user>` when a user name is configured
    - `authorization: Bearer <token>` when a token is configured
    """

    def __init__(self, user: Optional[str] = None, token: Optional[str] = None) -> None:
        self._metadata: List[Tuple[str, str]] = []
        if user:
            self._metadata.append((REMOTE_USER_META_KEY, user))
        if token:
            self._metadata.append(("authorization", f"Bearer {token}"))

    @property
    def enabled(self) -> bool:
        return bool(self._metadata)

    def intercept_unary_unary(
        self,
        continuation: Callable[[grpc.ClientCallDetails, object], object],
        client_call_details: grpc.ClientCallDetails,
        request: object,
    ):
        if not self._metadata:
            return continuation(client_call_details, request)
        return continuation(with_metadata(client_call_details, self._metadata), request)
