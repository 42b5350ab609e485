from __future__ import annotations

import time
from typing import Callable

import grpc

from core.logging_config import get_logger
from grpc_app.interceptors.request_id import REQUEST_ID_META_KEY


logger = get_logger(__name__)


class LoggingInterceptor(grpc.UnaryUnaryClientInterceptor):
    def intercept_unary_unary(
        self,
        continuation: Callable[[grpc.ClientCallDetails, object], object],
        client_call_details: grpc.ClientCallDetails,
        request: object,
    ):
        method = client_call_details.method
        request_id = dict(client_call_details.metadata or []).get(REQUEST_ID_META_KEY)
        start = time.perf_counter()
        logger.debug("grpc_call", method=method, request_id=request_id)

        outcome = continuation(client_call_details, request)

        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        exc = outcome.exception()
        if exc is None:
            logger.info("grpc_call_done", method=method, elapsed_ms=elapsed_ms, request_id=request_id)
        else:
            code = None
            try:
                if hasattr(exc, "code") and callable(getattr(exc, "code")):
                    code = exc.code()  # type: ignore[attr-defined]
            except Exception:
                pass
            # Concise failure log; the caller decides whether this is fatal
            logger.warning(
                "grpc_call_failed",
                method=method,
                status=str(code) if code is not None else None,
                error=str(exc),
                elapsed_ms=elapsed_ms,
                request_id=request_id,
            )
        return outcome
