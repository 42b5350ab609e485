"""
Per-method retry policies and the proxy that applies them.

A policy is plain data: how many retries and how long to sleep between
them. Policies are looked up first by operation, then by the class name of
the remote exception that failed the attempt. Anything without an entry is
tried once.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from functools import partial
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Union

import grpc
from tenacity import RetryCallState, Retrying, retry_if_exception

from core.config import NamenodeSettings, settings
from core.logging_config import get_logger
from domain.common.exceptions import RemoteError
from domain.namenode.entity import ProtocolOperation
from grpc_app.interceptors.exceptions import translate_rpc_error
from grpc_app.interceptors.request_id import get_request_id, request_id_scope
from grpc_app.messages import WireMessage
from grpc_app.stub import NamenodeTransport


logger = get_logger(__name__)

ALREADY_BEING_CREATED = "AlreadyBeingCreatedException"


@dataclass(frozen=True)
class RetryPolicy:
    """Retry up to `max_retries` times, sleeping `delay` seconds before each retry."""

    max_retries: int = 0
    delay: float = 0.0

    def __post_init__(self):
        if self.max_retries < 0 or self.delay < 0:
            raise ValueError("max_retries and delay must not be negative")


TRY_ONCE_THEN_FAIL = RetryPolicy()


def retry_up_to_maximum_count_with_fixed_sleep(max_retries: int, sleep_ms: int) -> RetryPolicy:
    return RetryPolicy(max_retries=max_retries, delay=sleep_ms / 1000.0)


@dataclass(frozen=True)
class RemoteExceptionDependentPolicy:
    """Choose a policy by the remote exception class; non-remote failures never retry."""

    default: RetryPolicy = TRY_ONCE_THEN_FAIL
    by_class: Mapping[str, RetryPolicy] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "by_class", MappingProxyType(dict(self.by_class)))

    def policy_for(self, error: Optional[BaseException]) -> RetryPolicy:
        if isinstance(error, RemoteError):
            return self.by_class.get(error.class_name, self.default)
        return TRY_ONCE_THEN_FAIL


FAIL_FAST = RemoteExceptionDependentPolicy()


class MethodRetryTable:
    """operation -> RemoteExceptionDependentPolicy; missing entries fail fast."""

    def __init__(
        self, policies: Optional[Mapping[Union[ProtocolOperation, str], RemoteExceptionDependentPolicy]] = None
    ) -> None:
        self._policies = MappingProxyType(
            {ProtocolOperation(op): policy for op, policy in (policies or {}).items()}
        )

    def resolve(self, operation: Union[ProtocolOperation, str]) -> RemoteExceptionDependentPolicy:
        return self._policies.get(ProtocolOperation(operation), FAIL_FAST)

    def __contains__(self, operation: object) -> bool:
        try:
            return ProtocolOperation(operation) in self._policies
        except ValueError:
            return False

    def __len__(self) -> int:
        return len(self._policies)


def default_retry_table(cfg: Optional[NamenodeSettings] = None) -> MethodRetryTable:
    """Only registration retries: a concurrent registration clears within one lease soft limit."""
    cfg = cfg or settings.namenode
    create_policy = retry_up_to_maximum_count_with_fixed_sleep(cfg.create_retry_max, cfg.lease_soft_limit_ms)
    return MethodRetryTable({
        ProtocolOperation.REGISTER: RemoteExceptionDependentPolicy(
            by_class={ALREADY_BEING_CREATED: create_policy},
        ),
    })


class RetryingProxy:
    """Wrap a transport and re-attempt failed calls according to a MethodRetryTable.

    Attempt counters live in a tenacity `Retrying` built per call, so
    concurrent calls never share state. Transport faults are translated
    exactly once per attempt before the policy looks at them.
    """

    def __init__(
        self,
        transport: NamenodeTransport,
        table: Optional[MethodRetryTable] = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._transport = transport
        self._table = table if table is not None else default_retry_table()
        self._sleep = sleep

    @property
    def table(self) -> MethodRetryTable:
        return self._table

    def invoke(
        self, operation: ProtocolOperation, request: WireMessage, *, timeout: Optional[float] = None
    ) -> WireMessage:
        method_policy = self._table.resolve(operation)
        retrying = Retrying(
            retry=retry_if_exception(partial(self._should_retry, method_policy)),
            stop=partial(self._stop, method_policy),
            wait=partial(self._wait, method_policy),
            sleep=self._sleep,
            before_sleep=partial(self._log_retry, operation),
            reraise=True,
        )
        with request_id_scope(get_request_id()):
            for attempt in retrying:
                with attempt:
                    return self._attempt(operation, request, timeout)

    def close(self) -> None:
        self._transport.close()

    def _attempt(self, operation: ProtocolOperation, request: WireMessage, timeout: Optional[float]) -> WireMessage:
        try:
            return self._transport.invoke(operation, request, timeout=timeout)
        except grpc.RpcError as exc:
            raise translate_rpc_error(exc) from exc

    @staticmethod
    def _should_retry(method_policy: RemoteExceptionDependentPolicy, exc: BaseException) -> bool:
        return isinstance(exc, RemoteError) and method_policy.policy_for(exc).max_retries > 0

    @staticmethod
    def _stop(method_policy: RemoteExceptionDependentPolicy, retry_state: RetryCallState) -> bool:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        # attempt_number counts attempts made so far, i.e. retries + 1
        return retry_state.attempt_number > method_policy.policy_for(exc).max_retries

    @staticmethod
    def _wait(method_policy: RemoteExceptionDependentPolicy, retry_state: RetryCallState) -> float:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        return method_policy.policy_for(exc).delay

    @staticmethod
    def _log_retry(operation: ProtocolOperation, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "namenode_retry",
            operation=operation.value,
            attempt=retry_state.attempt_number,
            delay=retry_state.next_action.sleep if retry_state.next_action else None,
            error_type=getattr(exc, "error_type", type(exc).__name__),
            message=str(exc),
        )
