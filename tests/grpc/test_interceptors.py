from collections import namedtuple

from grpc_app.interceptors.auth import REMOTE_USER_META_KEY, AuthInterceptor
from grpc_app.interceptors.request_id import (
    REQUEST_ID_META_KEY,
    RequestIdInterceptor,
    get_request_id,
    request_id_scope,
)


Details = namedtuple("Details", "method timeout metadata credentials wait_for_ready compression")


def _details(metadata=None):
    return Details("/svc/op", 1.0, metadata, None, None, None)


def _capture():
    seen = {}

    def continuation(details, request):
        seen["details"] = details
        return "outcome"

    return seen, continuation


def test_request_id_scope_binds_and_resets():
    assert get_request_id() is None
    with request_id_scope("abc") as rid:
        assert rid == "abc"
        assert get_request_id() == "abc"
    assert get_request_id() is None


def test_request_id_scope_generates_id():
    with request_id_scope() as rid:
        assert rid
        assert get_request_id() == rid


def test_request_id_interceptor_uses_bound_id():
    seen, cont = _capture()
    with request_id_scope("rid-1"):
        assert RequestIdInterceptor().intercept_unary_unary(cont, _details(), object()) == "outcome"
    assert (REQUEST_ID_META_KEY, "rid-1") in seen["details"].metadata


def test_request_id_interceptor_keeps_explicit_id():
    seen, cont = _capture()
    md = [(REQUEST_ID_META_KEY, "given")]
    RequestIdInterceptor().intercept_unary_unary(cont, _details(md), object())
    assert [v for k, v in seen["details"].metadata if k == REQUEST_ID_META_KEY] == ["given"]


def test_auth_interceptor_adds_identity():
    seen, cont = _capture()
    interceptor = AuthInterceptor(user="backup", token="t0k")
    assert interceptor.enabled

    interceptor.intercept_unary_unary(cont, _details([("a", "b")]), object())

    md = list(seen["details"].metadata)
    assert ("a", "b") in md
    assert (REMOTE_USER_META_KEY, "backup") in md
    assert ("authorization", "Bearer t0k") in md


def test_auth_interceptor_without_identity_passes_through():
    seen, cont = _capture()
    details = _details()
    interceptor = AuthInterceptor()
    assert not interceptor.enabled

    interceptor.intercept_unary_unary(cont, details, object())
    assert seen["details"] is details
