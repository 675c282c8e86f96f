"""Token verification: both response shapes and the verification cache TTL policy."""
import pytest

from asapi.core.authorize import ErrorResult, TokenService, VerifyTokenInfo
from asapi.core.authorize.models import TokenIdentity


def _v2_payload(expires_in=3600, **overrides):
    payload = {
        "user_id": "u1",
        "business_id": "b1",
        "user_code": "S1",
        "client_id": "web",
        "expires_in": expires_in,
        "service_code": "SVC",
        "service_addr": "http://svc",
    }
    payload.update(overrides)
    return payload


def test_verify_token_sends_get_with_query_params(handle, transport):
    transport.respond(200, {"user_id": "u1", "client_id": "web", "expires_in": 3600})
    user_id, client_id, result = TokenService(handle).verify_token("user-token")

    assert (user_id, client_id, result) == ("u1", "web", None)
    req = transport.last
    assert req.method == "GET"
    assert req.url == "http://as.test/oauth2/verify"
    assert req.params == {"access_token": "user-token", "service": "SVC"}
    assert "AccessToken" not in req.headers


def test_verify_token_cache_hit_skips_network_and_token(handle, transport, token_handle):
    transport.respond(200, {"user_id": "u1", "client_id": "web", "expires_in": 3600})
    service = TokenService(handle)
    service.verify_token("user-token")
    user_id, client_id, result = service.verify_token("user-token")

    assert (user_id, client_id, result) == ("u1", "web", None)
    assert transport.call_count == 1
    assert token_handle.calls == 0


def test_verify_token_ttl_is_expires_in_minus_gc_interval(handle, transport, clock):
    # cache_gc_interval is 60 in the test config
    transport.respond(200, {"user_id": "u1", "client_id": "web", "expires_in": 120})
    transport.respond(200, {"user_id": "u1", "client_id": "web", "expires_in": 120})
    service = TokenService(handle)

    service.verify_token("user-token")
    clock.advance(59)
    service.verify_token("user-token")
    assert transport.call_count == 1

    clock.advance(1)
    service.verify_token("user-token")
    assert transport.call_count == 2


@pytest.mark.parametrize("expires_in", [60, 30, 0])
def test_verify_token_not_cached_without_margin(handle, transport, expires_in):
    payload = {"user_id": "u1", "client_id": "web", "expires_in": expires_in}
    transport.respond(200, payload).respond(200, payload)
    service = TokenService(handle)

    service.verify_token("user-token")
    _, _, result = service.verify_token("user-token")

    assert result is None
    assert transport.call_count == 2
    assert len(handle.verify_cache) == 0


def test_verify_token_stores_identity(handle, transport):
    transport.respond(200, {"user_id": "u1", "client_id": "web", "expires_in": 3600})
    TokenService(handle).verify_token("user-token")
    assert handle.verify_cache.get("user-token") == TokenIdentity(user_id="u1", client_id="web")


def test_verify_token_error_is_not_cached(handle, transport):
    transport.respond(401, "invalid token")
    user_id, client_id, result = TokenService(handle).verify_token("bad-token")

    assert (user_id, client_id) == ("", "")
    assert result == ErrorResult("invalid token", 401)
    assert len(handle.verify_cache) == 0


def test_verify_token_v2_returns_extended_info(handle, transport):
    transport.respond(200, _v2_payload())
    info, result = TokenService(handle).verify_token_v2("user-token")

    assert result is None
    assert info == VerifyTokenInfo(
        user_id="u1",
        business_id="b1",
        user_code="S1",
        client_id="web",
        expires_in=3600,
        service_code="SVC",
        service_addr="http://svc",
    )
    assert transport.last.url == "http://as.test/oauth2/verify/v2"


def test_verify_token_v2_caches_with_margin(handle, transport, clock):
    transport.respond(200, _v2_payload(expires_in=100)).respond(200, _v2_payload(expires_in=100, user_code="S2"))
    service = TokenService(handle)

    first, _ = service.verify_token_v2("user-token")
    cached, _ = service.verify_token_v2("user-token")
    assert cached is first
    assert transport.call_count == 1

    clock.advance(40)
    fresh, _ = service.verify_token_v2("user-token")
    assert fresh.user_code == "S2"
    assert transport.call_count == 2


def test_verification_variants_do_not_share_cached_shapes(handle, transport):
    transport.respond(200, {"user_id": "u1", "client_id": "web", "expires_in": 3600})
    transport.respond(200, _v2_payload())
    service = TokenService(handle)

    service.verify_token("user-token")
    info, result = service.verify_token_v2("user-token")

    assert result is None
    assert info.business_id == "b1"
    assert transport.call_count == 2


def test_verify_token_without_cache_always_calls_service(make_handle, transport):
    handle = make_handle(is_enabled_cache=False)
    service = TokenService(handle)
    transport.default = (200, b'{"user_id": "u1", "client_id": "web", "expires_in": 3600}')

    service.verify_token("user-token")
    service.verify_token("user-token")
    assert transport.call_count == 2


def test_verify_token_transport_failure(handle, transport):
    transport.fail("timed out")
    info, result = TokenService(handle).verify_token_v2("user-token")
    assert info is None
    assert result.message == "timed out"
    assert not result.is_remote


def test_verify_token_margin_uses_default_gc_interval(make_handle, make_config, transport, clock):
    cfg = make_config(cache_gc_interval=0)
    service = TokenService(make_handle(cfg))
    transport.default = (200, b'{"user_id": "u1", "client_id": "web", "expires_in": 301}')

    service.verify_token("user-token")
    service.verify_token("user-token")
    assert transport.call_count == 1

    # TTL is 301 - 300
    clock.advance(1)
    service.verify_token("user-token")
    assert transport.call_count == 2
