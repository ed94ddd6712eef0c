# tests/test_remote_source.py
import asyncio
import json

import httpx
import pytest
from jwt.algorithms import RSAAlgorithm

from pkg_jwt import (
    FixedKeySetSource,
    JWTTokenDecoder,
    KeySelectionCriterion,
    KeySetCache,
    KeySetUnavailableError,
    RemoteKeySetSource,
    SignatureAlgorithm,
)
from pkg_jwt.adapters.jwks.keys import keys_from_jwks

JWKS_URI = "https://idp.example.com/realms/demo/protocol/openid-connect/certs"


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class Responses:
    """Serves queued responses (or raises queued errors) and counts requests."""

    def __init__(self, *items):
        self.items = list(items)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        item = self.items.pop(0) if len(self.items) > 1 else self.items[0]
        if isinstance(item, Exception):
            raise item
        if isinstance(item, httpx.Response):
            return item
        return httpx.Response(200, json=item)


def _source(responses, **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(responses))
    return RemoteKeySetSource(JWKS_URI, client=client, **kwargs)


def _criterion(kid=None):
    return KeySelectionCriterion(SignatureAlgorithm.RS256, key_id=kid)


# --- Fetching and caching -------------------------------------------------


@pytest.mark.asyncio
async def test_fetches_and_caches(rsa_key_1, rsa_jwk):
    responses = Responses({"keys": [rsa_jwk(rsa_key_1, kid="k1")]})
    source = _source(responses)

    first = await source.get(_criterion("k1"))
    second = await source.get(_criterion("k1"))

    assert [k.key_id for k in first] == ["k1"]
    assert first == second
    assert len(responses.requests) == 1
    assert responses.requests[0].url == JWKS_URI


@pytest.mark.asyncio
async def test_concurrent_lookups_share_one_fetch(rsa_key_1, rsa_jwk):
    responses = Responses({"keys": [rsa_jwk(rsa_key_1, kid="k1")]})
    source = _source(responses)

    results = await asyncio.gather(*(source.get(_criterion("k1")) for _ in range(5)))

    assert all(len(r) == 1 for r in results)
    assert len(responses.requests) == 1


@pytest.mark.asyncio
async def test_refetches_after_ttl(rsa_key_1, rsa_jwk):
    clock = FakeClock()
    responses = Responses({"keys": [rsa_jwk(rsa_key_1, kid="k1")]})
    source = _source(responses, cache=KeySetCache(ttl_seconds=60, clock=clock))

    await source.get(_criterion("k1"))
    clock.now += 61
    await source.get(_criterion("k1"))

    assert len(responses.requests) == 2


@pytest.mark.asyncio
async def test_invalidate_forces_next_fetch(rsa_key_1, rsa_jwk):
    responses = Responses({"keys": [rsa_jwk(rsa_key_1, kid="k1")]})
    source = _source(responses)

    await source.get(_criterion("k1"))
    source.cache.invalidate()
    assert source.cache.peek() is None

    assert len(await source.get(_criterion("k1"))) == 1
    assert len(responses.requests) == 2


@pytest.mark.asyncio
async def test_invalidated_cache_has_no_stale_fallback(rsa_key_1, rsa_jwk):
    responses = Responses({"keys": [rsa_jwk(rsa_key_1, kid="k1")]}, httpx.Response(500))
    source = _source(responses)

    await source.get(_criterion("k1"))
    source.cache.invalidate()

    with pytest.raises(KeySetUnavailableError):
        await source.get(_criterion("k1"))


@pytest.mark.asyncio
async def test_skips_unusable_keys(rsa_key_1, rsa_jwk, ec_key, ec_jwk):
    document = {
        "keys": [
            {"kty": "oct", "k": "c2VjcmV0", "kid": "hmac"},
            {"kty": "RSA", "kid": "broken", "n": "???", "e": "AQAB"},
            "not-an-object",
            rsa_jwk(rsa_key_1, kid="k1", use="sig", alg="RS256"),
            ec_jwk(ec_key, kid="ec1"),
        ]
    }
    source = _source(Responses(document))

    assert [k.key_id for k in await source.get(_criterion())] == ["k1"]
    assert [k.key_id for k in source.cache.peek().keys] == ["k1", "ec1"]


def test_keys_from_jwks_requires_keys_list():
    with pytest.raises(ValueError):
        keys_from_jwks({"not_keys": []})


@pytest.mark.asyncio
async def test_fixed_source_from_jwks_skips_private_and_symmetric_keys(rsa_key_1, rsa_key_2, rsa_jwk):
    private = json.loads(RSAAlgorithm.to_jwk(rsa_key_2))
    private["kid"] = "private"
    document = {
        "keys": [
            {"kty": "oct", "k": "c2VjcmV0", "kid": "hmac"},
            private,
            rsa_jwk(rsa_key_1, kid="k1"),
        ]
    }

    source = FixedKeySetSource.from_jwks(document)

    assert [k.key_id for k in source.keys] == ["k1"]
    assert [k.key_id for k in await source.get(_criterion())] == ["k1"]


# --- Key rotation ---------------------------------------------------------


@pytest.mark.asyncio
async def test_unknown_kid_triggers_refresh(rsa_key_1, rsa_key_2, rsa_jwk):
    responses = Responses(
        {"keys": [rsa_jwk(rsa_key_1, kid="k1")]},
        {"keys": [rsa_jwk(rsa_key_1, kid="k1"), rsa_jwk(rsa_key_2, kid="k2")]},
    )
    source = _source(responses, refresh_cooldown_seconds=0)

    await source.get(_criterion("k1"))
    rotated = await source.get(_criterion("k2"))

    assert [k.key_id for k in rotated] == ["k2"]
    assert len(responses.requests) == 2


@pytest.mark.asyncio
async def test_unknown_kid_within_cooldown_is_empty(rsa_key_1, rsa_jwk):
    responses = Responses({"keys": [rsa_jwk(rsa_key_1, kid="k1")]})
    source = _source(responses, refresh_cooldown_seconds=30)

    assert await source.get(_criterion("k2")) == []
    assert len(responses.requests) == 1


# --- Failures -------------------------------------------------------------


@pytest.mark.asyncio
async def test_http_error_is_unavailable():
    source = _source(Responses(httpx.Response(503, text="down")))

    with pytest.raises(KeySetUnavailableError) as exc_info:
        await source.get(_criterion())
    assert "503" in str(exc_info.value)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"keys": "nope"}),
        httpx.Response(200, json=[1, 2, 3]),
    ],
)
async def test_invalid_document_is_unavailable(response):
    with pytest.raises(KeySetUnavailableError):
        await _source(Responses(response)).get(_criterion())


@pytest.mark.asyncio
async def test_transport_errors_are_retried(rsa_key_1, rsa_jwk):
    responses = Responses(
        httpx.ConnectError("connection refused"),
        {"keys": [rsa_jwk(rsa_key_1, kid="k1")]},
    )
    source = _source(responses, max_attempts=2)

    assert len(await source.get(_criterion("k1"))) == 1
    assert len(responses.requests) == 2


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts():
    error = httpx.ReadTimeout("timed out")
    responses = Responses(error)
    source = _source(responses, max_attempts=3)

    with pytest.raises(KeySetUnavailableError) as exc_info:
        await source.get(_criterion())

    assert exc_info.value.__cause__ is error
    assert len(responses.requests) == 3


@pytest.mark.asyncio
async def test_stale_keys_served_when_refresh_fails(rsa_key_1, rsa_jwk):
    clock = FakeClock()
    responses = Responses(
        {"keys": [rsa_jwk(rsa_key_1, kid="k1")]},
        httpx.Response(500),
    )
    source = _source(responses, cache=KeySetCache(ttl_seconds=60, clock=clock))

    await source.get(_criterion("k1"))
    clock.now += 120

    assert [k.key_id for k in await source.get(_criterion("k1"))] == ["k1"]
    assert len(responses.requests) == 2


# --- Lifecycle and wiring -------------------------------------------------


@pytest.mark.asyncio
async def test_closes_owned_client_only():
    owned = RemoteKeySetSource(JWKS_URI)
    await owned.aclose()
    assert owned._client.is_closed

    shared = httpx.AsyncClient()
    async with RemoteKeySetSource(JWKS_URI, client=shared):
        pass
    assert not shared.is_closed
    await shared.aclose()


def test_rejects_bad_arguments():
    with pytest.raises(ValueError):
        RemoteKeySetSource("  ")
    with pytest.raises(ValueError):
        RemoteKeySetSource(JWKS_URI, max_attempts=0)
    with pytest.raises(ValueError):
        KeySetCache(ttl_seconds=-1)


@pytest.mark.asyncio
async def test_decoder_over_remote_jwks(mint, rsa_key_1, rsa_jwk, future_exp):
    responses = Responses({"keys": [rsa_jwk(rsa_key_1, kid="k1")]})
    client = httpx.AsyncClient(transport=httpx.MockTransport(responses))
    decoder = JWTTokenDecoder.from_jwk_set_uri(JWKS_URI, client=client)

    token = mint(rsa_key_1, {"sub": "alice", "exp": future_exp}, headers={"kid": "k1"})
    decoded = await decoder.decode(token)

    assert decoded.subject == "alice"
    assert decoded.key_id == "k1"
    await client.aclose()
