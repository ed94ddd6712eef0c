from __future__ import annotations

from typing import Iterable, Optional

import httpx

from ...adapters.jose.jwt_decoder import JWTTokenDecoder
from ...adapters.jwks.cache import KeySetCache
from ...adapters.jwks.remote_source import RemoteKeySetSource
from ...config.settings import DecoderSettings


def create_decoder_from_settings(
        settings: DecoderSettings,
        *,
        client: Optional[httpx.AsyncClient] = None,
) -> JWTTokenDecoder:
    """
    High-level factory: DecoderSettings -> JWTTokenDecoder.

    - builds the KeySetCache owned by the remote source
    - builds a RemoteKeySetSource for the configured JWK Set
    - pins the configured algorithms on the decoder
    """
    algorithms = settings.trusted_algorithms
    source = RemoteKeySetSource(
        settings.jwk_set_uri,
        cache=KeySetCache(ttl_seconds=settings.cache_ttl_seconds),
        client=client,
        timeout=settings.http_timeout_seconds,
        verify_ssl=settings.verify_ssl,
        max_attempts=settings.max_attempts,
        refresh_cooldown_seconds=settings.refresh_cooldown_seconds,
    )
    return JWTTokenDecoder(
        source,
        algorithms=algorithms,
        leeway=settings.leeway_seconds,
    )


def create_decoder_from_keycloak(
        *,
        keycloak_base_url: str,
        realm: str,
        algorithms: Iterable[str] = ("RS256",),
        client: Optional[httpx.AsyncClient] = None,
) -> JWTTokenDecoder:
    """
    Keycloak realm -> JWTTokenDecoder reading the realm's certs endpoint.
    """
    settings = DecoderSettings(
        jwk_set_uri=DecoderSettings.keycloak_jwk_set_uri(keycloak_base_url, realm),
        algorithms=list(algorithms),
    )
    return create_decoder_from_settings(settings, client=client)
