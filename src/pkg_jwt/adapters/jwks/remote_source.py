from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Tuple

import httpx

from ...domain.exceptions import KeySetUnavailableError
from ...domain.value_objects import KeySelectionCriterion, VerificationKey
from .cache import CachedKeySet, KeySetCache
from .keys import keys_from_jwks

logger = logging.getLogger(__name__)

_ACCEPT = "application/json, application/jwk-set+json"


class RemoteKeySetSource:
    """
    KeySetSource backed by a JWK Set document served over HTTP.

    - caches parsed keys in the KeySetCache it is given
    - coalesces concurrent refreshes behind one lock
    - retries transport errors up to `max_attempts`
    - re-fetches once on a key miss (key rotation), at most every
      `refresh_cooldown_seconds`
    - serves the stale key set when a refresh fails
    """

    def __init__(
        self,
        jwk_set_uri: str,
        *,
        cache: Optional[KeySetCache] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
        verify_ssl: bool = True,
        max_attempts: int = 2,
        refresh_cooldown_seconds: float = 30.0,
    ) -> None:
        if not jwk_set_uri or not jwk_set_uri.strip():
            raise ValueError("jwk_set_uri cannot be empty")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self._jwk_set_uri = jwk_set_uri.strip()
        self._cache = cache if cache is not None else KeySetCache()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(verify=verify_ssl, timeout=timeout)
        self._max_attempts = max_attempts
        self._refresh_cooldown = refresh_cooldown_seconds
        self._lock = asyncio.Lock()

    @property
    def jwk_set_uri(self) -> str:
        return self._jwk_set_uri

    @property
    def cache(self) -> KeySetCache:
        return self._cache

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "RemoteKeySetSource":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    async def get(self, criterion: KeySelectionCriterion) -> List[VerificationKey]:
        """
        Raises:
            KeySetUnavailableError: no key set could be obtained at all.
        """
        entry = self._cache.get()
        if entry is None:
            entry = await self._refresh()

        matches = _select(entry, criterion)
        if matches or self._cache.age(entry) < self._refresh_cooldown:
            return matches

        logger.info(
            "No key matched kid=%s in cached JWK Set, refreshing from %s",
            criterion.key_id,
            self._jwk_set_uri,
        )
        entry = await self._refresh(stale=entry)
        return _select(entry, criterion)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    async def _refresh(self, stale: Optional[CachedKeySet] = None) -> CachedKeySet:
        async with self._lock:
            # another task may have refreshed while we waited
            current = self._cache.get()
            if current is not None and current is not stale:
                return current

            try:
                keys = await self._fetch()
            except KeySetUnavailableError:
                fallback = self._cache.peek()
                if fallback is None:
                    raise
                logger.warning(
                    "Using stale JWK Set from %s due to fetch failure", self._jwk_set_uri
                )
                return fallback

            logger.info(
                "JWK Set refreshed from %s (%d usable keys)", self._jwk_set_uri, len(keys)
            )
            return self._cache.put(keys)

    async def _fetch(self) -> Tuple[VerificationKey, ...]:
        last_error: Optional[Exception] = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                response = await self._client.get(self._jwk_set_uri, headers={"Accept": _ACCEPT})
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise KeySetUnavailableError(
                    f"JWK Set endpoint returned HTTP {exc.response.status_code}"
                ) from exc
            except httpx.TransportError as exc:
                last_error = exc
                logger.warning(
                    "Failed to fetch JWK Set (attempt %d/%d): %s",
                    attempt,
                    self._max_attempts,
                    exc.__class__.__name__,
                )
                continue
            return self._parse(response)

        raise KeySetUnavailableError(
            f"Failed to fetch JWK Set from {self._jwk_set_uri}: {last_error!r}"
        ) from last_error

    def _parse(self, response: httpx.Response) -> Tuple[VerificationKey, ...]:
        try:
            return tuple(keys_from_jwks(response.json()))
        except ValueError as exc:
            raise KeySetUnavailableError(f"Invalid JWK Set document: {exc}") from exc


def _select(entry: CachedKeySet, criterion: KeySelectionCriterion) -> List[VerificationKey]:
    return [k for k in entry.keys if criterion.matches(k)]
