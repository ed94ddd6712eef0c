from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Iterable, Optional, Sequence, Union

import httpx
from jwt.exceptions import (
    InvalidSignatureError,
    InvalidTokenError as JWTInvalidTokenError,
)

from ...application.claims_materializer import ClaimsMaterializer
from ...application.key_selector import KeySelector
from ...domain.constants import SignatureAlgorithm
from ...domain.entities import DecodedToken
from ...domain.exceptions import (
    BadClaimsError,
    BadSignatureError,
    JwtDecodeError,
    KeySourceUnavailableError,
    MalformedTokenError,
    UnsupportedAlgorithmError,
)
from ...domain.ports import KeySetSource, TokenDecoder
from ...domain.value_objects import KeySelectionCriterion, ParsedToken, VerificationKey
from ..jwks.cache import DEFAULT_CACHE_TTL_SECONDS, KeySetCache
from ..jwks.fixed_source import FixedKeySetSource
from ..jwks.remote_source import RemoteKeySetSource
from .parser import TokenParser
from .verifier import DEFAULT_LEEWAY_SECONDS, SignatureVerifier

logger = logging.getLogger(__name__)


class JWTTokenDecoder(TokenDecoder):
    """
    Adapter implementing the TokenDecoder port using PyJWT and a KeySetSource.

    parse -> select criterion -> await keys -> verify -> materialize

    Only the key lookup suspends. Every failure leaves as exactly one
    JwtDecodeError subclass with the stage's exception chained as cause.
    The decoder keeps no per-call state, so one instance can serve
    concurrent decodes.
    """

    def __init__(
        self,
        key_set_source: KeySetSource,
        algorithms: Iterable[SignatureAlgorithm] = (SignatureAlgorithm.RS256,),
        leeway: Union[int, float, timedelta] = DEFAULT_LEEWAY_SECONDS,
    ) -> None:
        self._source = key_set_source
        self._parser = TokenParser()
        self._selector = KeySelector(algorithms)
        self._verifier = SignatureVerifier(leeway=leeway)
        self._materializer = ClaimsMaterializer()

    @classmethod
    def from_public_key(
        cls,
        public_key: Any,
        algorithm: SignatureAlgorithm = SignatureAlgorithm.RS256,
        leeway: Union[int, float, timedelta] = DEFAULT_LEEWAY_SECONDS,
    ) -> "JWTTokenDecoder":
        """Decoder pinned to one public key and one algorithm."""
        return cls(
            FixedKeySetSource.from_public_key(public_key),
            algorithms=(algorithm,),
            leeway=leeway,
        )

    @classmethod
    def from_jwk_set_uri(
        cls,
        jwk_set_uri: str,
        algorithms: Iterable[SignatureAlgorithm] = (SignatureAlgorithm.RS256,),
        *,
        cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
        leeway: Union[int, float, timedelta] = DEFAULT_LEEWAY_SECONDS,
    ) -> "JWTTokenDecoder":
        """Decoder backed by a remote JWK Set with its own cache."""
        source = RemoteKeySetSource(
            jwk_set_uri,
            cache=KeySetCache(ttl_seconds=cache_ttl_seconds),
            client=client,
        )
        return cls(source, algorithms=algorithms, leeway=leeway)

    @property
    def algorithms(self) -> Sequence[SignatureAlgorithm]:
        return self._selector.algorithms

    @property
    def key_set_source(self) -> KeySetSource:
        return self._source

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    async def decode(self, token: str) -> DecodedToken:
        """
        Decode and verify a compact JWS.

        Returns:
            DecodedToken with copied headers and claims.

        Raises:
            MalformedTokenError
            UnsupportedAlgorithmError
            KeySourceUnavailableError
            BadSignatureError
            BadClaimsError
        """
        try:
            parsed = self._parse(token)
            criterion = self._select(parsed)
            candidates = await self._fetch_keys(criterion)
            claims = self._verify(parsed, candidates)
        except JwtDecodeError as exc:
            logger.warning(
                "Token rejected (%s): %s", exc.kind.value, type(exc.cause).__name__
            )
            raise

        return self._materializer.materialize(parsed, claims)

    # ------------------------------------------------------------------ #
    # Stages
    # ------------------------------------------------------------------ #

    def _parse(self, token: str) -> ParsedToken:
        try:
            return self._parser.parse(token)
        except Exception as exc:
            # DecodeError, or anything else the parser trips on, means not a token
            raise MalformedTokenError.wrap(exc) from exc

    def _select(self, parsed: ParsedToken) -> KeySelectionCriterion:
        try:
            return self._selector.select(parsed.header)
        except Exception as exc:
            # InvalidAlgorithmError for untrusted or unknown alg
            raise UnsupportedAlgorithmError.wrap(exc) from exc

    async def _fetch_keys(self, criterion: KeySelectionCriterion) -> Sequence[VerificationKey]:
        # CancelledError is not an Exception and is never wrapped.
        try:
            keys = await self._source.get(criterion)
        except Exception as exc:
            raise KeySourceUnavailableError.wrap(exc) from exc
        return list(keys)

    def _verify(self, parsed: ParsedToken, candidates: Sequence[VerificationKey]) -> dict:
        try:
            return self._verifier.verify(parsed, candidates)
        except InvalidSignatureError as exc:
            raise BadSignatureError.wrap(exc) from exc
        except JWTInvalidTokenError as exc:
            raise BadClaimsError.wrap(exc) from exc
        except Exception as exc:
            # A key or signature the routine could not process
            raise BadSignatureError.wrap(exc) from exc
