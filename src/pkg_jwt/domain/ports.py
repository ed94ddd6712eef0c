from __future__ import annotations

from typing import Protocol, Sequence

from .entities import DecodedToken
from .value_objects import KeySelectionCriterion, VerificationKey


class KeySetSource(Protocol):
    """
    Port for looking up candidate verification keys.

    Implementations live in the adapters layer (fixed set, remote JWKS).
    """

    async def get(self, criterion: KeySelectionCriterion) -> Sequence[VerificationKey]:
        """
        Return the keys matching `criterion`, possibly none.

        Raises:
          - KeySetUnavailableError when the key set cannot be obtained
        """
        ...


class TokenDecoder(Protocol):
    """
    Port for decoding a compact JWT into a DecodedToken.
    """

    async def decode(self, token: str) -> DecodedToken:
        """
        Decode and verify the given token.

        Should:
          - verify the signature against a trusted algorithm
          - check expiry and not-before
        Raises:
          - JwtDecodeError (one subclass per FailureKind)
        """
        ...
