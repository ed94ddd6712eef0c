from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Tuple

from ...domain.value_objects import KeySelectionCriterion, VerificationKey
from .keys import key_from_public_key, keys_from_jwks


class FixedKeySetSource:
    """
    KeySetSource over a static, in-memory set of keys.

    Lookups never touch the network; `get` is async only to keep the
    same contract as the remote source.
    """

    def __init__(self, keys: Iterable[VerificationKey]) -> None:
        self._keys: Tuple[VerificationKey, ...] = tuple(keys)

    @classmethod
    def from_public_key(
        cls,
        public_key: Any,
        *,
        key_id: Optional[str] = None,
        algorithm: Optional[str] = None,
    ) -> "FixedKeySetSource":
        return cls([key_from_public_key(public_key, key_id=key_id, algorithm=algorithm)])

    @classmethod
    def from_jwks(cls, document: Mapping[str, Any]) -> "FixedKeySetSource":
        return cls(keys_from_jwks(document))

    @property
    def keys(self) -> Tuple[VerificationKey, ...]:
        return self._keys

    async def get(self, criterion: KeySelectionCriterion) -> List[VerificationKey]:
        return [k for k in self._keys if criterion.matches(k)]
