from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Tuple

from jwt.exceptions import InvalidAlgorithmError

from ..domain.constants import KeyUse, SignatureAlgorithm
from ..domain.value_objects import KeySelectionCriterion

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class KeySelector:
    """
    Derives a KeySelectionCriterion from an (unverified) token header.

    The trusted algorithms are fixed when the selector is built; the header
    can only pick one of them, never widen the set.
    """

    algorithms: Tuple[SignatureAlgorithm, ...]

    def __init__(self, algorithms: Iterable[SignatureAlgorithm]) -> None:
        trusted = tuple(algorithms)
        if not trusted:
            raise ValueError("At least one trusted algorithm is required")
        object.__setattr__(self, "algorithms", trusted)

    def select(self, header: Mapping[str, Any]) -> KeySelectionCriterion:
        """
        Raises:
            InvalidAlgorithmError: the declared algorithm is unknown or not trusted.
        """
        algorithm = SignatureAlgorithm.parse(header.get("alg"))
        if algorithm not in self.algorithms:
            raise InvalidAlgorithmError(f"Unsupported algorithm of {algorithm}")

        kid = header.get("kid")
        key_id = kid if isinstance(kid, str) else None

        logger.debug("Selected criterion alg=%s kid=%s", algorithm, key_id)
        return KeySelectionCriterion(
            algorithm=algorithm,
            key_id=key_id,
            key_use=KeyUse.SIGNATURE,
        )
