from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict, Sequence, Union

import jwt
from jwt.exceptions import InvalidKeyError, InvalidSignatureError, InvalidTokenError

from ...domain.constants import SignatureAlgorithm
from ...domain.value_objects import ParsedToken, VerificationKey

logger = logging.getLogger(__name__)

# Clock skew tolerated on exp and nbf
DEFAULT_LEEWAY_SECONDS = 60

_CLAIM_OPTIONS = {
    "verify_signature": False,
    "verify_exp": True,
    "verify_nbf": True,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
}


class SignatureVerifier:
    """
    Verifies a parsed token against candidate keys, then checks its
    time-based claims.

    Infrastructure layer:
    - Knows how PyJWT's algorithm objects verify a JWS signature.
    - Knows which claim checks PyJWT enforces (exp, nbf).
    """

    def __init__(self, leeway: Union[int, float, timedelta] = DEFAULT_LEEWAY_SECONDS) -> None:
        self._leeway = leeway

    def verify(
        self,
        parsed: ParsedToken,
        candidates: Sequence[VerificationKey],
    ) -> Dict[str, Any]:
        """
        Returns:
            The verified claims.

        Raises:
            InvalidSignatureError: no candidate key verifies the signature.
            InvalidTokenError: the signature is valid but a claim check failed.
        """
        algorithm = SignatureAlgorithm.parse(parsed.algorithm_name)
        compatible = [k for k in candidates if k.is_compatible_with(algorithm)]
        logger.debug(
            "Verifying %s signature with %d of %d candidate keys",
            algorithm,
            len(compatible),
            len(candidates),
        )

        if not any(self._signature_matches(parsed, algorithm, k) for k in compatible):
            if not candidates:
                raise InvalidSignatureError("No verification key found for the token")
            raise InvalidSignatureError("Signature verification failed")

        return self._validate_claims(parsed, algorithm)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _signature_matches(
        self,
        parsed: ParsedToken,
        algorithm: SignatureAlgorithm,
        candidate: VerificationKey,
    ) -> bool:
        routine = algorithm.routine
        try:
            prepared = routine.prepare_key(candidate.key)
            return bool(routine.verify(parsed.signing_input, prepared, parsed.signature))
        except InvalidKeyError as exc:
            logger.debug("Skipping key kid=%s: %s", candidate.key_id, exc)
            return False

    def _validate_claims(self, parsed: ParsedToken, algorithm: SignatureAlgorithm) -> Dict[str, Any]:
        # Signature already checked above; PyJWT only runs the claim checks here.
        try:
            return jwt.decode(
                parsed.raw,
                algorithms=[algorithm.jws_name],
                options=dict(_CLAIM_OPTIONS),
                leeway=self._leeway,
            )
        except (TypeError, ValueError) as exc:
            # Some PyJWT releases raise TypeError for exp/nbf values such as null or lists
            raise InvalidTokenError(f"Invalid time claim: {exc}") from exc
