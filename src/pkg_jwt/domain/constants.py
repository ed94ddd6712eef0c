from __future__ import annotations

from enum import Enum
from typing import Tuple

from jwt.algorithms import Algorithm, get_default_algorithms
from jwt.exceptions import InvalidAlgorithmError


class FailureKind(Enum):
    MALFORMED = "malformed"
    UNSUPPORTED_ALGORITHM = "unsupported_algorithm"
    SOURCE_UNAVAILABLE = "source_unavailable"
    BAD_SIGNATURE = "bad_signature"
    BAD_CLAIMS = "bad_claims"


class KeyUse(Enum):
    SIGNATURE = "sig"
    ENCRYPTION = "enc"


class SignatureAlgorithm(Enum):
    """
    Closed set of JWS algorithms this package is able to verify.

    Each member knows which JWK key type (and curves, where relevant) it
    accepts. Symmetric algorithms and ``none`` are deliberately absent.
    """

    RS256 = ("RS256", "RSA", ())
    RS384 = ("RS384", "RSA", ())
    RS512 = ("RS512", "RSA", ())
    PS256 = ("PS256", "RSA", ())
    PS384 = ("PS384", "RSA", ())
    PS512 = ("PS512", "RSA", ())
    ES256 = ("ES256", "EC", ("P-256",))
    ES384 = ("ES384", "EC", ("P-384",))
    ES512 = ("ES512", "EC", ("P-521",))
    EdDSA = ("EdDSA", "OKP", ("Ed25519", "Ed448"))

    def __init__(self, jws_name: str, key_type: str, curves: Tuple[str, ...]) -> None:
        self.jws_name = jws_name
        self.key_type = key_type
        self.curves = curves

    def __str__(self) -> str:
        return self.jws_name

    @property
    def routine(self) -> Algorithm:
        """PyJWT verification routine for this algorithm."""
        return get_default_algorithms()[self.jws_name]

    @classmethod
    def parse(cls, name: object) -> "SignatureAlgorithm":
        for member in cls:
            if member.jws_name == name:
                return member
        raise InvalidAlgorithmError(f"Unsupported algorithm of {name!r}")
