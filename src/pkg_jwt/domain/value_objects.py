# src/pkg_jwt/domain/value_objects.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .constants import KeyUse, SignatureAlgorithm


# --- Parsed (untrusted) token --------------------------------------------


@dataclass(frozen=True, slots=True)
class ParsedToken:
    """
    A compact JWT split into its parts. Nothing here is verified yet.

    `signing_input` holds the header and payload segments exactly as they
    were received, so signatures are checked against the original bytes.
    """
    raw: str
    header: Dict[str, Any]
    claims: Dict[str, Any]
    signing_input: bytes
    signature: bytes

    @property
    def algorithm_name(self) -> Any:
        return self.header.get("alg")

    @property
    def key_id(self) -> Optional[str]:
        kid = self.header.get("kid")
        return kid if isinstance(kid, str) else None


# --- Key material ---------------------------------------------------------


@dataclass(frozen=True, slots=True)
class VerificationKey:
    """
    A public key plus the JWK metadata used to select it.

    `key` is a `cryptography` public key object.
    """
    key: Any = field(compare=False)
    key_type: str
    curve: Optional[str] = None
    key_id: Optional[str] = None
    use: Optional[str] = None
    algorithm: Optional[str] = None

    def is_compatible_with(self, algorithm: SignatureAlgorithm) -> bool:
        if self.key_type != algorithm.key_type:
            return False
        if algorithm.curves and self.curve not in algorithm.curves:
            return False
        if self.algorithm is not None and self.algorithm != algorithm.jws_name:
            return False
        return True


@dataclass(frozen=True, slots=True)
class KeySelectionCriterion:
    """
    What a key-set source should look for, derived from one token header.
    """
    algorithm: SignatureAlgorithm
    key_id: Optional[str] = None
    key_use: KeyUse = KeyUse.SIGNATURE

    def matches(self, key: VerificationKey) -> bool:
        if not key.is_compatible_with(self.algorithm):
            return False
        if key.use is not None and key.use != self.key_use.value:
            return False
        if self.key_id is not None and key.key_id != self.key_id:
            return False
        return True
