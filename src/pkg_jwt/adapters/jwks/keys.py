from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional

from cryptography.hazmat.primitives.asymmetric.ec import EllipticCurvePublicKey
from cryptography.hazmat.primitives.asymmetric.ed448 import Ed448PublicKey
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from jwt import PyJWK
from jwt.exceptions import InvalidKeyError, PyJWKError

from ...domain.value_objects import VerificationKey

logger = logging.getLogger(__name__)

# cryptography curve names -> JWK "crv" values
_EC_CURVES = {
    "secp256r1": "P-256",
    "secp384r1": "P-384",
    "secp521r1": "P-521",
}

_ASYMMETRIC_KEY_TYPES = {"RSA", "EC", "OKP"}


def key_from_public_key(
    public_key: Any,
    *,
    key_id: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> VerificationKey:
    """
    Wrap a `cryptography` public key object.

    Raises:
        TypeError: private keys and unsupported key classes.
    """
    if isinstance(public_key, RSAPublicKey):
        return VerificationKey(key=public_key, key_type="RSA", key_id=key_id, algorithm=algorithm)
    if isinstance(public_key, EllipticCurvePublicKey):
        curve = _EC_CURVES.get(public_key.curve.name)
        return VerificationKey(
            key=public_key, key_type="EC", curve=curve, key_id=key_id, algorithm=algorithm
        )
    if isinstance(public_key, Ed25519PublicKey):
        return VerificationKey(
            key=public_key, key_type="OKP", curve="Ed25519", key_id=key_id, algorithm=algorithm
        )
    if isinstance(public_key, Ed448PublicKey):
        return VerificationKey(
            key=public_key, key_type="OKP", curve="Ed448", key_id=key_id, algorithm=algorithm
        )
    raise TypeError(f"Unsupported public key type: {type(public_key).__name__}")


def key_from_jwk(jwk: Mapping[str, Any]) -> VerificationKey:
    """
    Build a VerificationKey from one JWK (RFC 7517) mapping.

    Raises:
        PyJWKError / InvalidKeyError: unsupported or malformed key.
    """
    kty = jwk.get("kty")
    if kty not in _ASYMMETRIC_KEY_TYPES:
        raise PyJWKError(f"Unsupported key type: {kty!r}")
    if "d" in jwk:
        raise InvalidKeyError("Private keys are not accepted for verification")

    key = PyJWK(dict(jwk)).key
    kid = jwk.get("kid")
    use = jwk.get("use")
    alg = jwk.get("alg")
    crv = jwk.get("crv")
    return VerificationKey(
        key=key,
        key_type=kty,
        curve=crv if isinstance(crv, str) else None,
        key_id=kid if isinstance(kid, str) else None,
        use=use if isinstance(use, str) else None,
        algorithm=alg if isinstance(alg, str) else None,
    )


def keys_from_jwks(document: Mapping[str, Any]) -> List[VerificationKey]:
    """
    Parse a JWK Set document, skipping keys that cannot be used.

    Raises:
        ValueError: the document has no "keys" list.
    """
    entries = document.get("keys") if isinstance(document, Mapping) else None
    if not isinstance(entries, list):
        raise ValueError("JWK Set document must contain a 'keys' list")
    return list(_usable_keys(entries))


def _usable_keys(entries: Iterable[Any]) -> Iterable[VerificationKey]:
    for entry in entries:
        if not isinstance(entry, Mapping):
            logger.debug("Skipping non-object JWK entry")
            continue
        try:
            yield key_from_jwk(entry)
        except (PyJWKError, InvalidKeyError, ValueError, TypeError) as exc:
            logger.debug("Skipping JWK kid=%s: %s", entry.get("kid"), exc)
