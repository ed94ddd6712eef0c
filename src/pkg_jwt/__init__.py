"""
pkg_jwt

Non-blocking JWT (JWS) decoding core: parses compact tokens, looks up
verification keys from a fixed or remote JWK Set, verifies signatures
against pinned algorithms and returns an immutable DecodedToken.
"""

__version__ = "0.1.0"

from .domain.entities import DecodedToken
from .domain.constants import FailureKind, KeyUse, SignatureAlgorithm
from .domain.exceptions import (
    JwtDecodeError,
    MalformedTokenError,
    UnsupportedAlgorithmError,
    KeySourceUnavailableError,
    BadSignatureError,
    BadClaimsError,
    KeySetUnavailableError,
)
from .domain.value_objects import (
    KeySelectionCriterion,
    ParsedToken,
    VerificationKey,
)
from .domain.ports import KeySetSource, TokenDecoder

from .application.key_selector import KeySelector
from .application.claims_materializer import ClaimsMaterializer

from .adapters.jose.parser import TokenParser
from .adapters.jose.verifier import SignatureVerifier
from .adapters.jose.jwt_decoder import JWTTokenDecoder
from .adapters.jwks.cache import KeySetCache
from .adapters.jwks.fixed_source import FixedKeySetSource
from .adapters.jwks.remote_source import RemoteKeySetSource
from .adapters.jwks.keys import key_from_jwk, key_from_public_key, keys_from_jwks

from .config import DecoderSettings, settings_from_env
from .integrations.common.decoder_factory import (
    create_decoder_from_keycloak,
    create_decoder_from_settings,
)

__all__ = [
    "__version__",
    # domain core
    "DecodedToken",
    "FailureKind",
    "KeyUse",
    "SignatureAlgorithm",
    "KeySelectionCriterion",
    "ParsedToken",
    "VerificationKey",
    "KeySetSource",
    "TokenDecoder",
    # exceptions
    "JwtDecodeError",
    "MalformedTokenError",
    "UnsupportedAlgorithmError",
    "KeySourceUnavailableError",
    "BadSignatureError",
    "BadClaimsError",
    "KeySetUnavailableError",
    # pipeline stages
    "TokenParser",
    "KeySelector",
    "SignatureVerifier",
    "ClaimsMaterializer",
    # adapters
    "JWTTokenDecoder",
    "KeySetCache",
    "FixedKeySetSource",
    "RemoteKeySetSource",
    "key_from_jwk",
    "key_from_public_key",
    "keys_from_jwks",
    # configuration
    "DecoderSettings",
    "settings_from_env",
    "create_decoder_from_settings",
    "create_decoder_from_keycloak",
]
