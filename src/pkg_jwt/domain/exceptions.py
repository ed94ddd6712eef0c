from __future__ import annotations

from typing import Optional

from .constants import FailureKind

DECODE_ERROR_PREFIX = "An error occurred while attempting to decode the token: "


class JwtDecodeError(Exception):
    """Raised when a token cannot be decoded into a DecodedToken."""

    kind: FailureKind = FailureKind.MALFORMED

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    @property
    def retryable(self) -> bool:
        return self.kind is FailureKind.SOURCE_UNAVAILABLE

    @classmethod
    def wrap(cls, cause: BaseException) -> "JwtDecodeError":
        return cls(f"{DECODE_ERROR_PREFIX}{cause}", cause)


class MalformedTokenError(JwtDecodeError):
    """Raised when the token is not three valid base64url/JSON segments."""
    kind = FailureKind.MALFORMED


class UnsupportedAlgorithmError(JwtDecodeError):
    """Raised when the declared algorithm is not trusted by the decoder."""
    kind = FailureKind.UNSUPPORTED_ALGORITHM


class KeySourceUnavailableError(JwtDecodeError):
    """Raised when verification keys could not be obtained."""
    kind = FailureKind.SOURCE_UNAVAILABLE


class BadSignatureError(JwtDecodeError):
    """Raised when no candidate key verifies the signature."""
    kind = FailureKind.BAD_SIGNATURE


class BadClaimsError(JwtDecodeError):
    """Raised when the signature is valid but a claim check failed."""
    kind = FailureKind.BAD_CLAIMS


class KeySetUnavailableError(Exception):
    """
    Raised by key-set sources when the key document cannot be fetched or
    parsed. Distinct from an empty result, which is not an error.
    """
    pass
