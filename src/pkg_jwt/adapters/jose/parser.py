from __future__ import annotations

import binascii
import json
import re
from typing import Any, Dict

from jwt.exceptions import DecodeError
from jwt.utils import base64url_decode

from ...domain.value_objects import ParsedToken

_SEGMENT = re.compile(r"[A-Za-z0-9_-]*")


class TokenParser:
    """
    Splits a compact JWS into header, claims and signature without trusting
    any of it.

    Errors never echo the token itself, only what was wrong with it.
    """

    def parse(self, token: str) -> ParsedToken:
        """
        Raises:
            DecodeError: the token is not three base64url segments with JSON
            object header and payload.
        """
        if not isinstance(token, str):
            raise DecodeError(f"Invalid token type: expected str, got {type(token).__name__}")

        segments = token.split(".")
        if len(segments) != 3:
            raise DecodeError(
                f"Invalid serialized JWS: expected 3 segments, found {len(segments)}"
            )
        header_segment, payload_segment, signature_segment = segments

        header = self._decode_json_object(header_segment, "header")
        claims = self._decode_json_object(payload_segment, "payload")
        signature = self._decode_segment(signature_segment, "signature")

        alg = header.get("alg")
        if not isinstance(alg, str) or not alg:
            raise DecodeError("Missing or invalid 'alg' header parameter")

        return ParsedToken(
            raw=token,
            header=header,
            claims=claims,
            signing_input=f"{header_segment}.{payload_segment}".encode("ascii"),
            signature=signature,
        )

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _decode_segment(self, segment: str, name: str) -> bytes:
        if not _SEGMENT.fullmatch(segment):
            raise DecodeError(f"Invalid {name} segment: not base64url encoded")
        try:
            return base64url_decode(segment)
        except (TypeError, ValueError, binascii.Error) as exc:
            raise DecodeError(f"Invalid {name} segment: {exc}") from exc

    def _decode_json_object(self, segment: str, name: str) -> Dict[str, Any]:
        if not segment:
            raise DecodeError(f"Invalid {name} segment: empty")
        data = self._decode_segment(segment, name)
        try:
            value = json.loads(data)
        except (ValueError, RecursionError) as exc:
            raise DecodeError(f"Invalid {name} JSON: {exc}") from exc
        if not isinstance(value, dict):
            raise DecodeError(f"Invalid {name}: must be a JSON object")
        return value
