from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

from ..domain.entities import DecodedToken
from ..domain.value_objects import ParsedToken

# iat is assumed to be one second before exp when the token omits it
ISSUED_AT_FALLBACK = timedelta(seconds=1)


class ClaimsMaterializer:
    """
    Maps verified claims into a DecodedToken.

    Never raises: claim values it cannot interpret as instants are left
    in `claims` as they are and the corresponding field stays None.
    """

    def materialize(self, parsed: ParsedToken, claims: Mapping[str, Any]) -> DecodedToken:
        expires_at = _to_instant(claims.get("exp"))
        issued_at = _to_instant(claims.get("iat"))
        if issued_at is None and expires_at is not None:
            issued_at = expires_at - ISSUED_AT_FALLBACK

        return DecodedToken(
            token_value=parsed.raw,
            issued_at=issued_at,
            expires_at=expires_at,
            headers=dict(parsed.header),
            claims=dict(claims),
        )


def _to_instant(value: Any) -> Optional[datetime]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
