from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True, slots=True)
class DecodedToken:
    """
    A verified JWT.

    Only built after the signature and time-based claims have been checked.
    `headers` and `claims` are private copies of the parsed mappings.
    """
    token_value: str
    issued_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    headers: Dict[str, Any] = field(default_factory=dict)
    claims: Dict[str, Any] = field(default_factory=dict)

    # --- Read-only shortcuts for common claims ----------------------------

    @property
    def subject(self) -> Optional[str]:
        return self.claims.get("sub")

    @property
    def issuer(self) -> Optional[str]:
        return self.claims.get("iss")

    @property
    def key_id(self) -> Optional[str]:
        return self.headers.get("kid")

    @property
    def algorithm(self) -> Optional[str]:
        return self.headers.get("alg")
