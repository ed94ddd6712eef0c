from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from ..domain.constants import SignatureAlgorithm


@dataclass(slots=True)
class DecoderSettings:
    """
    Settings for a decoder backed by a remote JWK Set.

    Host code decides how to construct this (env, config file, etc.).
    """
    jwk_set_uri: str
    algorithms: List[str] = field(default_factory=lambda: ["RS256"])
    cache_ttl_seconds: float = 300.0
    http_timeout_seconds: float = 10.0
    leeway_seconds: float = 60.0
    max_attempts: int = 2
    refresh_cooldown_seconds: float = 30.0
    verify_ssl: bool = True

    @property
    def trusted_algorithms(self) -> Tuple[SignatureAlgorithm, ...]:
        """
        Raises:
            InvalidAlgorithmError: a configured name is not a supported algorithm.
        """
        return tuple(SignatureAlgorithm.parse(name.strip()) for name in self.algorithms)

    @staticmethod
    def keycloak_jwk_set_uri(keycloak_base_url: str, realm: str) -> str:
        base = keycloak_base_url.strip().rstrip("/")
        return f"{base}/realms/{realm}/protocol/openid-connect/certs"

