from __future__ import annotations

import os

from .settings import DecoderSettings


def settings_from_env() -> DecoderSettings:
    def _bool(key: str, default: bool = True) -> bool:
        raw = os.getenv(key)
        if raw is None:
            return default
        return str(raw).strip().lower() in {"1", "true", "yes", "on"}

    def _float(key: str, default: float) -> float:
        raw = os.getenv(key)
        if raw is None or not raw.strip():
            return default
        try:
            return float(raw)
        except ValueError as exc:
            raise RuntimeError(f"Invalid value for {key}: {raw!r}") from exc

    def _split_csv(key: str) -> list[str]:
        raw = os.getenv(key)
        if not raw:
            return []
        return [x.strip() for x in raw.split(",") if x and x.strip()]

    jwk_set_uri = os.getenv("JWT_JWK_SET_URI")
    if not jwk_set_uri:
        base_url = os.getenv("KEYCLOAK_BASE_URL")
        realm = os.getenv("KEYCLOAK_REALM")
        if not (base_url and realm):
            raise RuntimeError(
                "Missing JWK Set location: set JWT_JWK_SET_URI "
                "or KEYCLOAK_BASE_URL and KEYCLOAK_REALM"
            )
        jwk_set_uri = DecoderSettings.keycloak_jwk_set_uri(base_url, realm)

    return DecoderSettings(
        jwk_set_uri=jwk_set_uri,
        algorithms=_split_csv("JWT_ALGORITHMS") or ["RS256"],
        cache_ttl_seconds=_float("JWKS_CACHE_TTL", 300.0),
        http_timeout_seconds=_float("JWKS_HTTP_TIMEOUT", 10.0),
        leeway_seconds=_float("JWT_LEEWAY", 60.0),
        max_attempts=int(_float("JWKS_MAX_ATTEMPTS", 2)),
        refresh_cooldown_seconds=_float("JWKS_REFRESH_COOLDOWN", 30.0),
        verify_ssl=_bool("VERIFY_SSL", True),
    )
