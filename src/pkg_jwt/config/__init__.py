"""
pkg_jwt.config

Decoder configuration:

- DecoderSettings: remote JWK Set location, trusted algorithms, cache
  and HTTP tuning.
- settings_from_env: build DecoderSettings from environment variables
  (JWT_JWK_SET_URI, or KEYCLOAK_BASE_URL + KEYCLOAK_REALM).
"""

from __future__ import annotations

from .env import settings_from_env
from .settings import DecoderSettings

__all__ = [
    "DecoderSettings",
    "settings_from_env",
]
