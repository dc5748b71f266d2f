"""
controlplane_sdk.tier0_core.config
───────────────────────────────────
Typed control plane configuration with env layering. Reads from .env →
environment variables. All fields are typed via Pydantic; bad values raise at
startup, not in the middle of a synthesis pass.

Minimal stack: pydantic-settings + python-dotenv
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SERVICE_MODES = frozenset({"all", "proxy", "authorize", "authenticate"})


def is_proxy(services: str) -> bool:
    """True when the running role includes the externally-facing proxy."""
    return services in ("all", "proxy")


class ControlPlaneConfig(BaseSettings):
    """
    Typed control plane configuration.
    All env vars are prefixed with CONTROLPLANE_.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ── Role ──────────────────────────────────────────────────────────────────
    services: str = Field(default="all", alias="CONTROLPLANE_SERVICES")

    # ── Internal listeners ────────────────────────────────────────────────────
    grpc_address: str = Field(default="127.0.0.1:5443", alias="CONTROLPLANE_GRPC_ADDRESS")
    grpc_insecure: bool = Field(default=False, alias="CONTROLPLANE_GRPC_INSECURE")
    http_address: str = Field(default="127.0.0.1:5080", alias="CONTROLPLANE_HTTP_ADDRESS")
    authorize_url: str = Field(
        default="https://127.0.0.1:5443", alias="CONTROLPLANE_AUTHORIZE_URL"
    )

    # ── Trust ─────────────────────────────────────────────────────────────────
    root_ca_bundle: str = Field(default="", alias="CONTROLPLANE_ROOT_CA_BUNDLE")
    strict_trust: bool = Field(default=False, alias="CONTROLPLANE_STRICT_TRUST")

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", alias="CONTROLPLANE_LOG_LEVEL")
    log_format: str = Field(default="json", alias="CONTROLPLANE_LOG_FORMAT")

    @field_validator("services")
    @classmethod
    def validate_services(cls, v: str) -> str:
        if v.lower() not in SERVICE_MODES:
            raise ValueError(f"services must be one of {sorted(SERVICE_MODES)}, got {v!r}")
        return v.lower()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in ("json", "console"):
            raise ValueError(f"log_format must be json or console, got {v!r}")
        return v.lower()

    @property
    def is_proxy(self) -> bool:
        return is_proxy(self.services)


@lru_cache(maxsize=1)
def get_config() -> ControlPlaneConfig:
    """
    Return the singleton control plane config. Cached after first call.
    Call _reset_config() in tests to pick up new env vars.
    """
    return ControlPlaneConfig()


def _reset_config() -> None:
    """For tests: clear the config cache."""
    get_config.cache_clear()
