"""
controlplane_sdk.tier0_core.errors
───────────────────────────────────
Standard error taxonomy for cluster synthesis. Every error carries a stable
machine-readable code so the config-validation layer and the discovery server
can report failures consistently.

Fatal:      ConfigError (and ClusterNameConflictError): raised, rejects input
Non-fatal:  TrustMaterialError: returned and attached to the cluster as a
            ClusterWarning; raised only when strict trust is enabled
"""
from __future__ import annotations

from typing import Any


# ── Base error ────────────────────────────────────────────────────────────────

class ControlPlaneError(Exception):
    """
    Base class for all control plane errors. Every error has:
    - code: stable machine-readable string (snake_case)
    - user_message: safe to surface to operators
    - detail: internal context
    - metadata: structured fields (policy index, cluster name, ...)
    """

    code: str = "internal_error"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "An unexpected error occurred.",
        detail: str | None = None,
        **metadata: Any,
    ) -> None:
        self.code = code or self.__class__.code
        self.user_message = user_message
        self.detail = detail or user_message
        self.metadata = metadata
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "error": {
                "code": self.code,
                "message": self.user_message,
            }
        }
        if self.metadata:
            d["error"]["metadata"] = dict(self.metadata)
        return d


# ── Typed error classes ───────────────────────────────────────────────────────

class ConfigError(ControlPlaneError):
    """Malformed destination or address. Fatal to one cluster's construction."""
    code = "config_error"


class ClusterNameConflictError(ConfigError):
    """Two clusters in one set resolved to the same name."""
    code = "cluster_name_conflict"

    def __init__(self, name: str, **metadata: Any) -> None:
        self.name = name
        super().__init__(
            user_message=f"Duplicate cluster name {name!r}.",
            cluster=name,
            **metadata,
        )


class TrustMaterialError(ControlPlaneError):
    """
    Trust material for a TLS cluster could not be resolved: the inline CA was
    not valid base64, or no system root CA bundle was found.
    """
    code = "trust_material_error"


class ValidationError(ControlPlaneError):
    """Raw policy input failed schema validation."""
    code = "validation_error"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "Validation failed.",
        fields: dict | None = None,
        **metadata: Any,
    ) -> None:
        self.fields = fields or {}
        super().__init__(code, user_message, **metadata)

    def to_dict(self) -> dict:
        d = super().to_dict()
        if self.fields:
            d["error"]["fields"] = self.fields
        return d


__all__ = [
    "ControlPlaneError",
    "ConfigError",
    "ClusterNameConflictError",
    "TrustMaterialError",
    "ValidationError",
]
