"""
controlplane_sdk.tier3_tls.trust
─────────────────────────────────
Trust anchor resolution for upstream TLS. Precedence is strict:

  1. tls_custom_ca_file  → file reference (never opened here)
  2. tls_custom_ca       → base64-decoded inline bytes
  3. system root bundle  → file reference from the RootCAProvider

Failures in 2 and 3 are non-fatal: the resolution carries a
TrustMaterialError and no anchor, and the caller attaches a warning.

Root CA lookup is injected so tests never depend on the host's bundle.
Select via: CONTROLPLANE_ROOT_CA_BUNDLE=<path> (static) | unset (system)
"""
from __future__ import annotations

import base64
import binascii
import os
import ssl
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from controlplane_sdk.tier0_core.errors import TrustMaterialError
from controlplane_sdk.tier0_core.models import (
    BackendPolicy,
    FileTrustAnchor,
    InlineTrustAnchor,
    TrustAnchor,
)

CUSTOM_CA_FILENAME = "custom-ca.pem"

# Well-known distro CA bundle locations, checked after SSL_CERT_FILE and the
# OpenSSL default.
KNOWN_BUNDLE_PATHS: tuple[str, ...] = (
    "/etc/ssl/certs/ca-certificates.crt",                 # Debian/Ubuntu/Gentoo
    "/etc/pki/tls/certs/ca-bundle.crt",                   # Fedora/RHEL 6
    "/etc/ssl/ca-bundle.pem",                             # OpenSUSE
    "/etc/pki/tls/cacert.pem",                            # OpenELEC
    "/etc/pki/ca-trust/extracted/pem/tls-ca-bundle.pem",  # CentOS/RHEL 7
    "/etc/ssl/cert.pem",                                  # Alpine, macOS
)


# ── Provider protocol ─────────────────────────────────────────────────────────

@runtime_checkable
class RootCAProvider(Protocol):
    def lookup(self) -> str | None: ...


class StaticRootCAProvider:
    """Returns a fixed bundle path, or None to simulate a host without roots."""

    def __init__(self, path: str | None) -> None:
        self._path = path or None

    def lookup(self) -> str | None:
        return self._path


class SystemRootCAProvider:
    """
    Find the host's root CA bundle. Checks SSL_CERT_FILE, then the OpenSSL
    default cafile, then KNOWN_BUNDLE_PATHS. The first answer is cached.
    """

    def __init__(self, candidates: tuple[str, ...] | None = None) -> None:
        self._candidates = candidates
        self._resolved = False
        self._path: str | None = None

    def candidates(self) -> list[str]:
        if self._candidates is not None:
            return list(self._candidates)
        found = [
            os.environ.get("SSL_CERT_FILE", ""),
            ssl.get_default_verify_paths().cafile or "",
        ]
        return [p for p in found if p] + list(KNOWN_BUNDLE_PATHS)

    def lookup(self) -> str | None:
        if not self._resolved:
            self._path = next((p for p in self.candidates() if os.path.isfile(p)), None)
            self._resolved = True
        return self._path


# ── Provider registry ─────────────────────────────────────────────────────────

_provider: RootCAProvider | None = None


def _build_provider() -> RootCAProvider:
    bundle = os.getenv("CONTROLPLANE_ROOT_CA_BUNDLE", "")
    if bundle:
        return StaticRootCAProvider(bundle)
    return SystemRootCAProvider()


def get_provider() -> RootCAProvider:
    global _provider
    if _provider is None:
        _provider = _build_provider()
    return _provider


def _reset_provider() -> None:
    global _provider
    _provider = None


# ── Resolution ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TrustResolution:
    """Outcome of trust anchor resolution for one policy."""
    anchor: TrustAnchor | None = None
    error: TrustMaterialError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def decode_custom_ca(value: str) -> bytes:
    """
    Strictly decode standard base64, ignoring line breaks. Any other
    whitespace is rejected, as is input that decodes to nothing.
    """
    data = base64.b64decode(value.replace("\r", "").replace("\n", ""), validate=True)
    if not data:
        raise ValueError("custom CA is empty")
    return data


def resolve_trust_anchor(
    policy: BackendPolicy, root_ca: RootCAProvider
) -> TrustResolution:
    """Resolve the CA material used to verify the upstream's certificate."""
    if policy.tls_custom_ca_file:
        return TrustResolution(anchor=FileTrustAnchor(path=policy.tls_custom_ca_file))

    if policy.tls_custom_ca:
        try:
            data = decode_custom_ca(policy.tls_custom_ca)
        except (binascii.Error, ValueError) as exc:
            return TrustResolution(error=TrustMaterialError(
                "invalid_custom_ca",
                "Invalid custom CA certificate: not valid base64.",
                detail=str(exc),
            ))
        return TrustResolution(
            anchor=InlineTrustAnchor(filename=CUSTOM_CA_FILENAME, data=data)
        )

    path = root_ca.lookup()
    if not path:
        return TrustResolution(error=TrustMaterialError(
            "root_ca_unavailable",
            "Unable to enable certificate verification because no root CAs were found.",
        ))
    return TrustResolution(anchor=FileTrustAnchor(path=path))


__all__ = [
    "CUSTOM_CA_FILENAME",
    "KNOWN_BUNDLE_PATHS",
    "RootCAProvider",
    "StaticRootCAProvider",
    "SystemRootCAProvider",
    "TrustResolution",
    "decode_custom_ca",
    "get_provider",
    "resolve_trust_anchor",
]
