"""
controlplane_sdk.tier0_core.models
───────────────────────────────────
Immutable data model for cluster synthesis: the backend policy input, the
cluster descriptor output, and the TLS object graph in between.

Variants (transport socket, trust anchor) are pydantic discriminated unions
on ``kind`` so every consumer handles both cases explicitly.
"""
from __future__ import annotations

from datetime import timedelta
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr

CONNECT_TIMEOUT = timedelta(seconds=10)
ALPN_HTTP11 = "http/1.1"


class DiscoveryType(str, Enum):
    STATIC = "STATIC"
    LOGICAL_DNS = "LOGICAL_DNS"


class TrustChainVerification(str, Enum):
    VERIFY = "VERIFY"
    ACCEPT_UNTRUSTED = "ACCEPT_UNTRUSTED"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ── Policy input ──────────────────────────────────────────────────────────────

class ClientCertificate(_Frozen):
    """PEM certificate chain and private key presented to the upstream."""
    cert_pem: str
    key_pem: SecretStr


class BackendPolicy(BaseModel):
    """
    One configured route. Only ``to`` and the tls_* fields affect the cluster;
    the route-matching fields feed the default cluster naming.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    source: str = Field(default="", alias="from")
    destination: str = Field(alias="to")
    prefix: str = ""
    path: str = ""
    regex: str = ""

    tls_server_name: str = ""
    tls_custom_ca: str = ""
    tls_custom_ca_file: str = ""
    tls_skip_verify: bool = False
    client_certificate: ClientCertificate | None = None


# ── Trust anchors ─────────────────────────────────────────────────────────────

class FileTrustAnchor(_Frozen):
    """Reference to a CA bundle on disk. Opened by the proxy runtime, never here."""
    kind: Literal["file"] = "file"
    path: str


class InlineTrustAnchor(_Frozen):
    """Decoded CA bytes tagged with a synthetic filename."""
    kind: Literal["inline"] = "inline"
    filename: str
    data: bytes


TrustAnchor = Annotated[
    Union[FileTrustAnchor, InlineTrustAnchor], Field(discriminator="kind")
]


# ── TLS context ───────────────────────────────────────────────────────────────

class ValidationRule(_Frozen):
    match_subject_alt_names: tuple[str, ...]
    trust_chain_verification: TrustChainVerification = TrustChainVerification.VERIFY


class UpstreamTLSContext(_Frozen):
    sni: str
    alpn_protocols: tuple[str, ...] = (ALPN_HTTP11,)
    validation: ValidationRule
    client_certificate: ClientCertificate | None = None
    trusted_ca: TrustAnchor | None = None

    @property
    def tls_certificates(self) -> tuple[ClientCertificate, ...]:
        if self.client_certificate is None:
            return ()
        return (self.client_certificate,)


# ── Transport socket ──────────────────────────────────────────────────────────

class PlainTransport(_Frozen):
    kind: Literal["none"] = "none"

    @property
    def is_tls(self) -> bool:
        return False


class TLSTransport(_Frozen):
    """TLS socket. Internal clusters carry no context (bare ``tls`` socket)."""
    kind: Literal["tls"] = "tls"
    context: UpstreamTLSContext | None = None

    @property
    def is_tls(self) -> bool:
        return True


TransportSocketSpec = Annotated[
    Union[PlainTransport, TLSTransport], Field(discriminator="kind")
]


# ── Cluster output ────────────────────────────────────────────────────────────

class EndpointAddress(_Frozen):
    host: str
    port: int

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


class Http2ProtocolOptions(_Frozen):
    allow_connect: bool = True


class ClusterWarning(_Frozen):
    """A non-fatal problem attached to one cluster."""
    cluster: str
    kind: str
    code: str
    message: str

    @classmethod
    def from_error(cls, cluster: str, error: Exception) -> ClusterWarning:
        return cls(
            cluster=cluster,
            kind=type(error).__name__,
            code=getattr(error, "code", type(error).__name__),
            message=getattr(error, "user_message", str(error)),
        )


class ClusterDescriptor(_Frozen):
    name: str
    address: EndpointAddress
    discovery_type: DiscoveryType
    transport: TransportSocketSpec = Field(default_factory=PlainTransport)
    connect_timeout: timedelta = CONNECT_TIMEOUT
    respect_dns_ttl: bool = True
    http2_protocol_options: Http2ProtocolOptions | None = None
    warnings: tuple[ClusterWarning, ...] = ()

    @property
    def tls_context(self) -> UpstreamTLSContext | None:
        if isinstance(self.transport, TLSTransport):
            return self.transport.context
        return None


class ClusterSet(_Frozen):
    """
    Ordered synthesis result: internal clusters first, then one cluster per
    policy in input order. Downstream change detection depends on this order.
    """
    clusters: tuple[ClusterDescriptor, ...] = ()

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.clusters]

    @property
    def warnings(self) -> list[ClusterWarning]:
        return [w for c in self.clusters for w in c.warnings]

    def get(self, name: str) -> ClusterDescriptor | None:
        for cluster in self.clusters:
            if cluster.name == name:
                return cluster
        return None

    def __len__(self) -> int:
        return len(self.clusters)


class InternalEndpoints(_Frozen):
    """Bind addresses of the control plane's own services."""
    grpc_address: str
    http_address: str
    authorize_url: str
    grpc_insecure: bool = False


__all__ = [
    "CONNECT_TIMEOUT", "ALPN_HTTP11",
    "DiscoveryType", "TrustChainVerification",
    "ClientCertificate", "BackendPolicy",
    "FileTrustAnchor", "InlineTrustAnchor", "TrustAnchor",
    "ValidationRule", "UpstreamTLSContext",
    "PlainTransport", "TLSTransport", "TransportSocketSpec",
    "EndpointAddress", "Http2ProtocolOptions",
    "ClusterWarning", "ClusterDescriptor", "ClusterSet",
    "InternalEndpoints",
]
