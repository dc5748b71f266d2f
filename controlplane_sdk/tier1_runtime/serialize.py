"""
controlplane_sdk.tier1_runtime.serialize
─────────────────────────────────────────
Encode cluster descriptors into the discovery protocol's JSON shape (envoy
v3 Cluster field names, proto3 JSON mapping: durations as "10s", bytes as
base64). The transport layer that streams these is not part of this package.
"""
from __future__ import annotations

import base64
import json
from datetime import timedelta
from typing import Any

from controlplane_sdk.tier0_core.models import (
    ClientCertificate,
    ClusterDescriptor,
    ClusterSet,
    FileTrustAnchor,
    TLSTransport,
    UpstreamTLSContext,
)

UPSTREAM_TLS_CONTEXT_TYPE = (
    "type.googleapis.com/envoy.extensions.transport_sockets.tls.v3.UpstreamTlsContext"
)


def _duration(value: timedelta) -> str:
    return f"{value.total_seconds():g}s"


def _inline_bytes(data: bytes) -> dict[str, str]:
    return {"inline_bytes": base64.b64encode(data).decode("ascii")}


def _tls_certificate(cert: ClientCertificate) -> dict[str, Any]:
    return {
        "certificate_chain": _inline_bytes(cert.cert_pem.encode()),
        "private_key": _inline_bytes(cert.key_pem.get_secret_value().encode()),
    }


def tls_context_to_dict(ctx: UpstreamTLSContext) -> dict[str, Any]:
    validation: dict[str, Any] = {
        "match_subject_alt_names": [
            {"exact": san} for san in ctx.validation.match_subject_alt_names
        ],
        "trust_chain_verification": ctx.validation.trust_chain_verification.value,
    }
    if isinstance(ctx.trusted_ca, FileTrustAnchor):
        validation["trusted_ca"] = {"filename": ctx.trusted_ca.path}
    elif ctx.trusted_ca is not None:
        validation["trusted_ca"] = _inline_bytes(ctx.trusted_ca.data)

    common: dict[str, Any] = {
        "alpn_protocols": list(ctx.alpn_protocols),
        "validation_context": validation,
    }
    if ctx.tls_certificates:
        common["tls_certificates"] = [_tls_certificate(c) for c in ctx.tls_certificates]

    return {
        "@type": UPSTREAM_TLS_CONTEXT_TYPE,
        "sni": ctx.sni,
        "common_tls_context": common,
    }


def cluster_to_dict(cluster: ClusterDescriptor) -> dict[str, Any]:
    """Convert one ClusterDescriptor to a discovery-protocol Cluster mapping."""
    d: dict[str, Any] = {
        "name": cluster.name,
        "connect_timeout": _duration(cluster.connect_timeout),
        "load_assignment": {
            "cluster_name": cluster.name,
            "endpoints": [{
                "lb_endpoints": [{
                    "endpoint": {
                        "address": {
                            "socket_address": {
                                "address": cluster.address.host,
                                "port_value": cluster.address.port,
                            }
                        }
                    }
                }]
            }],
        },
        "respect_dns_ttl": cluster.respect_dns_ttl,
        "type": cluster.discovery_type.value,
    }
    if isinstance(cluster.transport, TLSTransport):
        socket: dict[str, Any] = {"name": "tls"}
        if cluster.transport.context is not None:
            socket["typed_config"] = tls_context_to_dict(cluster.transport.context)
        d["transport_socket"] = socket
    if cluster.http2_protocol_options is not None:
        d["http2_protocol_options"] = {
            "allow_connect": cluster.http2_protocol_options.allow_connect,
        }
    return d


def to_dicts(cluster_set: ClusterSet) -> list[dict[str, Any]]:
    return [cluster_to_dict(c) for c in cluster_set.clusters]


def serialize(cluster_set: ClusterSet) -> bytes:
    """
    Serialize a ClusterSet to JSON bytes, preserving cluster order.

    Usage:
        payload = serialize(builder.build(policies))
    """
    return json.dumps(to_dicts(cluster_set)).encode()


__all__ = [
    "UPSTREAM_TLS_CONTEXT_TYPE",
    "cluster_to_dict",
    "tls_context_to_dict",
    "to_dicts",
    "serialize",
]
