"""
controlplane_sdk.tier4_clusters.cluster
────────────────────────────────────────
Assemble one cluster descriptor from a name, a host and port and a transport
socket. Every cluster gets a single endpoint, a 10s connect timeout and
respect_dns_ttl=True; forced HTTP/2 (with CONNECT) is reserved for the
control plane's own streaming services.
"""
from __future__ import annotations

from typing import Iterable

from controlplane_sdk.tier0_core.models import (
    BackendPolicy,
    ClusterDescriptor,
    ClusterWarning,
    Http2ProtocolOptions,
    PlainTransport,
    TLSTransport,
    TransportSocketSpec,
)
from controlplane_sdk.tier2_endpoints.address import (
    Destination,
    parse_destination,
    resolve_address,
    split_host_port,
)
from controlplane_sdk.tier2_endpoints.discovery import classify
from controlplane_sdk.tier3_tls.tls import build_policy_transport_socket
from controlplane_sdk.tier3_tls.trust import RootCAProvider


def build_cluster(
    name: str,
    host: str,
    port: int | None,
    transport: TransportSocketSpec,
    *,
    force_http2: bool = False,
    warnings: Iterable[ClusterWarning] = (),
) -> ClusterDescriptor:
    address = resolve_address(host, port, tls=transport.is_tls)
    return ClusterDescriptor(
        name=name,
        address=address,
        discovery_type=classify(address.host),
        transport=transport,
        respect_dns_ttl=True,
        http2_protocol_options=Http2ProtocolOptions(allow_connect=True) if force_http2 else None,
        warnings=tuple(warnings),
    )


def _internal_destination(address: str, tls: bool) -> Destination:
    if "://" in address:
        return parse_destination(address)
    host, port = split_host_port(address)
    return Destination(scheme="https" if tls else "http", host=host, port=port)


def build_internal_cluster(
    name: str,
    address: str,
    *,
    tls: bool,
    force_http2: bool,
) -> ClusterDescriptor:
    """
    Cluster for one of the control plane's own listeners. ``address`` is a
    bind address (``host:port``) or a URL. TLS here is a bare socket with no
    upstream context.
    """
    transport = TLSTransport() if tls else PlainTransport()
    destination = _internal_destination(address, tls)
    return build_cluster(
        name,
        destination.host,
        destination.port,
        transport,
        force_http2=force_http2,
    )


def build_policy_cluster(
    name: str,
    policy: BackendPolicy,
    root_ca: RootCAProvider,
    *,
    strict_trust: bool = False,
) -> ClusterDescriptor:
    """
    Cluster for one backend policy. Raises ConfigError on a malformed
    destination. Trust problems become warnings on the cluster, unless
    ``strict_trust`` is set, in which case the TrustMaterialError is raised.
    """
    destination = parse_destination(policy.destination)
    transport, errors = build_policy_transport_socket(policy, destination, root_ca)
    for error in errors:
        error.metadata.setdefault("cluster", name)
    if strict_trust and errors:
        raise errors[0]
    return build_cluster(
        name,
        destination.host,
        destination.port,
        transport,
        warnings=[ClusterWarning.from_error(name, e) for e in errors],
    )


__all__ = ["build_cluster", "build_internal_cluster", "build_policy_cluster"]
