"""
controlplane_sdk.tier3_tls.tls
───────────────────────────────
Upstream TLS context assembly: SNI, ALPN offer, peer validation rule, client
certificate and trust anchor.

Skip-verify only relaxes chain verification (ACCEPT_UNTRUSTED). The SAN
exact match against the effective SNI stays in place.
"""
from __future__ import annotations

from controlplane_sdk.tier0_core.errors import TrustMaterialError
from controlplane_sdk.tier0_core.models import (
    ALPN_HTTP11,
    BackendPolicy,
    PlainTransport,
    TLSTransport,
    TransportSocketSpec,
    TrustAnchor,
    TrustChainVerification,
    UpstreamTLSContext,
    ValidationRule,
)
from controlplane_sdk.tier2_endpoints.address import Destination
from controlplane_sdk.tier3_tls.trust import RootCAProvider, resolve_trust_anchor


def effective_sni(policy: BackendPolicy, hostname: str) -> str:
    """The TLS server-name override when set, else the destination hostname."""
    return policy.tls_server_name or hostname


def build_validation_rule(sni: str, *, skip_verify: bool = False) -> ValidationRule:
    verification = TrustChainVerification.VERIFY
    if skip_verify:
        verification = TrustChainVerification.ACCEPT_UNTRUSTED
    return ValidationRule(
        match_subject_alt_names=(sni,),
        trust_chain_verification=verification,
    )


def build_tls_context(
    policy: BackendPolicy,
    hostname: str,
    trusted_ca: TrustAnchor | None = None,
) -> UpstreamTLSContext:
    sni = effective_sni(policy, hostname)
    return UpstreamTLSContext(
        sni=sni,
        alpn_protocols=(ALPN_HTTP11,),
        validation=build_validation_rule(sni, skip_verify=policy.tls_skip_verify),
        client_certificate=policy.client_certificate,
        trusted_ca=trusted_ca,
    )


def build_policy_transport_socket(
    policy: BackendPolicy,
    destination: Destination,
    root_ca: RootCAProvider,
) -> tuple[TransportSocketSpec, list[TrustMaterialError]]:
    """
    Build the transport socket for a policy cluster. Non-https destinations
    get a plain socket. Trust resolution problems are returned, not raised,
    so the caller can attach them to the cluster.
    """
    if not destination.is_tls:
        return PlainTransport(), []

    resolution = resolve_trust_anchor(policy, root_ca)
    errors = [resolution.error] if resolution.error is not None else []
    context = build_tls_context(policy, destination.host, resolution.anchor)
    return TLSTransport(context=context), errors


__all__ = [
    "effective_sni",
    "build_validation_rule",
    "build_tls_context",
    "build_policy_transport_socket",
]
