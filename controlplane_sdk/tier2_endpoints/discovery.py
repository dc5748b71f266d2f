"""
controlplane_sdk.tier2_endpoints.discovery
───────────────────────────────────────────
Cluster membership discovery: a literal IPv4/IPv6 host is a fixed STATIC
member; anything else is a hostname the proxy resolves (and re-resolves on
TTL expiry) as LOGICAL_DNS.
"""
from __future__ import annotations

import ipaddress

from controlplane_sdk.tier0_core.models import DiscoveryType


def is_ip_literal(host: str) -> bool:
    try:
        ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return False
    return True


def classify(host: str) -> DiscoveryType:
    """Return STATIC for an IP literal, LOGICAL_DNS for anything else."""
    if is_ip_literal(host):
        return DiscoveryType.STATIC
    return DiscoveryType.LOGICAL_DNS


__all__ = ["is_ip_literal", "classify"]
