"""
controlplane_sdk.tier4_clusters.naming
───────────────────────────────────────
Default policy → cluster name function. The name is a stable digest of the
route-identifying fields, so an unchanged policy keeps its cluster name
across configuration epochs.
"""
from __future__ import annotations

import hashlib
from typing import Callable

from controlplane_sdk.tier0_core.models import BackendPolicy

ClusterNamer = Callable[[BackendPolicy], str]


def route_id(policy: BackendPolicy) -> str:
    digest = hashlib.sha256()
    for part in (policy.source, policy.destination, policy.prefix, policy.path, policy.regex):
        digest.update(part.encode())
        digest.update(b"\x00")
    return digest.hexdigest()[:16]


def policy_cluster_name(policy: BackendPolicy) -> str:
    return f"policy-{route_id(policy)}"


__all__ = ["ClusterNamer", "route_id", "policy_cluster_name"]
