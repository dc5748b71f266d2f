"""
controlplane_sdk.tier4_clusters.cluster_set
────────────────────────────────────────────
Build the complete cluster set for one configuration epoch, in a single
pass:

  1. three internal clusters (gRPC, HTTP, authorize), always, in that order
  2. one cluster per backend policy, in policy order, when the running role
     includes the proxy

The order is part of the output contract: the discovery server detects
changes between snapshots by cluster position and name. A computed name that
repeats an earlier one fails the whole build.
"""
from __future__ import annotations

from typing import Sequence

from controlplane_sdk.tier0_core.config import ControlPlaneConfig, get_config, is_proxy
from controlplane_sdk.tier0_core.errors import ClusterNameConflictError
from controlplane_sdk.tier0_core.logging import get_logger, log_context
from controlplane_sdk.tier0_core.models import (
    BackendPolicy,
    ClusterDescriptor,
    ClusterSet,
    InternalEndpoints,
)
from controlplane_sdk.tier3_tls.trust import (
    RootCAProvider,
    StaticRootCAProvider,
    get_provider,
)
from controlplane_sdk.tier4_clusters.cluster import (
    build_internal_cluster,
    build_policy_cluster,
)
from controlplane_sdk.tier4_clusters.naming import ClusterNamer, policy_cluster_name

GRPC_CLUSTER = "control-plane-grpc"
HTTP_CLUSTER = "control-plane-http"
AUTHORIZE_CLUSTER = "authorize"

INTERNAL_CLUSTERS: tuple[str, ...] = (GRPC_CLUSTER, HTTP_CLUSTER, AUTHORIZE_CLUSTER)


class ClusterSetBuilder:
    """
    Synthesizes ClusterSets. Holds only its injected collaborators, so one
    builder can serve independent snapshots concurrently.

    Usage:
        builder = ClusterSetBuilder(endpoints, "all", root_ca=StaticRootCAProvider(path))
        cluster_set = builder.build(policies)
    """

    def __init__(
        self,
        endpoints: InternalEndpoints,
        services: str = "all",
        *,
        root_ca: RootCAProvider | None = None,
        namer: ClusterNamer | None = None,
        strict_trust: bool = False,
    ) -> None:
        self.endpoints = endpoints
        self.services = services
        self._root_ca = root_ca
        self.namer = namer or policy_cluster_name
        self.strict_trust = strict_trust

    @property
    def root_ca(self) -> RootCAProvider:
        if self._root_ca is not None:
            return self._root_ca
        return get_provider()

    def internal_clusters(self) -> list[ClusterDescriptor]:
        authorize_tls = self.endpoints.authorize_url.lower().startswith("https://")
        return [
            build_internal_cluster(
                GRPC_CLUSTER, self.endpoints.grpc_address,
                tls=not self.endpoints.grpc_insecure, force_http2=True,
            ),
            build_internal_cluster(
                HTTP_CLUSTER, self.endpoints.http_address,
                tls=False, force_http2=False,
            ),
            build_internal_cluster(
                AUTHORIZE_CLUSTER, self.endpoints.authorize_url,
                tls=authorize_tls, force_http2=True,
            ),
        ]

    def policy_clusters(self, policies: Sequence[BackendPolicy]) -> list[ClusterDescriptor]:
        root_ca = self.root_ca
        return [
            build_policy_cluster(
                self.namer(policy), policy, root_ca, strict_trust=self.strict_trust,
            )
            for policy in policies
        ]

    def build(self, policies: Sequence[BackendPolicy]) -> ClusterSet:
        with log_context(services=self.services, policy_count=len(policies)):
            clusters = self.internal_clusters()
            if is_proxy(self.services):
                clusters.extend(self.policy_clusters(policies))

            seen: set[str] = set()
            for position, cluster in enumerate(clusters):
                if cluster.name in seen:
                    raise ClusterNameConflictError(cluster.name, position=position)
                seen.add(cluster.name)

            cluster_set = ClusterSet(clusters=tuple(clusters))

            log = get_logger(__name__)
            log.info(
                "clusters.built",
                internal=len(INTERNAL_CLUSTERS),
                policies=len(clusters) - len(INTERNAL_CLUSTERS),
                warnings=len(cluster_set.warnings),
            )
            for warning in cluster_set.warnings:
                log.warning(
                    "clusters.warning",
                    cluster=warning.cluster,
                    kind=warning.kind,
                    code=warning.code,
                    reason=warning.message,
                )
        return cluster_set


def internal_endpoints(config: ControlPlaneConfig) -> InternalEndpoints:
    """Listener bind addresses from configuration."""
    return InternalEndpoints(
        grpc_address=config.grpc_address,
        http_address=config.http_address,
        authorize_url=config.authorize_url,
        grpc_insecure=config.grpc_insecure,
    )


def build_clusters(
    policies: Sequence[BackendPolicy],
    config: ControlPlaneConfig | None = None,
    *,
    root_ca: RootCAProvider | None = None,
    namer: ClusterNamer | None = None,
) -> ClusterSet:
    """
    Build the cluster set for ``policies`` using the control plane config.

    Usage:
        cluster_set = build_clusters(policies)
        for warning in cluster_set.warnings:
            ...
    """
    config = config or get_config()
    if root_ca is None and config.root_ca_bundle:
        root_ca = StaticRootCAProvider(config.root_ca_bundle)
    builder = ClusterSetBuilder(
        internal_endpoints(config),
        config.services,
        root_ca=root_ca,
        namer=namer,
        strict_trust=config.strict_trust,
    )
    return builder.build(policies)


__all__ = [
    "GRPC_CLUSTER", "HTTP_CLUSTER", "AUTHORIZE_CLUSTER", "INTERNAL_CLUSTERS",
    "ClusterSetBuilder",
    "internal_endpoints",
    "build_clusters",
]
