"""
controlplane_sdk
────────────────
Stable top-level exports. Import from here, not from sub-modules directly.
Every name exported here is part of the public API and subject to semver.
"""
from controlplane_sdk.tier0_core.logging import get_logger
from controlplane_sdk.tier0_core.errors import (
    ControlPlaneError,
    ConfigError,
    ClusterNameConflictError,
    TrustMaterialError,
    ValidationError,
)
from controlplane_sdk.tier0_core.config import get_config, ControlPlaneConfig, is_proxy
from controlplane_sdk.tier0_core.models import (
    BackendPolicy,
    ClientCertificate,
    ClusterDescriptor,
    ClusterSet,
    ClusterWarning,
    DiscoveryType,
    InternalEndpoints,
    TrustChainVerification,
)

from controlplane_sdk.tier1_runtime.validate import validate_policy, validate_policies
from controlplane_sdk.tier1_runtime.serialize import serialize, cluster_to_dict

from controlplane_sdk.tier2_endpoints.address import parse_destination, resolve_address
from controlplane_sdk.tier2_endpoints.discovery import classify

from controlplane_sdk.tier3_tls.trust import (
    RootCAProvider,
    StaticRootCAProvider,
    SystemRootCAProvider,
    resolve_trust_anchor,
)
from controlplane_sdk.tier3_tls.tls import build_tls_context, effective_sni

from controlplane_sdk.tier4_clusters.naming import ClusterNamer, policy_cluster_name
from controlplane_sdk.tier4_clusters.cluster import build_cluster
from controlplane_sdk.tier4_clusters.cluster_set import ClusterSetBuilder, build_clusters

__version__ = "0.1.0"
__all__ = [
    # logging
    "get_logger",
    # errors
    "ControlPlaneError", "ConfigError", "ClusterNameConflictError",
    "TrustMaterialError", "ValidationError",
    # config
    "get_config", "ControlPlaneConfig", "is_proxy",
    # models
    "BackendPolicy", "ClientCertificate", "ClusterDescriptor", "ClusterSet",
    "ClusterWarning", "DiscoveryType", "InternalEndpoints", "TrustChainVerification",
    # validate
    "validate_policy", "validate_policies",
    # serialize
    "serialize", "cluster_to_dict",
    # address / discovery
    "parse_destination", "resolve_address", "classify",
    # trust / tls
    "RootCAProvider", "StaticRootCAProvider", "SystemRootCAProvider",
    "resolve_trust_anchor", "build_tls_context", "effective_sni",
    # clusters
    "ClusterNamer", "policy_cluster_name", "build_cluster",
    "ClusterSetBuilder", "build_clusters",
]
