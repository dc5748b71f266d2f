"""
controlplane_sdk.tier2_endpoints.address
─────────────────────────────────────────
Split a destination into host and port, applying the protocol default port:
443 when the cluster carries a TLS transport socket, 80 otherwise. An
explicit port in the destination always wins.
"""
from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from controlplane_sdk.tier0_core.errors import ConfigError
from controlplane_sdk.tier0_core.models import EndpointAddress

HTTP_PORT = 80
HTTPS_PORT = 443


@dataclass(frozen=True)
class Destination:
    """A parsed policy destination. ``port`` is None when not given."""
    scheme: str
    host: str
    port: int | None = None

    @property
    def is_tls(self) -> bool:
        return self.scheme == "https"


def default_port(tls: bool) -> int:
    return HTTPS_PORT if tls else HTTP_PORT


def _parse_port(value: str | int, source: str) -> int:
    if isinstance(value, str):
        if not (value.isascii() and value.isdigit()):
            raise ConfigError(
                "invalid_port",
                f"Invalid port {value!r} in {source!r}.",
                address=source,
            )
        value = int(value)
    if not 0 < value < 65536:
        raise ConfigError(
            "invalid_port",
            f"Port {value} out of range in {source!r}.",
            address=source,
        )
    return value


def parse_destination(url: str) -> Destination:
    """
    Parse a destination URL such as ``https://10.0.0.5:8443``.
    Raises ConfigError when the host is missing or the port is not numeric.
    """
    parts = urlsplit(url.strip())
    try:
        port = parts.port
    except ValueError as exc:
        raise ConfigError(
            "invalid_port",
            f"Invalid port in destination {url!r}.",
            detail=str(exc),
            address=url,
        ) from exc
    host = parts.hostname or ""
    if not host:
        raise ConfigError("empty_host", f"Destination {url!r} has no host.", address=url)
    if port is not None:
        port = _parse_port(port, url)
    return Destination(scheme=parts.scheme.lower(), host=host, port=port)


def split_host_port(authority: str) -> tuple[str, int | None]:
    """
    Split ``host[:port]``. IPv6 literals must be bracketed when a port is
    given; a bare IPv6 literal is returned whole as the host.
    """
    authority = authority.strip()
    if authority.startswith("["):
        end = authority.find("]")
        if end < 0:
            raise ConfigError(
                "invalid_address", f"Unterminated IPv6 literal in {authority!r}.",
                address=authority,
            )
        host, rest = authority[1:end], authority[end + 1:]
        if not rest:
            return host, None
        if not rest.startswith(":"):
            raise ConfigError(
                "invalid_address", f"Unexpected text after IPv6 literal in {authority!r}.",
                address=authority,
            )
        return host, _parse_port(rest[1:], authority)
    if authority.count(":") == 1:
        host, _, port = authority.partition(":")
        return host, _parse_port(port, authority)
    return authority, None


def resolve_address(host: str, port: int | None, *, tls: bool) -> EndpointAddress:
    """
    Normalize host and optional port into an EndpointAddress, filling in the
    default port for the transport. Raises ConfigError on an empty host or an
    out-of-range port.
    """
    host = host.strip().strip("[]")
    if not host:
        raise ConfigError("empty_host", "Cluster address has no host.")
    if port is None:
        port = default_port(tls)
    else:
        port = _parse_port(port, f"{host}:{port}")
    return EndpointAddress(host=host, port=port)


__all__ = [
    "HTTP_PORT", "HTTPS_PORT",
    "Destination",
    "default_port",
    "parse_destination",
    "split_host_port",
    "resolve_address",
]
