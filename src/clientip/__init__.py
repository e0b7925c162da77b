"""Client IP resolution for IPv4 behind proxy chains."""

from clientip.core import (
    DEFAULT_PROXY_HEADERS,
    ClientIpResolver,
    RangeRegistry,
    RangeSet,
    ResolutionPolicy,
    ScanDirection,
    get_range_registry,
    is_valid_ipv4,
    resolve_client_ip,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_PROXY_HEADERS",
    "ClientIpResolver",
    "RangeRegistry",
    "RangeSet",
    "ResolutionPolicy",
    "ScanDirection",
    "get_range_registry",
    "is_valid_ipv4",
    "resolve_client_ip",
]
