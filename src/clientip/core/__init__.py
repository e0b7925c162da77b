"""IPv4 client-address resolution.

Three layers, each usable on its own:

1. **codec** — dotted quad <-> 32-character binary string.
2. **ranges** — named CIDR prefix sets (RFC 1918, link-local, loopback)
   and prefix membership.
3. **resolver** — picks the best-guess client IP from the peer address
   and the proxy-chain headers.
"""

from .codec import fill_partial_address, from_binary, is_valid_ipv4, to_binary
from .ranges import (
    RangeRegistry,
    RangeSet,
    add_prefix,
    get_range_registry,
    is_member,
)
from .resolver import (
    DEFAULT_PROXY_HEADERS,
    ClientIpResolver,
    ResolutionPolicy,
    ScanDirection,
    resolve_client_ip,
)

__all__ = [
    "DEFAULT_PROXY_HEADERS",
    "ClientIpResolver",
    "RangeRegistry",
    "RangeSet",
    "ResolutionPolicy",
    "ScanDirection",
    "add_prefix",
    "fill_partial_address",
    "from_binary",
    "get_range_registry",
    "is_member",
    "is_valid_ipv4",
    "resolve_client_ip",
    "to_binary",
]
