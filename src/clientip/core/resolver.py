"""Best-guess client IP from the peer address and proxy-chain headers.

Resolution order:

1. **Public peer** — when ``trust_public_peer`` is on and the direct
   peer is *not* in the all-private range, it is the answer.  No header
   is consulted.
2. **Public candidate** — each proxy header in priority order
   (``x-forwarded-for``, ``Proxy-Client-IP``, ``WL-Proxy-Client-IP``)
   is split on commas and scanned in ``direction``; the first valid,
   non-private token wins.
3. **Any candidate** — same scan with private addresses allowed.
4. **Peer** — nothing usable in the headers.

Every path returns a string; malformed input is skipped, never raised.

Two policies exist side by side:

* ``ClientIpResolver.create()`` — peer-aware, direction configurable
  (left-to-right by default).
* ``ClientIpResolver.legacy()`` — headers always scanned, right-to-left
  only.  Kept for deployments that relied on the older behaviour.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from .codec import is_valid_ipv4
from .ranges import RangeRegistry, get_range_registry

logger = logging.getLogger(__name__)

DEFAULT_PROXY_HEADERS: tuple[str, ...] = (
    "x-forwarded-for",
    "Proxy-Client-IP",
    "WL-Proxy-Client-IP",
)

_TOKEN_SEPARATOR = ","
_NOT_FOUND = ""
_UNKNOWN_PEER = "unknown"

HeaderLookup = Union[Callable[[str], Optional[str]], Mapping[str, str]]


class ScanDirection(str, Enum):
    """Order in which a header's comma-separated hops are examined."""

    # Client-closest hop first.
    LEFT_TO_RIGHT = "left_to_right"
    # Hop appended by the proxy nearest to us first.
    RIGHT_TO_LEFT = "right_to_left"


class ResolutionPolicy(str, Enum):
    """Whether a public peer address short-circuits the header scan."""

    PEER_AWARE = "peer_aware"
    HEADERS_ONLY = "headers_only"


def _as_lookup(headers: HeaderLookup | None) -> Callable[[str], str | None]:
    if headers is None:
        return lambda name: None
    if isinstance(headers, Mapping):
        return headers.get
    return headers


@dataclass(frozen=True)
class ClientIpResolver:
    """Stateless resolver; one instance can serve every request."""

    registry: RangeRegistry
    policy: ResolutionPolicy = ResolutionPolicy.PEER_AWARE
    direction: ScanDirection = ScanDirection.LEFT_TO_RIGHT
    proxy_headers: tuple[str, ...] = DEFAULT_PROXY_HEADERS

    @classmethod
    def create(
        cls,
        *,
        registry: RangeRegistry | None = None,
        policy: ResolutionPolicy | str = ResolutionPolicy.PEER_AWARE,
        direction: ScanDirection | str = ScanDirection.LEFT_TO_RIGHT,
        proxy_headers: Sequence[str] = DEFAULT_PROXY_HEADERS,
    ) -> ClientIpResolver:
        return cls(
            registry=registry if registry is not None else get_range_registry(),
            policy=ResolutionPolicy(policy),
            direction=ScanDirection(direction),
            proxy_headers=tuple(proxy_headers),
        )

    @classmethod
    def legacy(cls, registry: RangeRegistry | None = None) -> ClientIpResolver:
        """Headers always scanned, right-to-left, peer is only a fallback."""
        return cls.create(
            registry=registry,
            policy=ResolutionPolicy.HEADERS_ONLY,
            direction=ScanDirection.RIGHT_TO_LEFT,
        )

    @property
    def trust_public_peer(self) -> bool:
        return self.policy is ResolutionPolicy.PEER_AWARE

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def is_private(self, ip: str) -> bool:
        return self.registry.is_private(ip)

    def parse_candidate(
        self,
        value: str | None,
        *,
        allow_private: bool,
        direction: ScanDirection | None = None,
    ) -> str:
        """First acceptable address in one header value, or ``""``."""
        if not value:
            return _NOT_FOUND

        tokens = value.split(_TOKEN_SEPARATOR)
        if (direction or self.direction) is ScanDirection.RIGHT_TO_LEFT:
            tokens.reverse()

        for token in tokens:
            ip = token.strip()
            if not is_valid_ipv4(ip):
                continue
            if not allow_private and self.is_private(ip):
                continue
            return ip
        return _NOT_FOUND

    def resolve(self, peer: str, headers: HeaderLookup | None = None) -> str:
        """Resolve the client address for one request.

        Args:
            peer: direct network-layer source address of the connection.
            headers: header lookup by name; either a callable returning
                ``None`` for absent headers or a mapping.
        """
        if self.trust_public_peer and not self.is_private(peer):
            logger.debug("Client IP %s: public peer", peer)
            return peer.strip()

        lookup = _as_lookup(headers)
        for allow_private in (False, True):
            for header in self.proxy_headers:
                ip = self.parse_candidate(lookup(header), allow_private=allow_private)
                if ip:
                    logger.debug(
                        "Client IP %s: from %s (peer=%s, private_allowed=%s)",
                        ip,
                        header,
                        peer,
                        allow_private,
                    )
                    return ip

        logger.debug("Client IP %s: no usable proxy header, using peer", peer)
        return peer.strip()

    def resolve_request(self, request: Any) -> str:
        """Resolve from a Starlette / FastAPI ``Request``."""
        peer = request.client.host if request.client else _UNKNOWN_PEER
        return self.resolve(peer, request.headers.get)


def resolve_client_ip(
    peer: str,
    headers: HeaderLookup | None = None,
    *,
    direction: ScanDirection | str = ScanDirection.LEFT_TO_RIGHT,
) -> str:
    """One-shot helper using the process-wide range registry."""
    return ClientIpResolver.create(direction=direction).resolve(peer, headers)
