from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from clientip.core.ranges import (
    LINK_LOCAL_LITERALS,
    LOOPBACK_LITERALS,
    RFC1918_LITERALS,
)
from clientip.core.resolver import (
    DEFAULT_PROXY_HEADERS,
    ResolutionPolicy,
    ScanDirection,
)


class ResolverConfig(BaseModel):
    """Client IP resolution policy."""

    policy: ResolutionPolicy = Field(
        default=ResolutionPolicy.PEER_AWARE,
        description="peer_aware returns a public peer as-is; "
        "headers_only always scans proxy headers first. "
        "The older behaviour also needs direction: right_to_left",
    )
    direction: ScanDirection = Field(
        default=ScanDirection.LEFT_TO_RIGHT,
        description="Scan order within a comma-separated proxy header",
    )
    proxy_headers: List[str] = Field(
        default_factory=lambda: list(DEFAULT_PROXY_HEADERS),
        description="Proxy-chain headers, highest priority first",
    )


class RangesConfig(BaseModel):
    """Private range literals (bare address or CIDR, prefix length 1-30)."""

    rfc1918: List[str] = Field(
        default_factory=lambda: list(RFC1918_LITERALS),
        description="RFC 1918 private blocks",
    )
    link_local: List[str] = Field(
        default_factory=lambda: list(LINK_LOCAL_LITERALS),
        description="Link-local blocks",
    )
    loopback: List[str] = Field(
        default_factory=lambda: list(LOOPBACK_LITERALS),
        description="Loopback blocks",
    )


class HttpClientConfig(BaseModel):
    """Outbound HTTP client settings."""

    request_timeout_ms: int = Field(
        default=5000, gt=0, description="Read/write/pool timeout in milliseconds"
    )
    connect_timeout_ms: int = Field(
        default=5000, gt=0, description="Connect timeout in milliseconds"
    )
    allow_circular_redirect: bool = Field(
        default=False, description="Follow redirects that revisit a URL"
    )
    max_redirects: int = Field(
        default=20, ge=0, description="Maximum redirects per request"
    )
    verify_tls: bool = Field(
        default=False,
        description="Verify server certificates (off = trust any certificate)",
    )
    ca_bundle: Optional[Path] = Field(
        default=None,
        description="PEM bundle of trusted certificates; implies verification",
    )


class LoggingConfig(BaseModel):
    """Root logger settings."""

    level: str = Field(default="INFO", description="Root log level")
    json_output: bool = Field(
        default=True, description="JSON lines (True) or coloured dev output"
    )
