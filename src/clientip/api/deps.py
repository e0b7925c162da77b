"""FastAPI integration: resolver wiring and the client-IP dependency.

The resolver is built once, before traffic is served, either by the
``client_ip_lifespan`` context manager (stored on ``app.state``) or
lazily by the process-wide ``get_client_ip_resolver`` singleton.

Usage::

    app = FastAPI(lifespan=client_ip_lifespan)

    @app.get("/whoami")
    async def whoami(client_ip: ClientIPDep) -> dict:
        return {"ip": client_ip}

Tests can swap the resolver via
``app.dependency_overrides[get_resolver] = ...``.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from clientip.configs.config import AppConfig, get_app_config
from clientip.configs.system import RangesConfig
from clientip.core.ranges import RangeRegistry, get_range_registry
from clientip.core.resolver import ClientIpResolver
from clientip.infra.logging import setup_logging
from clientip.infra.singleton import singleton

logger = logging.getLogger(__name__)

_STATE_ATTR = "client_ip_resolver"


def build_range_registry(ranges: RangesConfig) -> RangeRegistry:
    """Shared standard registry unless the literals were overridden."""
    if ranges == RangesConfig():
        return get_range_registry()
    return RangeRegistry.from_literals(
        rfc1918=ranges.rfc1918,
        link_local=ranges.link_local,
        loopback=ranges.loopback,
    )


def build_client_ip_resolver(config: AppConfig) -> ClientIpResolver:
    rc = config.resolver
    resolver = ClientIpResolver.create(
        registry=build_range_registry(config.ranges),
        policy=rc.policy,
        direction=rc.direction,
        proxy_headers=rc.proxy_headers,
    )
    logger.info(
        "Client IP resolver: policy=%s direction=%s headers=%s",
        resolver.policy.value,
        resolver.direction.value,
        ",".join(resolver.proxy_headers),
    )
    return resolver


@singleton
def get_client_ip_resolver() -> ClientIpResolver:
    """Process-wide resolver built from ``get_app_config()`` on first use."""
    return build_client_ip_resolver(get_app_config())


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def client_ip_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging and install a resolver on ``app.state``."""
    config = get_app_config()
    setup_logging(config.logging)
    setattr(app.state, _STATE_ATTR, build_client_ip_resolver(config))
    yield


# ---------------------------------------------------------------------------
# Per-request dependencies
# ---------------------------------------------------------------------------


def get_resolver(request: Request) -> ClientIpResolver:
    """Resolver from ``app.state``, else the process-wide singleton."""
    resolver = getattr(request.app.state, _STATE_ATTR, None)
    if resolver is None:
        resolver = get_client_ip_resolver()
    return resolver


ClientIpResolverDep = Annotated[ClientIpResolver, Depends(get_resolver)]


def get_client_ip(request: Request, resolver: ClientIpResolverDep) -> str:
    """Best-guess originating client IP of *request*."""
    return resolver.resolve_request(request)


ClientIPDep = Annotated[str, Depends(get_client_ip)]
