"""CIDR range sets stored as binary prefixes.

A range literal is either a bare address (``"10.1.2.3"``) or CIDR
notation (``"10.0.0.0/8"``).  Each one is encoded with
:func:`~clientip.core.codec.to_binary` and only the first *n* bits are
kept, so membership is just "does the address's binary form start with
any stored prefix".

Range literals are static configuration data: a malformed literal is
logged and dropped, it never aborts construction.

Usage::

    registry = get_range_registry()
    registry.all_private.contains("10.1.2.3")   # True
    "8.8.8.8" in registry.rfc1918               # False
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from clientip.infra.singleton import singleton

from .codec import fill_partial_address, to_binary

logger = logging.getLogger(__name__)

# CIDR lengths outside this window are rejected: /0 would match every
# address and /31, /32 are not treated as ranges.
MIN_PREFIX_LENGTH = 1
MAX_PREFIX_LENGTH = 30

_CIDR_SEPARATOR = "/"

# ---------------------------------------------------------------------------
# Compiled-in range literals
# ---------------------------------------------------------------------------

# Private IPv4 blocks per RFC 1918.
RFC1918_LITERALS = ("10.0.0.0/8", "172.16.0.0/12", "192.168.0.0/16")
# Automatic private addressing reserved by IANA.
LINK_LOCAL_LITERALS = ("169.254.0.0/16",)
# Only the first 8 bits survive, so this covers all of 127.0.0.0/8.
LOOPBACK_LITERALS = ("127.0.0.1/8",)

RFC1918 = "rfc1918"
LINK_LOCAL = "link_local"
LOOPBACK = "loopback"
ALL_PRIVATE = "all_private"


# ---------------------------------------------------------------------------
# Prefix parsing
# ---------------------------------------------------------------------------


def _literal_to_prefix(literal: str) -> tuple[str | None, str]:
    """Return ``(prefix, "")`` or ``(None, reason)``."""
    head, sep, tail = literal.partition(_CIDR_SEPARATOR)
    if not sep:
        bits = to_binary(literal)
        if bits is None:
            return None, "not a valid IPv4 address"
        return bits, ""

    try:
        length = int(tail)
    except ValueError:
        return None, f"prefix length {tail!r} is not an integer"
    if length < MIN_PREFIX_LENGTH or length > MAX_PREFIX_LENGTH:
        return None, (
            f"prefix length {length} outside "
            f"[{MIN_PREFIX_LENGTH}, {MAX_PREFIX_LENGTH}]"
        )

    bits = to_binary(fill_partial_address(head))
    if bits is None:
        return None, f"network {head!r} is not a valid IPv4 address"
    return bits[:length], ""


def add_prefix(prefixes: set[str], literal: str) -> bool:
    """Parse *literal* and add its binary prefix to *prefixes*.

    Returns False (and logs a warning) when the literal is malformed;
    *prefixes* is left untouched in that case.
    """
    if not isinstance(literal, str):
        logger.warning("Dropping range literal %r: not a string", literal)
        return False

    prefix, reason = _literal_to_prefix(literal.strip())
    if prefix is None:
        logger.warning("Dropping range literal %r: %s", literal, reason)
        return False

    prefixes.add(prefix)
    return True


def is_member(prefixes: Iterable[str], ip: str) -> bool:
    """True if *ip* is a valid IPv4 address covered by any prefix."""
    bits = to_binary(ip)
    if bits is None:
        return False
    return any(bits.startswith(prefix) for prefix in prefixes)


# ---------------------------------------------------------------------------
# RangeSet
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RangeSet:
    """Named, immutable set of binary prefixes."""

    name: str
    prefixes: frozenset[str] = frozenset()
    rejected: tuple[str, ...] = field(default=(), compare=False)

    @classmethod
    def from_literals(cls, name: str, literals: Iterable[str]) -> RangeSet:
        prefixes: set[str] = set()
        rejected = []
        for literal in literals:
            if not add_prefix(prefixes, literal):
                rejected.append(literal)
        return cls(name=name, prefixes=frozenset(prefixes), rejected=tuple(rejected))

    def contains(self, ip: str) -> bool:
        return is_member(self.prefixes, ip)

    def union(self, name: str, *others: RangeSet) -> RangeSet:
        prefixes = set(self.prefixes)
        rejected = list(self.rejected)
        for other in others:
            prefixes |= other.prefixes
            rejected.extend(other.rejected)
        return RangeSet(name=name, prefixes=frozenset(prefixes), rejected=tuple(rejected))

    def __contains__(self, ip: object) -> bool:
        return isinstance(ip, str) and self.contains(ip)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.prefixes))

    def __len__(self) -> int:
        return len(self.prefixes)


# ---------------------------------------------------------------------------
# RangeRegistry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RangeRegistry:
    """The standard private-address categories.

    ``all_private`` is the union of the other three and is what the
    resolver uses to decide whether an address is routable.
    """

    rfc1918: RangeSet
    link_local: RangeSet
    loopback: RangeSet
    all_private: RangeSet

    @classmethod
    def from_literals(
        cls,
        rfc1918: Iterable[str] = RFC1918_LITERALS,
        link_local: Iterable[str] = LINK_LOCAL_LITERALS,
        loopback: Iterable[str] = LOOPBACK_LITERALS,
    ) -> RangeRegistry:
        rfc1918_set = RangeSet.from_literals(RFC1918, rfc1918)
        link_local_set = RangeSet.from_literals(LINK_LOCAL, link_local)
        loopback_set = RangeSet.from_literals(LOOPBACK, loopback)
        registry = cls(
            rfc1918=rfc1918_set,
            link_local=link_local_set,
            loopback=loopback_set,
            all_private=link_local_set.union(ALL_PRIVATE, loopback_set, rfc1918_set),
        )
        if registry.rejected:
            logger.warning(
                "Range registry built with %d rejected literal(s): %s",
                len(registry.rejected),
                ", ".join(repr(r) for r in registry.rejected),
            )
        else:
            logger.debug("Range registry built (%d prefixes)", len(registry.all_private))
        return registry

    @classmethod
    def standard(cls) -> RangeRegistry:
        return cls.from_literals()

    @property
    def rejected(self) -> tuple[str, ...]:
        return self.all_private.rejected

    def category(self, name: str) -> RangeSet:
        """Look up a range set by its name (``"rfc1918"``, ``"loopback"``...)."""
        sets = {
            RFC1918: self.rfc1918,
            LINK_LOCAL: self.link_local,
            LOOPBACK: self.loopback,
            ALL_PRIVATE: self.all_private,
        }
        try:
            return sets[name]
        except KeyError:
            raise KeyError(f"Unknown range category: {name!r}") from None

    def is_private(self, ip: str) -> bool:
        return self.all_private.contains(ip)


@singleton
def get_range_registry() -> RangeRegistry:
    """Process-wide registry built from the compiled-in literals."""
    return RangeRegistry.standard()
