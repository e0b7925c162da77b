"""Dotted-quad IPv4 <-> 32-character binary string.

Range membership in ``clientip.core.ranges`` is a plain ``str.startswith``
on these binary strings, so every helper here works on text rather than
``ipaddress`` objects.

Pure functions — no I/O, no logging, safe to call from any thread.
"""

from __future__ import annotations

import re

_OCTET_COUNT = 4
_OCTET_BITS = 8
_ADDRESS_BITS = _OCTET_COUNT * _OCTET_BITS
_MAX_OCTET = 255
_SEPARATOR = "."
_FILLER_OCTET = "0"

# Optional sign then ASCII digits; rejects ``int()`` extras like "1_0" or " 1".
_OCTET_RE = re.compile(r"[+-]?[0-9]+")
_BINARY_RE = re.compile(r"[01]+")


def _parse_octet(token: str) -> int | None:
    if not _OCTET_RE.fullmatch(token):
        return None
    try:
        value = int(token)
    except ValueError:
        # Digit strings past the interpreter's int conversion limit.
        return None
    if value < 0 or value > _MAX_OCTET:
        return None
    return value


def _parse_octets(value: object) -> list[int] | None:
    if not isinstance(value, str):
        return None
    tokens = value.split(_SEPARATOR)
    if len(tokens) != _OCTET_COUNT:
        return None
    octets = []
    for token in tokens:
        octet = _parse_octet(token)
        if octet is None:
            return None
        octets.append(octet)
    return octets


def is_valid_ipv4(value: object) -> bool:
    """Return True if *value* is four dot-separated integers in [0, 255].

    Network and broadcast addresses count as valid.  Surrounding
    whitespace is *not* stripped — callers trim where they need to.
    """
    return _parse_octets(value) is not None


def to_binary(value: object) -> str | None:
    """Encode a dotted quad as 32 ``0``/``1`` characters.

    Each octet becomes a zero-padded 8-bit group, in address order::

        >>> to_binary("10.0.0.5")
        '00001010000000000000000000000101'

    Returns ``None`` when *value* is not a valid IPv4 address.
    """
    octets = _parse_octets(value)
    if octets is None:
        return None
    return "".join(format(octet, "08b") for octet in octets)


def from_binary(bits: object) -> str | None:
    """Decode the output of :func:`to_binary` back to a dotted quad."""
    if not isinstance(bits, str) or len(bits) != _ADDRESS_BITS:
        return None
    if not _BINARY_RE.fullmatch(bits):
        return None
    return _SEPARATOR.join(
        str(int(bits[i : i + _OCTET_BITS], 2))
        for i in range(0, _ADDRESS_BITS, _OCTET_BITS)
    )


def fill_partial_address(value: str | None) -> str | None:
    """Complete a truncated dotted quad with ``.0`` octets.

    ``"172.18.60"`` becomes ``"172.18.60.0"`` and ``"10"`` becomes
    ``"10.0.0.0"``.  Only meant for CIDR heads in static range literals;
    the result is not re-validated and inputs with more than four tokens
    come back unchanged (apart from trimming).
    """
    if value is None:
        return None
    result = value.strip()
    missing = _OCTET_COUNT - len(result.split(_SEPARATOR))
    if missing > 0:
        result += (_SEPARATOR + _FILLER_OCTET) * missing
    return result
