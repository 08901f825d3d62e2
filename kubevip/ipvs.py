"""Address family and forwarding method handling for IPVS load balancers."""

from __future__ import annotations

import enum
import ipaddress
import logging
from typing import Union

logger = logging.getLogger(__name__)

ROUND_ROBIN = "rr"

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class AddressFamily(enum.IntEnum):
    """Address family of an IPVS service or destination."""

    INET = 2
    INET6 = 10


class ForwardMethod(enum.IntEnum):
    """How IPVS forwards packets to a destination."""

    MASQUERADE = 0
    LOCAL = 1
    TUNNEL = 2
    DIRECT_ROUTE = 3
    BYPASS = 4


_FORWARD_METHODS = {
    "masquerade": ForwardMethod.MASQUERADE,
    "local": ForwardMethod.LOCAL,
    "tunnel": ForwardMethod.TUNNEL,
    "directroute": ForwardMethod.DIRECT_ROUTE,
    "bypass": ForwardMethod.BYPASS,
}


def ip_and_family(address: str) -> tuple[IPAddress, AddressFamily]:
    """Parse an address and report its IPVS family.

    IPv4-mapped IPv6 addresses are treated as IPv4.
    """
    try:
        parsed = ipaddress.ip_address(address)
    except ValueError as exc:
        raise ValueError(f"address '{address}' is not a valid IP address") from exc
    if isinstance(parsed, ipaddress.IPv6Address):
        if parsed.ipv4_mapped is not None:
            return parsed.ipv4_mapped, AddressFamily.INET
        return parsed, AddressFamily.INET6
    return parsed, AddressFamily.INET


def parse_forwarding_method(name: str) -> ForwardMethod:
    """Map a forwarding method name to its value, defaulting to local."""
    method = _FORWARD_METHODS.get(name.lower())
    if method is None:
        logger.warning("unknown forwarding method %r. Defaulting to Local", name)
        return ForwardMethod.LOCAL
    return method