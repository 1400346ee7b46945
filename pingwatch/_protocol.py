"""Per-family protocol constants and the ICMP type tables."""

from __future__ import annotations

from enum import IntEnum
from typing import NamedTuple, Optional, Union

from ._models import AddressFamily

PROTOCOL_ICMP = 1
PROTOCOL_IPV6_ICMP = 58


class IcmpV4Type(IntEnum):
    ECHO_REPLY = 0
    DESTINATION_UNREACHABLE = 3
    REDIRECT = 5
    ECHO = 8
    ROUTER_ADVERTISEMENT = 9
    ROUTER_SOLICITATION = 10
    TIME_EXCEEDED = 11
    PARAMETER_PROBLEM = 12
    TIMESTAMP = 13
    TIMESTAMP_REPLY = 14


class IcmpV6Type(IntEnum):
    DESTINATION_UNREACHABLE = 1
    PACKET_TOO_BIG = 2
    TIME_EXCEEDED = 3
    PARAMETER_PROBLEM = 4
    ECHO_REQUEST = 128
    ECHO_REPLY = 129
    ROUTER_SOLICITATION = 133
    ROUTER_ADVERTISEMENT = 134
    NEIGHBOR_SOLICITATION = 135
    NEIGHBOR_ADVERTISEMENT = 136
    REDIRECT = 137


IcmpType = Union[IcmpV4Type, IcmpV6Type]

_TYPE_TABLES = {
    PROTOCOL_ICMP: IcmpV4Type,
    PROTOCOL_IPV6_ICMP: IcmpV6Type,
}

# Router advertisements are tolerated as replies on some IPv6 paths.
REPLY_TYPES = frozenset(
    {
        (PROTOCOL_ICMP, IcmpV4Type.ECHO_REPLY),
        (PROTOCOL_IPV6_ICMP, IcmpV6Type.ECHO_REPLY),
        (PROTOCOL_IPV6_ICMP, IcmpV6Type.ROUTER_ADVERTISEMENT),
    }
)

ECHO_TYPES = frozenset(
    {
        (PROTOCOL_ICMP, IcmpV4Type.ECHO),
        (PROTOCOL_ICMP, IcmpV4Type.ECHO_REPLY),
        (PROTOCOL_IPV6_ICMP, IcmpV6Type.ECHO_REQUEST),
        (PROTOCOL_IPV6_ICMP, IcmpV6Type.ECHO_REPLY),
    }
)


class ProtocolConfig(NamedTuple):
    network: str
    source: str
    echo_type: Optional[IcmpType]
    protocol: int
    datagram_network: str = ""

    @property
    def supported(self) -> bool:
        return self.echo_type is not None and self.protocol != 0


UNSUPPORTED = ProtocolConfig(network="", source="", echo_type=None, protocol=0)

_CONFIGS = {
    AddressFamily.V4: ProtocolConfig(
        network="ip4:icmp",
        source="0.0.0.0",
        echo_type=IcmpV4Type.ECHO,
        protocol=PROTOCOL_ICMP,
        datagram_network="udp4",
    ),
    AddressFamily.V6: ProtocolConfig(
        network="ip6:ipv6-icmp",
        source="::",
        echo_type=IcmpV6Type.ECHO_REQUEST,
        protocol=PROTOCOL_IPV6_ICMP,
        datagram_network="udp6",
    ),
}


def configure(family: object) -> ProtocolConfig:
    """Return the socket parameters for ``family``, or ``UNSUPPORTED``."""
    try:
        selected = AddressFamily(family)
    except ValueError:
        return UNSUPPORTED
    return _CONFIGS[selected]


def protocol_for(echo_type: IcmpType) -> int:
    if isinstance(echo_type, IcmpV6Type):
        return PROTOCOL_IPV6_ICMP
    return PROTOCOL_ICMP


def lookup_type(protocol: int, value: int) -> Union[IcmpType, int]:
    table = _TYPE_TABLES.get(protocol)
    if table is None:
        return value
    try:
        return table(value)
    except ValueError:
        return value


def type_name(protocol: int, value: int) -> str:
    """Human readable name such as ``destination unreachable``."""
    known = lookup_type(protocol, value)
    if isinstance(known, IntEnum):
        return known.name.lower().replace("_", " ")
    return f"unknown type {value}"


def is_echo_reply(protocol: int, value: int) -> bool:
    return (protocol, value) in REPLY_TYPES


def is_echo(protocol: int, value: int) -> bool:
    return (protocol, value) in ECHO_TYPES
