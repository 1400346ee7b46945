"""ICMP wire codec."""

from __future__ import annotations

import struct

from ._exceptions import MessageError
from ._models import IcmpPacket
from ._protocol import (
    PROTOCOL_ICMP,
    PROTOCOL_IPV6_ICMP,
    IcmpType,
    is_echo,
    protocol_for,
)

ICMP_HEADER = struct.Struct("!BBHHH")
ICMP_MIN_LENGTH = 4
IPV4_MIN_HEADER_LENGTH = 20


def icmp_checksum(data: bytes) -> int:
    if len(data) % 2:
        data += b"\x00"
    total = sum(struct.unpack("!%dH" % (len(data) // 2), data))
    total = (total >> 16) + (total & 0xFFFF)
    total += total >> 16
    return (~total) & 0xFFFF


def build_echo_request(
    echo_type: IcmpType, identifier: int, sequence: int, payload: bytes = b""
) -> bytes:
    """Serialize an Echo Request.

    ICMPv6 checksums cover a pseudo-header with the source address, so they
    are left zero for the kernel to fill in. The sequence wraps at 16 bits.
    """
    try:
        header = ICMP_HEADER.pack(
            echo_type, 0, 0, identifier & 0xFFFF, sequence & 0xFFFF
        )
    except (struct.error, TypeError) as exc:
        raise MessageError(f"cannot build echo request: {exc}") from exc
    if protocol_for(echo_type) == PROTOCOL_IPV6_ICMP:
        return header + payload
    checksum = icmp_checksum(header + payload)
    return header[:2] + struct.pack("!H", checksum) + header[4:] + payload


def parse_message(protocol: int, data: bytes) -> IcmpPacket:
    """Parse a bare ICMP message (no IP header) for ``protocol``."""
    if protocol not in (PROTOCOL_ICMP, PROTOCOL_IPV6_ICMP):
        raise MessageError(f"unknown protocol number {protocol}")
    if len(data) < ICMP_MIN_LENGTH:
        raise MessageError(
            f"message too short: {len(data)} bytes, need {ICMP_MIN_LENGTH}"
        )

    icmp_type, code, checksum = struct.unpack("!BBH", data[:4])
    if is_echo(protocol, icmp_type):
        if len(data) < ICMP_HEADER.size:
            raise MessageError(
                f"echo message too short: {len(data)} bytes, need {ICMP_HEADER.size}"
            )
        _, _, _, identifier, sequence = ICMP_HEADER.unpack(data[: ICMP_HEADER.size])
        return IcmpPacket(
            type=icmp_type,
            code=code,
            checksum=checksum,
            id=identifier,
            sequence=sequence,
            data=data[ICMP_HEADER.size :],
        )
    return IcmpPacket(
        type=icmp_type,
        code=code,
        checksum=checksum,
        id=None,
        sequence=None,
        data=data[4:],
    )


def strip_ip_header(pkt: bytes) -> bytes:
    """Drop the IPv4 header a raw ICMP socket delivers with every datagram."""
    if len(pkt) < IPV4_MIN_HEADER_LENGTH:
        raise MessageError("Packet shorter than minimum IP header length (20 bytes).")
    version = pkt[0] >> 4
    if version != 4:
        raise MessageError(f"expected an IPv4 header, got version {version}")
    iph_length = (pkt[0] & 0xF) * 4
    if iph_length < IPV4_MIN_HEADER_LENGTH or len(pkt) < iph_length + ICMP_MIN_LENGTH:
        raise MessageError("Packet shorter than IP header + ICMP header.")
    return pkt[iph_length:]
