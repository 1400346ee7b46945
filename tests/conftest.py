from __future__ import annotations

import socket
import struct
from typing import Optional

import pytest

from pingwatch import IcmpChannel, icmp_checksum

IDENT = 0x1234


def icmp_message(icmp_type: int, identifier: int = IDENT, sequence: int = 1, code: int = 0) -> bytes:
    header = struct.pack("!BBHHH", icmp_type, code, 0, identifier, sequence)
    checksum = icmp_checksum(header)
    return struct.pack("!BBHHH", icmp_type, code, checksum, identifier, sequence)


def ipv4_wrap(payload: bytes, src: str = "192.0.2.1", dst: str = "192.0.2.100") -> bytes:
    header = struct.pack(
        "!BBHHHBBH4s4s",
        0x45,
        0,
        20 + len(payload),
        0,
        0,
        64,
        1,
        0,
        socket.inet_aton(src),
        socket.inet_aton(dst),
    )
    return header + payload


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class FakeSocket:
    def __init__(self, network: "FakeNetwork", family: int, kind: int, proto: int) -> None:
        self.network = network
        self.family = family
        self.kind = kind
        self.proto = proto
        self.bound = None
        self.sent: list[tuple[bytes, tuple]] = []
        self.timeout: Optional[float] = None
        self.closed = False

    def bind(self, address) -> None:
        self.bound = address

    def sendto(self, data: bytes, address) -> int:
        if self.network.send_error is not None:
            raise self.network.send_error
        self.sent.append((data, address))
        if self.network.short_write:
            return len(data) - 1
        return len(data)

    def settimeout(self, value: float) -> None:
        self.timeout = value

    def recvfrom(self, size: int):
        if self.network.recv_error is not None:
            raise self.network.recv_error
        if not self.network.replies:
            self.network.clock.now += self.timeout
            raise socket.timeout("timed out")
        self.network.clock.now += self.network.delay
        data, peer = self.network.replies.pop(0)
        return data[:size], (peer, 0)

    def close(self) -> None:
        self.closed = True


class FakeNetwork:
    """Hands out fake sockets that share one queue of inbound datagrams."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.replies: list[tuple[bytes, str]] = []
        self.sockets: list[FakeSocket] = []
        self.delay = 0.05
        self.open_error: Optional[OSError] = None
        self.send_error: Optional[OSError] = None
        self.recv_error: Optional[OSError] = None
        self.short_write = False
        # socket index -> datagrams queued when that socket is opened
        self.script: dict[int, list[tuple[bytes, str]]] = {}

    def socket(self, family: int, kind: int, proto: int) -> FakeSocket:
        if self.open_error is not None:
            raise self.open_error
        sock = FakeSocket(self, family, kind, proto)
        self.sockets.append(sock)
        self.replies.extend(self.script.get(len(self.sockets) - 1, []))
        return sock

    @property
    def sent(self) -> list[bytes]:
        return [data for sock in self.sockets for data, _ in sock.sent]

    def open_channel(self, family, **kwargs) -> IcmpChannel:
        return IcmpChannel.open(
            family,
            socket_factory=self.socket,
            clock=self.clock,
            identifier=IDENT,
            **kwargs,
        )


class FakeStop:
    """Stand-in for ``threading.Event`` that records waits instead of sleeping."""

    def __init__(self, stop_after_waits: Optional[int] = None) -> None:
        self.waits: list[float] = []
        self.stop_after_waits = stop_after_waits
        self._set = False

    def is_set(self) -> bool:
        return self._set

    def set(self) -> None:
        self._set = True

    def wait(self, timeout: Optional[float] = None) -> bool:
        self.waits.append(timeout)
        if self.stop_after_waits is not None and len(self.waits) >= self.stop_after_waits:
            self._set = True
        return self._set


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def network(clock: FakeClock) -> FakeNetwork:
    return FakeNetwork(clock)
