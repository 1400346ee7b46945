from __future__ import annotations

import socket
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AddressFamily(str, Enum):
    V4 = "ip4"
    V6 = "ip6"

    @property
    def socket_family(self) -> socket.AddressFamily:
        return socket.AF_INET if self is AddressFamily.V4 else socket.AF_INET6

    def flipped(self) -> "AddressFamily":
        return AddressFamily.V6 if self is AddressFamily.V4 else AddressFamily.V4

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ResolvedTarget:
    name: str
    address: str
    family: AddressFamily

    def __str__(self) -> str:
        return self.address


@dataclass
class IcmpPacket:
    type: int
    code: int
    checksum: int
    id: Optional[int]
    sequence: Optional[int]
    data: bytes


@dataclass
class ExchangeResult:
    reply: bytes
    nbytes: int
    elapsed: float
    peer: str


class OutcomeStatus(Enum):
    OK = "ok"
    PROTOCOL_ERROR = "protocol error"
    TIMEOUT = "timeout"
    SOCKET_ERROR = "socket error"
    UNRESOLVABLE = "unresolvable"
    CANCELLED = "cancelled"


@dataclass
class ProbeOutcome:
    status: OutcomeStatus
    target: str
    destination: Optional[str]
    sequence: int
    elapsed: float = 0.0
    peer: Optional[str] = None
    packet: Optional[IcmpPacket] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.OK

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed * 1000

    def __str__(self) -> str:
        if self.ok:
            return (
                f"Reply from {self.peer}: time={self.elapsed_ms:.3f} ms "
                f"(seq={self.sequence})"
            )
        return f"{self.status.value.capitalize()}: {self.error}"
