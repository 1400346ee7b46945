from __future__ import annotations

import os
import socket
import threading
import time
from typing import Callable, Optional

from ._config import DEFAULT_TIMEOUT, RECV_BUFFER_SIZE
from ._exceptions import (
    ConfigurationError,
    ExchangeTimeout,
    MessageError,
    ProbeCancelled,
    RawSocketPermissionError,
    SocketError,
)
from ._log import logger
from ._message import ICMP_HEADER, build_echo_request, strip_ip_header
from ._models import AddressFamily, ExchangeResult
from ._protocol import IcmpType, ProtocolConfig, configure, is_echo

SocketFactory = Callable[[int, int, int], socket.socket]
Clock = Callable[[], float]

POLL_INTERVAL = 0.1


class IcmpChannel:
    """One ICMP socket, used for a single echo exchange and then closed."""

    def __init__(
        self,
        sock: socket.socket,
        family: AddressFamily,
        config: ProtocolConfig,
        *,
        privileged: bool = True,
        identifier: Optional[int] = None,
        clock: Clock = time.perf_counter,
        cancel: Optional[threading.Event] = None,
        poll_interval: float = POLL_INTERVAL,
    ) -> None:
        self.family = family
        self.config = config
        self.privileged = privileged
        self.identifier = (
            identifier if identifier is not None else os.getpid() & 0xFFFF
        )
        self._sock: Optional[socket.socket] = sock
        self._clock = clock
        self._cancel = cancel
        self._poll_interval = poll_interval

    @classmethod
    def open(
        cls,
        family: AddressFamily,
        *,
        privileged: bool = True,
        socket_factory: SocketFactory = socket.socket,
        **kwargs,
    ) -> "IcmpChannel":
        config = configure(family)
        if not config.supported:
            raise ConfigurationError(f"unsupported address family {family!r}")
        family = AddressFamily(family)

        kind = socket.SOCK_RAW if privileged else socket.SOCK_DGRAM
        network = config.network if privileged else config.datagram_network
        try:
            sock = socket_factory(family.socket_family, kind, config.protocol)
        except PermissionError as exc:
            message = (
                f"listen {network}: raw socket requires elevated privileges. "
                "Use sudo, grant CAP_NET_RAW to the Python interpreter, "
                "or run with --unprivileged."
            )
            raise RawSocketPermissionError(message) from exc
        except OSError as exc:
            raise SocketError(f"listen {network}: {exc}") from exc

        try:
            sock.bind((config.source, 0))
        except OSError as exc:
            sock.close()
            raise SocketError(f"listen {network} {config.source}: {exc}") from exc

        return cls(sock, family, config, privileged=privileged, **kwargs)

    @property
    def protocol(self) -> int:
        return self.config.protocol

    @property
    def echo_type(self) -> IcmpType:
        return self.config.echo_type

    @property
    def sock(self) -> socket.socket:
        if self._sock is None:
            raise SocketError("use of closed ICMP channel")
        return self._sock

    def build_echo_message(self, echo_type: IcmpType, sequence: int) -> bytes:
        return build_echo_request(echo_type, self.identifier, sequence)

    def exchange(
        self,
        message: bytes,
        destination: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        buffer_size: int = RECV_BUFFER_SIZE,
    ) -> ExchangeResult:
        """Send ``message`` and wait for one reply until ``timeout`` expires."""
        sock = self.sock
        sequence = _echo_sequence(message)
        start = self._clock()
        try:
            sent = sock.sendto(message, (destination, 0))
        except OSError as exc:
            raise SocketError(f"write to {destination}: {exc}") from exc
        if sent != len(message):
            raise SocketError(
                f"short write to {destination}: got {sent}; want {len(message)}"
            )

        deadline = self._clock() + timeout
        while True:
            if self._cancel is not None and self._cancel.is_set():
                raise ProbeCancelled(f"read from {destination} cancelled")
            remaining = deadline - self._clock()
            if remaining <= 0:
                raise ExchangeTimeout(
                    f"read from {destination}: i/o timeout after {timeout:g}s"
                )
            try:
                sock.settimeout(min(remaining, self._poll_interval))
            except OSError as exc:
                raise SocketError(f"set read deadline: {exc}") from exc
            try:
                pkt, peer = sock.recvfrom(buffer_size)
            except socket.timeout:
                continue
            except OSError as exc:
                raise SocketError(f"read from {destination}: {exc}") from exc
            elapsed = self._clock() - start

            try:
                reply = self._icmp_payload(pkt)
            except MessageError as err:
                logger.debug("Discarding malformed packet from %s: %s", peer[0], err)
                continue
            if self._is_foreign(reply, sequence):
                logger.debug("Discarding echo traffic not addressed to us from %s", peer[0])
                continue

            return ExchangeResult(
                reply=reply, nbytes=len(reply), elapsed=elapsed, peer=peer[0]
            )

    def _icmp_payload(self, pkt: bytes) -> bytes:
        if self.privileged and self.family is AddressFamily.V4:
            return strip_ip_header(pkt)
        return pkt

    def _is_foreign(self, reply: bytes, sequence: Optional[int]) -> bool:
        if len(reply) < ICMP_HEADER.size:
            return False
        icmp_type, _, _, identifier, reply_sequence = ICMP_HEADER.unpack(
            reply[: ICMP_HEADER.size]
        )
        if not is_echo(self.protocol, icmp_type):
            return False
        if sequence is not None and reply_sequence != sequence:
            return True
        # Datagram sockets only ever see replies to their own requests, and the
        # kernel rewrites the identifier.
        if not self.privileged:
            return False
        if icmp_type == self.echo_type:
            return True
        return identifier != self.identifier

    def close(self) -> None:
        if self._sock is not None:
            try:
                self._sock.close()
            finally:
                self._sock = None

    def __enter__(self) -> "IcmpChannel":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _echo_sequence(message: bytes) -> Optional[int]:
    if len(message) < ICMP_HEADER.size:
        return None
    return ICMP_HEADER.unpack(message[: ICMP_HEADER.size])[4]
