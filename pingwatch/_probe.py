"""A single echo probe: open, send, await, parse, classify."""

from __future__ import annotations

import threading
from typing import Callable, Optional

from ._channel import IcmpChannel
from ._config import ProbeSettings
from ._exceptions import (
    ExchangeTimeout,
    ProbeCancelled,
    ProtocolError,
    SocketError,
)
from ._message import parse_message
from ._models import (
    AddressFamily,
    ExchangeResult,
    IcmpPacket,
    OutcomeStatus,
    ProbeOutcome,
    ResolvedTarget,
)
from ._protocol import is_echo_reply, type_name

ChannelFactory = Callable[..., IcmpChannel]


def classify(protocol: int, packet: IcmpPacket, peer: str) -> Optional[str]:
    """Return ``None`` for a reply-shaped packet, else a description of it."""
    if is_echo_reply(protocol, packet.type):
        return None
    return (
        f"got {type_name(protocol, packet.type)} (type {packet.type}, "
        f"code {packet.code}) from {peer}; want echo reply"
    )


class EchoProbe:
    def __init__(
        self,
        settings: ProbeSettings,
        *,
        channel_factory: ChannelFactory = IcmpChannel.open,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        self.settings = settings
        self._channel_factory = channel_factory
        self._cancel = cancel

    def run(
        self, destination: ResolvedTarget, family: AddressFamily, sequence: int
    ) -> ProbeOutcome:
        """Run one exchange against ``destination``.

        Failures become outcomes with zero elapsed time. A
        :class:`ConfigurationError` from an unsupported family is not an
        outcome and propagates.
        """
        try:
            channel = self._channel_factory(
                family, privileged=self.settings.privileged, cancel=self._cancel
            )
        except SocketError as exc:
            return self._failed(OutcomeStatus.SOCKET_ERROR, destination, sequence, exc)

        with channel:
            try:
                message = channel.build_echo_message(channel.echo_type, sequence)
                result: ExchangeResult = channel.exchange(
                    message,
                    destination.address,
                    timeout=self.settings.timeout,
                    buffer_size=self.settings.buffer_size,
                )
            except ProbeCancelled as exc:
                return self._failed(OutcomeStatus.CANCELLED, destination, sequence, exc)
            except ExchangeTimeout as exc:
                return self._failed(OutcomeStatus.TIMEOUT, destination, sequence, exc)
            except SocketError as exc:
                return self._failed(
                    OutcomeStatus.SOCKET_ERROR, destination, sequence, exc
                )
            except ProtocolError as exc:
                return self._failed(
                    OutcomeStatus.PROTOCOL_ERROR, destination, sequence, exc
                )
            protocol = channel.protocol

        try:
            packet = parse_message(protocol, result.reply[: result.nbytes])
        except ProtocolError as exc:
            return self._failed(OutcomeStatus.PROTOCOL_ERROR, destination, sequence, exc)

        problem = classify(protocol, packet, result.peer)
        if problem is not None:
            return ProbeOutcome(
                status=OutcomeStatus.PROTOCOL_ERROR,
                target=destination.name,
                destination=destination.address,
                sequence=sequence,
                peer=result.peer,
                packet=packet,
                error=problem,
            )
        return ProbeOutcome(
            status=OutcomeStatus.OK,
            target=destination.name,
            destination=destination.address,
            sequence=sequence,
            elapsed=result.elapsed,
            peer=result.peer,
            packet=packet,
        )

    @staticmethod
    def _failed(
        status: OutcomeStatus,
        destination: ResolvedTarget,
        sequence: int,
        exc: Exception,
    ) -> ProbeOutcome:
        return ProbeOutcome(
            status=status,
            target=destination.name,
            destination=destination.address,
            sequence=sequence,
            error=str(exc),
        )
