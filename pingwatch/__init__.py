from ._channel import IcmpChannel
from ._config import ProbeSettings
from ._exceptions import (
    ArgumentError,
    ConfigurationError,
    ExchangeTimeout,
    MessageError,
    PingwatchError,
    ProbeCancelled,
    ProtocolError,
    RawSocketPermissionError,
    ResolutionError,
    SocketError,
)
from ._log import configure_logging, console, logger
from ._loop import ProbeLoop, ProbeState
from ._message import build_echo_request, icmp_checksum, parse_message
from ._models import (
    AddressFamily,
    ExchangeResult,
    IcmpPacket,
    OutcomeStatus,
    ProbeOutcome,
    ResolvedTarget,
)
from ._probe import EchoProbe
from ._protocol import (
    PROTOCOL_ICMP,
    PROTOCOL_IPV6_ICMP,
    UNSUPPORTED,
    IcmpV4Type,
    IcmpV6Type,
    ProtocolConfig,
    configure,
)
from ._resolver import resolve

__all__ = [
    "AddressFamily",
    "ArgumentError",
    "ConfigurationError",
    "EchoProbe",
    "ExchangeResult",
    "ExchangeTimeout",
    "IcmpChannel",
    "IcmpPacket",
    "IcmpV4Type",
    "IcmpV6Type",
    "MessageError",
    "OutcomeStatus",
    "PROTOCOL_ICMP",
    "PROTOCOL_IPV6_ICMP",
    "PingwatchError",
    "ProbeCancelled",
    "ProbeLoop",
    "ProbeOutcome",
    "ProbeSettings",
    "ProbeState",
    "ProtocolConfig",
    "ProtocolError",
    "RawSocketPermissionError",
    "ResolutionError",
    "ResolvedTarget",
    "SocketError",
    "UNSUPPORTED",
    "build_echo_request",
    "configure",
    "configure_logging",
    "console",
    "icmp_checksum",
    "logger",
    "parse_message",
    "resolve",
]
