from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ._models import AddressFamily


class PingwatchError(Exception):
    """Base class for every error raised by pingwatch."""


class ArgumentError(PingwatchError, ValueError):
    """Raised when startup arguments or settings are malformed."""


class ResolutionError(PingwatchError):
    """Raised when a target cannot be resolved under either address family.

    ``family`` is the family that was active when resolution gave up. The
    resolver's fallback is sticky, so this is the flipped family.
    """

    def __init__(self, address: str, family: "AddressFamily", reason: str) -> None:
        super().__init__(f"lookup {address} ({family.value}): {reason}")
        self.address = address
        self.family = family
        self.reason = reason


class ConfigurationError(PingwatchError):
    """Raised when an unsupported address family reaches socket setup."""


class SocketError(PingwatchError, OSError):
    """Raised when opening, writing, or reading the ICMP socket fails."""


class RawSocketPermissionError(SocketError, PermissionError):
    """Raised when raw socket creation fails due to missing privileges."""


class ExchangeTimeout(SocketError, TimeoutError):
    """Raised when no reply arrives before the read deadline."""


class ProtocolError(PingwatchError):
    """Raised when a reply is not a recognised echo-reply-shaped message."""


class MessageError(ProtocolError):
    """Raised when an ICMP message cannot be built or parsed."""


class ProbeCancelled(PingwatchError):
    """Raised when the stop event fires while a probe is waiting."""
