"""Probe settings and their defaults."""

from __future__ import annotations

from dataclasses import dataclass

from ._exceptions import ArgumentError

DEFAULT_INTERVAL = 2.0
DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_FAILURES = 1
RECV_BUFFER_SIZE = 1500


@dataclass
class ProbeSettings:
    """Knobs for one probe loop.

    ``max_failures`` is the number of consecutive failed probes that ends the
    loop. The default of 1 stops on the first failure, timeouts included.
    """

    threshold_ms: int
    interval: float = DEFAULT_INTERVAL
    timeout: float = DEFAULT_TIMEOUT
    max_failures: int = DEFAULT_MAX_FAILURES
    privileged: bool = True
    buffer_size: int = RECV_BUFFER_SIZE

    def __post_init__(self) -> None:
        if self.threshold_ms < 0:
            raise ArgumentError(
                f"Invalid Argument {self.threshold_ms}: threshold must not be negative"
            )
        if self.interval < 0:
            raise ArgumentError(
                f"Invalid Argument {self.interval}: interval must not be negative"
            )
        if self.timeout <= 0:
            raise ArgumentError(
                f"Invalid Argument {self.timeout}: timeout must be positive"
            )
        if self.max_failures < 1:
            raise ArgumentError(
                f"Invalid Argument {self.max_failures}: max failures must be at least 1"
            )
        if self.buffer_size < 8:
            raise ArgumentError(
                f"Invalid Argument {self.buffer_size}: buffer too small for an ICMP header"
            )

    @property
    def threshold(self) -> float:
        """Threshold in seconds."""
        return self.threshold_ms / 1000
