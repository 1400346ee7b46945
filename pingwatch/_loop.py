"""The probe loop driving one target until failure or stop."""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Callable, Optional

from ._config import ProbeSettings
from ._exceptions import ResolutionError
from ._log import logger
from ._models import AddressFamily, OutcomeStatus, ProbeOutcome, ResolvedTarget
from ._probe import EchoProbe
from ._resolver import resolve

Resolver = Callable[[AddressFamily, str], ResolvedTarget]


@dataclass(frozen=True)
class ProbeState:
    family: AddressFamily
    sequence: int = 1
    failures: int = 0

    def advance(self, ok: bool) -> "ProbeState":
        return replace(
            self,
            sequence=self.sequence + 1,
            failures=0 if ok else self.failures + 1,
        )


def format_duration(seconds: float) -> str:
    return f"{seconds * 1000:.3f}ms"


class ProbeLoop:
    def __init__(
        self,
        address: str,
        settings: ProbeSettings,
        family: AddressFamily = AddressFamily.V4,
        *,
        probe: Optional[EchoProbe] = None,
        resolver: Resolver = resolve,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        self.address = address
        self.settings = settings
        self.state = ProbeState(family=AddressFamily(family))
        self.stop_event = stop_event if stop_event is not None else threading.Event()
        self._probe = (
            probe
            if probe is not None
            else EchoProbe(settings, cancel=self.stop_event)
        )
        self._resolver = resolver
        self.target: Optional[ResolvedTarget] = None

    def run(self) -> Optional[ProbeOutcome]:
        """Probe until a terminal failure or the stop event.

        Returns the outcome that ended the loop, or ``None`` when stopped.
        """
        try:
            self.target = self._resolver(self.state.family, self.address)
        except ResolutionError as exc:
            self.state = replace(self.state, family=exc.family)
            logger.error("Unable to resolve %s: %s", self.address, exc.reason)
            return ProbeOutcome(
                status=OutcomeStatus.UNRESOLVABLE,
                target=self.address,
                destination=None,
                sequence=self.state.sequence,
                error=str(exc),
            )
        self.state = replace(self.state, family=self.target.family)

        while not self.stop_event.is_set():
            outcome = self._probe.run(
                self.target, self.state.family, self.state.sequence
            )
            if outcome.status is OutcomeStatus.CANCELLED:
                return None

            if outcome.ok:
                self._report(outcome)
            else:
                logger.error(
                    "Error pinging %s (%s): %s",
                    self.address,
                    self.target.address,
                    outcome.error,
                )
                if self.state.failures + 1 >= self.settings.max_failures:
                    logger.error("Exiting: Try a different address.")
                    return outcome

            self.state = self.state.advance(outcome.ok)
            if self.stop_event.wait(self.settings.interval):
                break
        return None

    def _report(self, outcome: ProbeOutcome) -> None:
        exceeded = outcome.elapsed - self.settings.threshold
        if exceeded > 0:
            logger.warning(
                "(%d) Pinging %s @ (%s): TTL: %s ----- Time Exceeded by %s",
                outcome.sequence,
                self.address,
                outcome.destination,
                format_duration(outcome.elapsed),
                format_duration(exceeded),
            )
        else:
            logger.info(
                "(%d) Pinging %s @ (%s): TTL: %s",
                outcome.sequence,
                self.address,
                outcome.destination,
                format_duration(outcome.elapsed),
            )
