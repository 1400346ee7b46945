"""Target resolution with a single, sticky address family fallback."""

from __future__ import annotations

import socket

from ._exceptions import ResolutionError
from ._log import logger
from ._models import AddressFamily, ResolvedTarget


def lookup(family: AddressFamily, address: str) -> str:
    """Return the first address ``address`` resolves to under ``family``."""
    try:
        infos = socket.getaddrinfo(address, None, family.socket_family)
    except (OSError, UnicodeError) as exc:
        raise ResolutionError(address, family, str(exc)) from exc
    for info in infos:
        if info[0] == family.socket_family:
            return info[4][0]
    raise ResolutionError(address, family, "no address for this family")


def resolve(family: AddressFamily, address: str) -> ResolvedTarget:
    """Resolve ``address``, flipping the family once if the first try fails.

    The fallback commits regardless of outcome: the returned target, or the
    raised :class:`ResolutionError`, carries the flipped family.
    """
    try:
        return ResolvedTarget(address, lookup(family, address), family)
    except ResolutionError:
        fallback = family.flipped()
        logger.warning(
            "Address %s could not be resolved with argument %s: "
            "Attempting to resolve as %s",
            address,
            family,
            fallback,
        )

    resolved = lookup(fallback, address)
    logger.info("Successfully resolved %s with %s: Continuing...", address, fallback)
    return ResolvedTarget(address, resolved, fallback)
