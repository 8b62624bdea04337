"""In-memory device registry.

Maps the 15-digit identifier carried in each sentence to a device session.
Decoders only see the ``resolve`` callable, so a database-backed registry can
replace this one without touching the protocol code.
"""

import itertools
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

__all__ = ["DeviceRegistry", "DeviceSession"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceSession:
    """A known device.

    Attributes:
        device_id: Internal numeric identifier, assigned on registration.
        unique_id: Identifier reported by the terminal (IMEI).
    """

    device_id: int
    unique_id: str


class DeviceRegistry:
    """Registry of known devices keyed by unique identifier.

    Args:
        unique_ids: Identifiers to register up front.
        register_unknown: When True, identifiers seen for the first time are
            registered automatically instead of being rejected.

    Example:
        >>> registry = DeviceRegistry(["861693034634154"])
        >>> registry.resolve(None, "861693034634154")
        DeviceSession(device_id=1, unique_id='861693034634154')
        >>> registry.resolve(None, "000000000000000") is None
        True
    """

    def __init__(
        self,
        unique_ids: Iterable[str] = (),
        register_unknown: bool = False,
    ) -> None:
        self._sessions: dict[str, DeviceSession] = {}
        self._next_id = itertools.count(1)
        self._register_unknown = register_unknown
        for unique_id in unique_ids:
            self.register(unique_id)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, unique_id: object) -> bool:
        return unique_id in self._sessions

    def register(self, unique_id: str) -> DeviceSession:
        """Register a device, returning the existing session if already known."""
        session = self._sessions.get(unique_id)
        if session is None:
            session = DeviceSession(next(self._next_id), unique_id)
            self._sessions[unique_id] = session
            logger.info(f"Registered device {unique_id} as {session.device_id}")
        return session

    def resolve(self, connection: Any, unique_id: str) -> DeviceSession | None:
        """Return the session for ``unique_id``, or None if the device is unknown.

        ``connection`` identifies the channel the identifier arrived on; it is
        only used for logging here.
        """
        session = self._sessions.get(unique_id)
        if session is not None:
            return session
        if self._register_unknown:
            return self.register(unique_id)
        remote = getattr(connection, "remote_address", None)
        logger.warning(f"Unknown device {unique_id} from {remote}")
        return None
