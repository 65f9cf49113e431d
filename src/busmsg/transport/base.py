"""Transport interface.

This is the (small) contract that transport implementations follow. It
lives outside :mod:`busmsg.protocol` so the protocol remains transport-agnostic:
a transport moves the bytes of exactly one frame per message.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


# Transport agnostic exceptions

class TransportError(Exception):
    """Base class for all transport-layer errors."""


class TransportTimeout(TransportError):
    """No frame arrived within the requested time."""


class TransportClosed(TransportError):
    """The transport was used after it was closed."""


class Transport(ABC):
    """Minimal contract for a frame-oriented transport."""

    @abstractmethod
    def send(self, data: bytes) -> None:
        """Send the bytes of one frame."""

    @abstractmethod
    def recv(self, timeout: Optional[float] = None) -> bytes:
        """Receive the bytes of the next frame.

        Raises TransportTimeout if nothing arrives within *timeout* seconds;
        a *timeout* of None blocks indefinitely.
        """

    @abstractmethod
    def close(self) -> None:
        """Tear down the underlying connection/socket."""

    @property
    def is_open(self) -> bool:
        """Whether the transport is currently usable."""
        return False
