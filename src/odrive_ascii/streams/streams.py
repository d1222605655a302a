"""
Stream Protocols for Communication

Defines the capability protocols a byte stream must satisfy to be driven by
the ODrive client. Streams are split into a readable and a writable facet so
that read-only or write-only streams still get the matching half of the API.
"""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class Readable(Protocol):
    """A byte source. ``read`` must not block indefinitely."""

    def read(self, size: int = 1) -> Optional[bytes]:
        """Reads up to ``size`` bytes. Returns b'' (or None) when no data is available."""
        ...


@runtime_checkable
class Writable(Protocol):
    """A byte sink with explicit flushing."""

    def write(self, data: bytes) -> Optional[int]:
        """Writes data to the stream."""
        ...

    def flush(self) -> None:
        """Pushes any buffered output to the device."""
        ...


@runtime_checkable
class Stream(Readable, Writable, Protocol):
    """Protocol for bidirectional streams (USB serial, sockets, test doubles)."""
