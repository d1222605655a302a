import logging
from typing import Callable, List, Optional, Union

from .streams import Stream


class DummyStream(Stream):
    """An in-memory stream for exercising the ODrive client without hardware.

    Incoming bytes are queued with ``feed``. Every chunk handed to ``write`` is
    recorded. When a ``responder`` is set it is called on ``flush`` for each
    complete line written since the previous flush, and whatever bytes it
    returns are queued as the device's reply.
    """

    def __init__(self, responder: Optional[Callable[[str], Optional[bytes]]] = None):
        self.log = logging.getLogger("DummyStream")
        self.responder = responder
        self.is_open = True
        self.fail_writes = False
        self.fail_flush = False
        self.sent_data: List[bytes] = []
        self.flush_count = 0
        self._incoming = bytearray()
        self._pending = b''

    # --- Stream Protocol Methods --- #

    def read(self, size: int = 1) -> bytes:
        """Returns up to ``size`` queued bytes, or b'' when nothing is queued."""
        if not self.is_open:
            raise IOError("Stream is closed")
        chunk = bytes(self._incoming[:size])
        del self._incoming[:size]
        return chunk

    def write(self, data: bytes) -> int:
        """Records written data."""
        if not self.is_open:
            raise IOError("Stream is closed")
        if self.fail_writes:
            raise IOError("Simulated write failure")
        self.log.debug(f"Write received data: {data!r}")
        self.sent_data.append(bytes(data))
        self._pending += bytes(data)
        return len(data)

    def flush(self) -> None:
        """Hands every complete pending line to the responder."""
        if not self.is_open:
            raise IOError("Stream is closed")
        if self.fail_flush:
            raise IOError("Simulated flush failure")
        self.flush_count += 1
        *lines, self._pending = self._pending.split(b'\n')
        if self.responder is None:
            return
        for line in lines:
            reply = self.responder(line.decode('ascii', errors='replace'))
            if reply:
                self.feed(reply)

    def close(self) -> bool:
        self.is_open = False
        return True

    # --- Test Helper Methods --- #

    def feed(self, data: Union[bytes, str]) -> None:
        """Queues bytes to be returned by subsequent reads."""
        if isinstance(data, str):
            data = data.encode('ascii')
        self._incoming.extend(data)

    def get_sent_data(self, decode: bool = True) -> List[Union[str, bytes]]:
        """Returns a list of data chunks passed to write()."""
        if decode:
            return [d.decode('ascii', errors='ignore') for d in self.sent_data]
        return self.sent_data

    def get_sent_lines(self) -> List[str]:
        """Returns everything written so far split into lines, without terminators."""
        text = b''.join(self.sent_data).decode('ascii', errors='ignore')
        return text.splitlines()

    def clear_sent_data(self):
        self.sent_data.clear()
        self._pending = b''
