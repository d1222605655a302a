import logging
import re
import time
from typing import Any, Callable, Optional, Union

from odrive_ascii.enumerations import Axis, AxisState
from odrive_ascii.errors import AxisError, AxisErrors, ControllerError, EncoderError, MotorError
from odrive_ascii.streams.streams import Readable, Writable

# Seconds to wait for the rest of a reply line before giving up on it
READ_TIMEOUT = 1.0
# Delay before each current_state query while waiting in run_state()
POLL_INTERVAL = 0.1
# Number of current_state queries before run_state() reports a timeout
POLL_ATTEMPTS = 100

_INT_PATTERN = re.compile(r"^[+-]?\d+$")
# Replies are parsed as 32-bit values by the firmware
INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1
# Width of the error registers; negative replies are read as their unsigned bits
ERROR_REGISTER_MASK = 0xFFFFFFFF

AxisLike = Union[Axis, int]


def format_value(value: Any) -> str:
    """
    Renders a command argument as ASCII text.

    Floats use the shortest round-trip representation with a trailing '.0'
    dropped, so 0.0 is sent as '0' and 2.5 as '2.5'. Booleans are sent as 1/0.
    """
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, float):
        text = repr(value)
        return text[:-2] if text.endswith(".0") else text
    return str(value)


class ODrive:
    """
    Client for the ODrive ASCII protocol over a caller-supplied byte stream.

    The client owns the stream: close() (or leaving a ``with`` block) closes it.
    Reading operations need a Readable stream, commands need a Writable one and
    request/response exchanges need both; a TypeError is raised otherwise.

    Numeric replies that cannot be parsed read as zero, so a zero result is
    ambiguous between "the device reported 0" and "the reply was unusable".
    """

    read_timeout = READ_TIMEOUT
    poll_interval = POLL_INTERVAL
    poll_attempts = POLL_ATTEMPTS

    def __init__(self, stream: Any,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            stream: An already opened stream (USBStream, socket file, DummyStream, ...).
            clock: Monotonic time source in seconds, used for the line read timeout.
            sleep: Blocking delay used between state polls.
        """
        self.log = logging.getLogger("ODrive")
        if stream is None:
            raise ValueError("ODrive requires a stream object.")
        self.stream = stream
        self.clock = clock
        self.sleep = sleep

    def __enter__(self) -> "ODrive":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Closes the owned stream, if it can be closed."""
        if self.stream is None:
            return
        close = getattr(self.stream, "close", None)
        try:
            if callable(close):
                close()
                self.log.debug("Stream closed")
        finally:
            self.stream = None

    # --- Capability checks ---

    def _readable(self) -> Readable:
        if not isinstance(self.stream, Readable):
            raise TypeError(f"{type(self.stream).__name__} does not support reading")
        return self.stream

    def _writable(self) -> Writable:
        if not isinstance(self.stream, Writable):
            raise TypeError(f"{type(self.stream).__name__} does not support writing")
        return self.stream

    # --- Raw passthrough ---
    # Escape hatch for operations this class does not model. Mixing raw reads
    # with read_string() inside one exchange can leave half a line unread.

    def write(self, data: bytes) -> Optional[int]:
        return self._writable().write(data)

    def flush(self) -> None:
        self._writable().flush()

    def read(self, size: int = 1) -> Optional[bytes]:
        return self._readable().read(size)

    # --- Replies ---

    def read_string(self) -> str:
        """
        Reads the next reply line.

        Bytes are accumulated until a newline arrives or read_timeout seconds
        have passed since the call started. A timeout is not an error: whatever
        was received so far is returned, possibly an empty string.
        """
        stream = self._readable()
        chars = []
        started = self.clock()
        while True:
            try:
                data = stream.read(1)
            except BlockingIOError:
                data = None
            if not data:
                if self.clock() - started >= self.read_timeout:
                    self.log.debug(f"Read timed out after {self.read_timeout}s, partial: {''.join(chars)!r}")
                    break
                continue
            ch = chr(data[0])
            if ch == "\n":
                break
            chars.append(ch)

        line = "".join(chars).strip()
        self.log.debug(f"Recv: {line!r}")
        return line

    read_line_or_timeout = read_string

    def read_float(self) -> float:
        """
        Reads the next reply as a float; unparseable replies read as 0.0.
        Digit separators ('1_000') are not accepted.
        """
        text = self.read_string()
        try:
            if "_" in text:
                raise ValueError(text)
            return float(text)
        except ValueError:
            self.log.debug(f"Reply {text!r} is not a float, using 0.0")
            return 0.0

    def read_int(self) -> int:
        """
        Reads the next reply as a 32-bit signed int. Unparseable or
        out-of-range replies read as 0.
        """
        text = self.read_string()
        if not _INT_PATTERN.match(text):
            self.log.debug(f"Reply {text!r} is not an int, using 0")
            return 0
        value = int(text)
        if not INT_MIN <= value <= INT_MAX:
            self.log.debug(f"Reply {text!r} is outside the 32-bit range, using 0")
            return 0
        return value

    # --- Commands ---

    def send_line(self, line: str) -> None:
        """Writes one command line followed by a newline, then flushes."""
        stream = self._writable()
        self.log.debug(f"Sending: {line!r}")
        stream.write((line + "\n").encode("ascii"))
        stream.flush()

    def _command(self, verb: str, *args: Any) -> None:
        self.send_line(" ".join([verb] + [format_value(arg) for arg in args]))

    def set_position_p(self, axis: AxisLike, position: float,
                       velocity_feed_forward: Optional[float] = None,
                       current_feed_forward: Optional[float] = None) -> None:
        """
        Moves the motor to a position. Intended for a real-time controller
        streaming setpoints along a trajectory.

        Args:
            axis: The motor to command.
            position: Desired position, in encoder counts.
            velocity_feed_forward: Velocity feed forward, in counts/s (default 0).
            current_feed_forward: Current feed forward, in amps (default 0).
        """
        self._command("p", int(axis), float(position),
                      float(velocity_feed_forward or 0.0),
                      float(current_feed_forward or 0.0))

    def set_position_q(self, axis: AxisLike, position: float,
                       velocity_limit: Optional[float] = None,
                       current_limit: Optional[float] = None) -> None:
        """
        Moves the motor to a position, one setpoint at a time.

        Args:
            axis: The motor to command.
            position: Desired position, in encoder counts.
            velocity_limit: Velocity limit, in counts/s (default 0).
            current_limit: Current limit, in amps (default 0).
        """
        self._command("q", int(axis), float(position),
                      float(velocity_limit or 0.0),
                      float(current_limit or 0.0))

    def set_velocity(self, axis: AxisLike, velocity: float,
                     current_feed_forward: Optional[float] = None) -> None:
        """Sets a velocity setpoint (counts/s) with an optional current feed forward (amps)."""
        self._command("v", int(axis), float(velocity), float(current_feed_forward or 0.0))

    def set_current(self, axis: AxisLike, current: float) -> None:
        """Sets the motor current, in amps."""
        self._command("c", int(axis), float(current))

    def set_trajectory(self, axis: AxisLike, position: float) -> None:
        """Moves the motor to a position using the trajectory planner."""
        self._command("t", int(axis), float(position))

    def set_requested_state(self, axis: AxisLike, state: Union[AxisState, int]) -> None:
        self.send_line(f"w axis{int(axis)}.requested_state {int(state)}")

    def write_property(self, axis: AxisLike, path: str, value: Any) -> None:
        """Writes an axis property, e.g. write_property(0, 'controller.config.vel_limit', 20000)."""
        self.send_line(f"w axis{int(axis)}.{path} {format_value(value)}")

    def request_property(self, axis: AxisLike, path: str) -> None:
        """Asks the device for an axis property. The reply must be read separately."""
        self.send_line(f"r axis{int(axis)}.{path}")

    # --- Request/response exchanges ---

    def _require_duplex(self) -> None:
        self._readable()
        self._writable()

    def read_property(self, axis: AxisLike, path: str) -> str:
        self._require_duplex()
        self.request_property(axis, path)
        return self.read_string()

    def read_property_float(self, axis: AxisLike, path: str) -> float:
        self._require_duplex()
        self.request_property(axis, path)
        return self.read_float()

    def read_property_int(self, axis: AxisLike, path: str) -> int:
        self._require_duplex()
        self.request_property(axis, path)
        return self.read_int()

    def get_velocity(self, axis: AxisLike) -> float:
        """Returns the encoder velocity estimate of an axis, in counts/s."""
        return self.read_property_float(axis, "encoder.vel_estimate")

    def get_errors(self, axis: AxisLike) -> AxisErrors:
        """Reads the axis, motor, encoder and controller error registers."""
        return AxisErrors(
            axis=AxisError(self._read_error_register(axis, "error")),
            motor=MotorError(self._read_error_register(axis, "motor.error")),
            encoder=EncoderError(self._read_error_register(axis, "encoder.error")),
            controller=ControllerError(self._read_error_register(axis, "controller.error")),
        )

    def _read_error_register(self, axis: AxisLike, path: str) -> int:
        value = self.read_property_int(axis, path)
        if value < 0:
            self.log.debug(f"axis{int(axis)}.{path} reported {value}, reading as 0x{value & ERROR_REGISTER_MASK:x}")
        return value & ERROR_REGISTER_MASK

    def run_state(self, axis: AxisLike, requested_state: Union[AxisState, int], wait: bool) -> bool:
        """
        Requests an axis state, optionally waiting for the axis to return to idle.

        Sequences such as calibration pass through several states before the
        axis settles back in IDLE. With ``wait`` set, current_state is polled
        every poll_interval seconds, at most poll_attempts times.

        Returns:
            True if the request was sent without waiting or IDLE was observed,
            False if the polling budget ran out first. IDLE seen on the last
            allowed poll still counts as True.
        """
        self._require_duplex()
        self.set_requested_state(axis, requested_state)
        if not wait:
            return True

        for attempt in range(1, self.poll_attempts + 1):
            self.sleep(self.poll_interval)
            state = self.read_property_int(axis, "current_state")
            if state == AxisState.IDLE:
                self.log.debug(f"axis{int(axis)} idle after {attempt} poll(s)")
                return True

        self.log.warning(f"axis{int(axis)} did not return to idle after {self.poll_attempts} polls")
        return False
