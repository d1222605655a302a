"""
Integer-backed constants used by the ODrive ASCII protocol.

Values follow the ODrive 0.4 firmware. They are sent on the wire as their
decimal value.
"""

from enum import IntEnum
from typing import Union


class Axis(IntEnum):
    """Motor channel a command targets."""
    ZERO = 0
    ONE = 1


class AxisState(IntEnum):
    UNDEFINED = 0
    IDLE = 1
    STARTUP_SEQUENCE = 2
    FULL_CALIBRATION_SEQUENCE = 3
    MOTOR_CALIBRATION = 4
    SENSORLESS_CONTROL = 5
    ENCODER_INDEX_SEARCH = 6
    ENCODER_OFFSET_CALIBRATION = 7
    CLOSED_LOOP_CONTROL = 8
    LOCKIN_SPIN = 9
    ENCODER_DIR_FIND = 10


class ControlMode(IntEnum):
    VOLTAGE = 0
    CURRENT = 1
    VELOCITY = 2
    POSITION = 3
    TRAJECTORY = 4


class EncoderMode(IntEnum):
    INCREMENTAL = 0
    HALL = 1


class MotorType(IntEnum):
    HIGH_CURRENT = 0
    LOW_CURRENT = 1
    GIMBAL = 2


def parse_axis_state(value: Union[str, int]) -> AxisState:
    """
    Resolves an axis state from its number or name.

    Names are case-insensitive and accept '-' in place of '_', so
    'closed-loop-control', 'CLOSED_LOOP_CONTROL' and '8' are equivalent.

    Raises:
        ValueError: If the value names no known state.
    """
    if isinstance(value, int):
        return AxisState(value)
    text = value.strip()
    if text.isdigit():
        return AxisState(int(text))
    try:
        return AxisState[text.upper().replace('-', '_')]
    except KeyError:
        raise ValueError(f"Unknown axis state: {value!r}") from None
