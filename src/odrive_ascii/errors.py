"""
Error bit flags reported by the ODrive firmware (0.4 layout).

Each axis exposes an error register per component. Registers are read as
integers and may carry bits unknown to this table, which are kept as-is.
"""

from dataclasses import dataclass
from enum import IntFlag
from typing import List


class AxisError(IntFlag):
    NONE = 0
    INVALID_STATE = 0x01
    DC_BUS_UNDER_VOLTAGE = 0x02
    DC_BUS_OVER_VOLTAGE = 0x04
    CURRENT_MEASUREMENT_TIMEOUT = 0x08
    BRAKE_RESISTOR_DISARMED = 0x10
    MOTOR_DISARMED = 0x20
    MOTOR_FAILED = 0x40
    SENSORLESS_ESTIMATOR_FAILED = 0x80
    ENCODER_FAILED = 0x100
    CONTROLLER_FAILED = 0x200
    POS_CTRL_DURING_SENSORLESS = 0x400
    WATCHDOG_TIMER_EXPIRED = 0x800


class MotorError(IntFlag):
    NONE = 0
    PHASE_RESISTANCE_OUT_OF_RANGE = 0x01
    PHASE_INDUCTANCE_OUT_OF_RANGE = 0x02
    ADC_FAILED = 0x04
    DRV_FAULT = 0x08
    CONTROL_DEADLINE_MISSED = 0x10
    NOT_IMPLEMENTED_MOTOR_TYPE = 0x20
    BRAKE_CURRENT_OUT_OF_RANGE = 0x40
    MODULATION_MAGNITUDE = 0x80
    BRAKE_DEADTIME_VIOLATION = 0x100
    UNEXPECTED_TIMER_CALLBACK = 0x200
    CURRENT_SENSE_SATURATION = 0x400


class EncoderError(IntFlag):
    NONE = 0
    UNSTABLE_GAIN = 0x01
    CPR_OUT_OF_RANGE = 0x02
    NO_RESPONSE = 0x04
    UNSUPPORTED_ENCODER_MODE = 0x08
    ILLEGAL_HALL_STATE = 0x10
    INDEX_NOT_FOUND_YET = 0x20


class ControllerError(IntFlag):
    NONE = 0
    OVERSPEED = 0x01


def flag_names(value: IntFlag) -> List[str]:
    """Names of the known bits set in ``value``, plus a hex entry for unknown bits."""
    flag_type = type(value)
    names = []
    known = 0
    for member in flag_type.__members__.values():
        if member.value and value & member.value == member.value:
            names.append(f"{flag_type.__name__}.{member.name}")
            known |= member.value
    unknown = int(value) & ~known
    if unknown:
        names.append(f"{flag_type.__name__}(0x{unknown:x})")
    return names


@dataclass
class AxisErrors:
    """Snapshot of the error registers of one axis."""
    axis: AxisError = AxisError.NONE
    motor: MotorError = MotorError.NONE
    encoder: EncoderError = EncoderError.NONE
    controller: ControllerError = ControllerError.NONE

    @property
    def ok(self) -> bool:
        return not (self.axis or self.motor or self.encoder or self.controller)

    def describe(self) -> List[str]:
        return (flag_names(self.axis) + flag_names(self.motor)
                + flag_names(self.encoder) + flag_names(self.controller))
