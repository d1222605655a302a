import logging
from pathlib import Path
from typing import Dict, Optional

from odrive_ascii.device.odrive import AxisLike, ODrive

# Axis properties shown by the `config` action
AXIS_PROPERTIES = (
    "current_state",
    "error",
    "config.startup_motor_calibration",
    "config.startup_encoder_offset_calibration",
    "config.startup_closed_loop_control",
    "motor.error",
    "motor.config.pole_pairs",
    "motor.config.motor_type",
    "motor.config.current_lim",
    "motor.config.calibration_current",
    "encoder.error",
    "encoder.config.mode",
    "encoder.config.cpr",
    "encoder.pos_estimate",
    "encoder.vel_estimate",
    "controller.error",
    "controller.config.control_mode",
    "controller.config.vel_limit",
    "controller.config.pos_gain",
    "controller.config.vel_gain",
    "controller.config.vel_integrator_gain",
)


def config_get_all(odrive: ODrive, axis: AxisLike, output: Optional[Path]) -> int:
    """
    Reads the common configuration properties of one axis and prints them
    grouped by component. Properties the device does not answer show as empty.
    """
    log = logging.getLogger("Config")
    log.debug(f"Reading {len(AXIS_PROPERTIES)} properties from axis{int(axis)}")

    config_dict: Dict[str, str] = {}
    for path in AXIS_PROPERTIES:
        config_dict[path] = odrive.read_property(axis, path)

    grouped_config: Dict[str, list] = {}
    for key in config_dict:
        prefix = key.split('.')[0] if '.' in key else 'axis'
        grouped_config.setdefault(prefix, []).append(key)

    config_lines = []
    max_key_len = max(len(key) for key in config_dict)
    for prefix in sorted(grouped_config):
        config_lines.append(f"\n[{prefix}]")
        for key in grouped_config[prefix]:
            config_lines.append(f"  {key.ljust(max_key_len + 2)}: {config_dict[key]}")

    config_output = "\n".join(config_lines)
    unanswered = sum(1 for value in config_dict.values() if not value)
    total_items_info = f"Total: {len(config_dict)} properties, {unanswered} without reply"

    print(f"\naxis{int(axis)} Configuration:")
    print("-" * 50)
    print(config_output)
    print("-" * 50)
    print(total_items_info)

    if output:
        try:
            with open(output, 'w') as f:
                f.write(config_output.strip())
                f.write(f"\n\n# {total_items_info}\n")
            log.info(f"Configuration saved to: {output}")
        except OSError as e:
            log.error(f"Error saving configuration: {str(e)}")
            return 1

    return 0
