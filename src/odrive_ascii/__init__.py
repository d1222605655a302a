"""
odrive-ascii - A client and command-line tool for the ODrive ASCII protocol
"""

__version__ = "0.1.0"

from odrive_ascii.device.odrive import ODrive
from odrive_ascii.enumerations import Axis, AxisState, ControlMode, EncoderMode, MotorType
from odrive_ascii.errors import AxisError, AxisErrors, ControllerError, EncoderError, MotorError
from odrive_ascii.main import main

# This function is a direct entry point for CLI use
def cli_main():
    """
    Entry point for the CLI command.
    This function is referenced in pyproject.toml
    """
    import sys
    sys.exit(main())
