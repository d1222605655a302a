import logging
from typing import Any, Dict, List, Optional

import serial
import serial.tools.list_ports

from odrive_ascii.streams.streams import Stream

# Constants
DEFAULT_BAUDRATE = 115200
# Per-read timeout; keeps single byte reads from blocking the line reader
SERIAL_TIMEOUT = 0.05  # seconds
ODRIVE_USB_VID = 0x1209
ODRIVE_USB_PIDS = (0x0D32, 0x0D33)


class USBStream(Stream):
    """USB serial connection to an ODrive, established on initialization."""

    def __init__(self, address: str, baudrate: int = DEFAULT_BAUDRATE):
        """
        Initialize and open the serial connection. Raises serial.SerialException on failure.
        """
        self.address = address
        self.serial: Optional[serial.Serial] = None
        self.log = logging.getLogger("USBStream")

        self.log.debug(f"Attempting to open {address} at {baudrate} baud...")
        try:
            self.serial = serial.Serial(
                port=address,
                baudrate=baudrate,
                timeout=SERIAL_TIMEOUT
            )
            self.serial.reset_input_buffer()
            self.log.info(f"Serial port opened successfully: {address}")
        except (serial.SerialException, OSError) as e:
            self.log.error(f"Serial connection error during init: {str(e)}")
            if self.serial and self.serial.is_open:
                self.serial.close()
            self.serial = None
            raise serial.SerialException(f"Failed to open USB device {address}: {e}") from e

    def read(self, size: int = 1) -> bytes:
        """Read up to size bytes; returns b'' once SERIAL_TIMEOUT passes without data."""
        if not self.serial:
            raise serial.SerialException("Serial port is closed")
        return self.serial.read(size)

    def write(self, data: bytes) -> int:
        if not self.serial:
            raise serial.SerialException("Serial port is closed")
        return self.serial.write(data)

    def flush(self) -> None:
        if not self.serial:
            raise serial.SerialException("Serial port is closed")
        self.serial.flush()

    @property
    def in_waiting(self) -> int:
        """Number of bytes waiting in the OS receive buffer."""
        if not self.serial:
            return 0
        return self.serial.in_waiting

    def close(self) -> bool:
        """Close serial connection"""
        if not self.serial:
            self.log.debug("Close called but self.serial is already None.")
            return True

        closed_successfully = True
        try:
            if self.serial.is_open:
                self.log.debug("Closing serial port...")
                self.serial.close()
        except (serial.SerialException, OSError) as e:
            self.log.error(f"Error closing serial connection: {str(e)}")
            closed_successfully = False
        finally:
            self.serial = None
        return closed_successfully

    @staticmethod
    def list_ports() -> List[Dict[str, Any]]:
        """List available serial ports."""
        ports = []
        for port in serial.tools.list_ports.comports():
            ports.append({
                'port': port.device,
                'description': port.description or '',
                'hwid': port.hwid or '',
                'vid': port.vid,
                'pid': port.pid,
            })
        return ports

    @staticmethod
    def is_odrive_port(port: Dict[str, Any]) -> bool:
        if port.get('vid') == ODRIVE_USB_VID and port.get('pid') in ODRIVE_USB_PIDS:
            return True
        return 'odrive' in port.get('description', '').lower()

    @staticmethod
    def find_odrive_ports() -> List[Dict[str, Any]]:
        """List serial ports that look like an ODrive (by USB id or description)."""
        return [p for p in USBStream.list_ports() if USBStream.is_odrive_port(p)]
