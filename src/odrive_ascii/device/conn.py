import logging
from typing import Optional, Tuple

import serial

from ..streams.usb import DEFAULT_BAUDRATE, USBStream


class Connection:
    """Handles detection and creation of ODrive serial streams."""

    @staticmethod
    def usb(port: str, baudrate: int = DEFAULT_BAUDRATE) -> Optional[USBStream]:
        """
        Attempts to open a USB serial connection.

        Args:
            port: The serial port identifier (e.g., /dev/ttyACM0 or COM3).
            baudrate: Line speed; the ODrive UART and USB CDC default to 115200.

        Returns:
            A USBStream instance if successful, None otherwise.
        """
        log = logging.getLogger("Connection.usb")
        log.info(f"Attempting USB connection to {port}...")
        try:
            stream = USBStream(port, baudrate=baudrate)
        except serial.SerialException as e:
            log.error(f"Failed to open USB connection to {port}: {e}")
            return None
        log.info(f"USB connection successful to {port}.")
        return stream

    @staticmethod
    def auto(baudrate: int = DEFAULT_BAUDRATE) -> Tuple[Optional[USBStream], str]:
        """
        Connects to the first ODrive-looking serial port, falling back to the
        first listed port when none matches.

        Returns:
            A tuple of the opened stream and its port name, or (None, "") if no
            port is found or the connection fails.
        """
        log = logging.getLogger("Connection.auto")
        log.info("Scanning for USB devices...")
        ports = USBStream.list_ports()
        if not ports:
            log.info("Auto-detection failed: No serial ports found.")
            return None, ""

        odrive_ports = [p for p in ports if USBStream.is_odrive_port(p)]
        selected = odrive_ports[0] if odrive_ports else ports[0]
        if not odrive_ports:
            log.warning(f"No ODrive found by USB id, trying first port {selected['port']}")
        else:
            log.info(f"Found ODrive: {selected['port']} - {selected['description']}")

        stream = Connection.usb(selected['port'], baudrate=baudrate)
        if stream is None:
            return None, ""
        return stream, selected['port']
