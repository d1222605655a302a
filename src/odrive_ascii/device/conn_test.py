import unittest
from unittest.mock import patch

import serial

from ..streams.usb import DEFAULT_BAUDRATE, USBStream
from .conn import Connection


class TestConnection(unittest.TestCase):

    @patch('odrive_ascii.device.conn.USBStream')
    def test_usb_failure_returns_none(self, mock_stream_cls):
        mock_stream_cls.side_effect = serial.SerialException("busy")
        self.assertIsNone(Connection.usb("/dev/ttyACM0"))

    @patch('odrive_ascii.device.conn.USBStream')
    def test_auto_prefers_odrive_port(self, mock_stream_cls):
        mock_stream_cls.list_ports.return_value = [
            {'port': '/dev/ttyUSB0', 'description': 'CP2102', 'hwid': '', 'vid': 0x10C4, 'pid': 0xEA60},
            {'port': '/dev/ttyACM0', 'description': 'ODrive', 'hwid': '', 'vid': 0x1209, 'pid': 0x0D32},
        ]
        mock_stream_cls.is_odrive_port.side_effect = USBStream.is_odrive_port
        stream, port = Connection.auto()
        self.assertEqual(port, '/dev/ttyACM0')
        self.assertIs(stream, mock_stream_cls.return_value)
        mock_stream_cls.assert_called_once_with('/dev/ttyACM0', baudrate=DEFAULT_BAUDRATE)

    @patch('odrive_ascii.device.conn.USBStream')
    def test_auto_falls_back_to_first_port(self, mock_stream_cls):
        mock_stream_cls.list_ports.return_value = [
            {'port': 'COM4', 'description': 'USB Serial Device', 'hwid': '', 'vid': None, 'pid': None},
        ]
        mock_stream_cls.is_odrive_port.side_effect = USBStream.is_odrive_port
        stream, port = Connection.auto(baudrate=921600)
        self.assertEqual(port, 'COM4')
        mock_stream_cls.assert_called_once_with('COM4', baudrate=921600)

    @patch('odrive_ascii.device.conn.USBStream')
    def test_auto_without_ports(self, mock_stream_cls):
        mock_stream_cls.list_ports.return_value = []
        self.assertEqual(Connection.auto(), (None, ""))
        mock_stream_cls.assert_not_called()


if __name__ == '__main__':
    unittest.main()
