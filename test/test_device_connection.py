import unittest
from unittest.mock import MagicMock, patch

from serial import SerialException

from minilaser.device.connection import SerialConnection, list_ports


class TestSerialConnection(unittest.TestCase):
    def test_list_ports(self):
        port = MagicMock()
        port.device = "/dev/ttyUSB0"
        with patch("serial.tools.list_ports.comports", return_value=[port]):
            self.assertEqual(list_ports(), ["/dev/ttyUSB0"])

    def test_open_failure(self):
        log = []
        connection = SerialConnection("/dev/does-not-exist", channel=log.append)
        with patch("serial.Serial", side_effect=SerialException("no such port")):
            with self.assertRaises(ConnectionError):
                connection.open()
        self.assertFalse(connection.connected)
        self.assertIn("no such port", log)

    def test_open_read_write(self):
        port = MagicMock()
        port.in_waiting = 3
        port.read.return_value = b"B1\n"
        with patch("serial.Serial", return_value=port) as serial_class:
            connection = SerialConnection("COM5")
            connection.open()
        self.assertEqual(serial_class.call_args[0], ("COM5", 115200))
        self.assertEqual(serial_class.call_args[1]["timeout"], 0)
        self.assertTrue(port.dtr)
        self.assertTrue(connection.connected)
        self.assertEqual(connection.read(), b"B1\n")
        port.read.assert_called_with(3)
        self.assertTrue(connection.write("$40"))
        port.write.assert_called_with(b"$40")
        connection.close()
        port.close.assert_called_once()
        self.assertFalse(connection.connected)

    def test_write_error(self):
        port = MagicMock()
        port.write.side_effect = SerialException("unplugged")
        with patch("serial.Serial", return_value=port):
            connection = SerialConnection("COM5")
            connection.open()
        self.assertFalse(connection.write(b"$33"))

    def test_disconnected(self):
        connection = SerialConnection("COM5")
        self.assertEqual(connection.read(), b"")
        self.assertFalse(connection.write(b"$33"))
