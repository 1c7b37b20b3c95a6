"""
Serial Connection

Talks to the engraver over a serial port using pyserial. Reads never block: read() returns whatever bytes are
queued, or an empty bytes object.
"""

import serial
import serial.tools.list_ports
from serial import SerialException


def list_ports():
    """
    Serial ports available on this machine, by device name.
    """
    return [port.device for port in serial.tools.list_ports.comports()]


class SerialConnection:
    def __init__(self, port, baud_rate=115200, channel=None):
        self.port = port
        self.baud_rate = baud_rate
        self.channel = channel if channel is not None else lambda e: None
        self.laser = None

    def __repr__(self):
        return f"SerialConnection('{self.port}', {self.baud_rate})"

    @property
    def connected(self):
        return self.laser is not None

    def open(self):
        if self.laser:
            self.channel("Already connected")
            return
        self.channel(f"Attempting to connect to {self.port}...")
        try:
            self.laser = serial.Serial(
                self.port,
                self.baud_rate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=0,
            )
        except SerialException as e:
            self.channel("Serial connection could not be established.")
            self.channel(str(e))
            raise ConnectionError(str(e)) from e
        self.laser.dtr = True
        self.laser.reset_input_buffer()
        self.laser.reset_output_buffer()
        self.channel("Connected")

    def close(self):
        if self.laser:
            self.laser.close()
            self.laser = None
            self.channel("Disconnected")

    def read(self):
        if self.laser is None:
            return b""
        try:
            return self.laser.read(self.laser.in_waiting)
        except (SerialException, OSError) as e:
            self.channel(f"Error when reading: {str(e)}")
            return b""

    def write(self, data):
        if self.laser is None:
            return False
        if isinstance(data, str):
            data = bytes(data, "utf-8")
        try:
            self.laser.write(data)
        except (SerialException, OSError) as e:
            self.channel(f"Error when writing: {str(e)}")
            return False
        return True
