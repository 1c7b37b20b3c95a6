"""
Device Emulator

Emulates the engraver firmware closely enough to run the full protocol without hardware. It parses the control
commands, decodes motion buffers and answers with the same tokens the firmware sends. The MockConnection wraps it
behind the transport interface, for dry runs and tests.
"""

from ..constants import (
    CMD_END_PRINT,
    CMD_ENGRAVING_DEPTH,
    CMD_FAN,
    CMD_HOME,
    CMD_LASER_POWER,
    CMD_PRINT_ORDER,
    CMD_RESET_ORIGIN,
    CMD_START_PREVIEW,
    CMD_STOP_PREVIEW,
    PACKET_SIZE,
    TOKEN_BUFFER_OK,
    TOKEN_PRINT_FINISHED,
)
from ..core.motion import ZERO_MOVE, decode_moves


class DeviceEmulator:
    def __init__(self, reply=None, acknowledge=True, handshake=True):
        self.reply = reply
        self.acknowledge = acknowledge
        self.handshake = handshake

        self.commands = []
        self.packets = []
        self.moves = []

        self.origin = (0, 0)
        self.fan = False
        self.power = None
        self.depth = None
        self.previewing = None
        self.printing = False
        self.homed = False

    def __repr__(self):
        return f"DeviceEmulator(commands={len(self.commands)}, packets={len(self.packets)})"

    def _reply(self, message):
        if self.reply is not None:
            self.reply(bytes(message + "\r\n", "utf-8"))

    def write(self, data):
        if len(data) == PACKET_SIZE:
            self.write_packet(data)
            return
        if isinstance(data, (bytes, bytearray)):
            data = data.decode("utf-8", errors="replace")
        self.write_command(data)

    def write_packet(self, packet):
        self.packets.append(bytes(packet))
        self.moves.extend(m for m in decode_moves(packet) if m != ZERO_MOVE)
        if self.acknowledge:
            self._reply(TOKEN_BUFFER_OK)

    def write_command(self, line):
        line = line.strip()
        self.commands.append(line)
        parts = line.split(" ")
        command = parts[0]
        values = [p[1:] if p.startswith("P") else p for p in parts[1:]]
        if command == CMD_HOME:
            self.homed = True
            if self.handshake:
                self._reply("connected")
        elif command == CMD_RESET_ORIGIN:
            self.homed = True
            self._reply("ok")
        elif command == CMD_FAN:
            self.fan = int(values[0]) != 0
        elif command == CMD_PRINT_ORDER:
            self.origin = (int(values[0]), int(values[1]))
            self.printing = True
            self._reply("ok")
        elif command == CMD_END_PRINT:
            self.printing = False
            if self.acknowledge:
                self._reply(TOKEN_PRINT_FINISHED)
        elif command == CMD_LASER_POWER:
            self.power = float(values[0])
        elif command == CMD_ENGRAVING_DEPTH:
            self.depth = float(values[0])
        elif command == CMD_START_PREVIEW:
            self.previewing = tuple(int(v) for v in values)
            self._reply("ok")
        elif command == CMD_STOP_PREVIEW:
            self.previewing = None
            self._reply("ok")


class MockConnection:
    """
    Transport backed by a DeviceEmulator. `chunk_size` limits how many bytes a single read() returns, to exercise
    tokens split across reads.
    """

    def __init__(self, port="mock", channel=None, chunk_size=0, **kwargs):
        self.port = port
        self.channel = channel if channel is not None else lambda e: None
        self.chunk_size = chunk_size
        self.read_buffer = bytearray()
        self.emulator = DeviceEmulator(reply=self.add_read, **kwargs)
        self.laser = None

    def __repr__(self):
        return f"MockConnection('{self.port}')"

    @property
    def connected(self):
        return self.laser is not None

    def add_read(self, data):
        self.read_buffer += data

    def open(self):
        if self.laser:
            self.channel("Already connected")
            return
        self.channel("Attempting to Connect...")
        self.laser = True
        self.channel("Connected")

    def close(self):
        self.laser = None
        self.channel("Disconnected")

    def read(self):
        if self.chunk_size:
            data = bytes(self.read_buffer[: self.chunk_size])
            del self.read_buffer[: self.chunk_size]
        else:
            data = bytes(self.read_buffer)
            self.read_buffer.clear()
        return data

    def write(self, data):
        if not self.laser:
            return False
        if isinstance(data, str):
            data = bytes(data, "utf-8")
        self.emulator.write(data)
        return True
