"""
Controllers

A controller is where a print ends up: the compiled motion buffers and the control commands of a session are handed
to it in order. Two controllers exist, selected when the session is created:

    LaserController: writes to a transport and runs the acknowledgement protocol.
    PreviewController: draws every buffer into an in-memory canvas instead. Nothing is sent.

The protocol is strictly sequential. After a motion buffer is written, the receive stream is polled at a fixed
interval until the device reports `B1`. No further buffer is written before that. At the end of a shape print the
device reports `F22`. There is no checksum and no retransmission, a corrupted buffer is burned as received.

Polling is bounded: every wait has an attempt budget derived from its timeout and the poll interval, and raises
ProtocolStallError once the budget is spent. Every wait also checks the abort flag, so another thread can cancel a
print with abort().
"""

import threading
import time
from math import ceil

import numpy as np

from ..constants import (
    CMD_END_PRINT,
    DEVICE_HEIGHT,
    DEVICE_WIDTH,
    TOKEN_BUFFER_OK,
    TOKEN_PRINT_FINISHED,
)
from ..core.exceptions import DeviceConnectionError, PrintAbortedError, ProtocolStallError
from ..core.motion import ZERO_MOVE, decode_moves


class LaserController:
    def __init__(self, context, connection=None):
        self.context = context
        self.connection = connection
        self.recv_buffer = bytearray()
        self.packet_count = 0
        self._abort = threading.Event()

        context.setting(float, "poll_interval", 0.05)
        context.setting(float, "packet_timeout", 60.0)
        context.setting(float, "finish_timeout", 1800.0)
        context.setting(float, "packet_delay", 0.05)
        context.setting(float, "command_delay", 0.05)

        name = context.name
        self.pipe_channel = context.channel(f"{name}/events")
        self.send_channel = context.channel(f"{name}/send")
        self.recv_channel = context.channel(f"{name}/recv")

    def __repr__(self):
        return f"LaserController({repr(self.connection)})"

    @property
    def aborted(self):
        return self._abort.is_set()

    def abort(self):
        """
        Cancel the current print. Takes effect at the next buffer or poll.
        """
        self.pipe_channel("Abort requested.")
        self._abort.set()

    def reset(self):
        self._abort.clear()
        self.recv_buffer.clear()
        self.packet_count = 0

    def _check_abort(self):
        if self._abort.is_set():
            raise PrintAbortedError("Print aborted.")

    def write(self, data):
        if self.connection is None or not self.connection.write(data):
            raise DeviceConnectionError("Could not write to the device.")

    def read(self):
        """
        Read whatever the device sent since the last read.

        @return: the received text.
        """
        if self.connection is None:
            return ""
        data = self.connection.read()
        if data and self.recv_channel:
            self.recv_channel(str(data))
        return str(data, "latin-1")

    def command(self, line, delay=None, read=False):
        """
        Send a text control command, then wait for the device to settle.

        @param line: command text
        @param delay: settle time in seconds, defaults to the command_delay setting.
        @param read: read the response after settling.
        @return: the response if read, otherwise None
        """
        if delay is None:
            delay = self.context.command_delay
        if self.send_channel:
            self.send_channel(line)
        self.write(bytes(line, "utf-8"))
        if delay:
            time.sleep(delay)
        if read:
            return self.read()
        return None

    def send_packet(self, packet):
        """
        Write one motion buffer and block until the device acknowledges it.
        """
        self._check_abort()
        if self.context.packet_delay:
            time.sleep(self.context.packet_delay)
        self.recv_buffer.clear()
        if self.send_channel:
            self.send_channel(f"Buffer {self.packet_count}: {packet[:16].hex()}...")
        self.write(packet)
        self.wait_for(TOKEN_BUFFER_OK, self.context.packet_timeout)
        self.packet_count += 1

    def wait_for(self, token, timeout):
        """
        Poll the receive stream until `token` appears. Tokens split over several reads are found, the receive buffer
        is consumed up to the end of the token.

        @param token: acknowledgement token
        @param timeout: seconds to wait before giving up
        @return: number of polls it took
        """
        interval = self.context.poll_interval
        attempts = max(1, int(ceil(timeout / max(interval, 0.001))))
        needle = bytes(token, "utf-8")
        for attempt in range(attempts):
            self._check_abort()
            if self.connection is not None:
                data = self.connection.read()
                if data:
                    if self.recv_channel:
                        self.recv_channel(str(data))
                    self.recv_buffer += data
            index = self.recv_buffer.find(needle)
            if index != -1:
                del self.recv_buffer[: index + len(needle)]
                return attempt
            if interval:
                time.sleep(interval)
        self.pipe_channel(f"Device did not acknowledge with '{token}'.")
        raise ProtocolStallError(token, attempts)

    def finish(self, wait=True):
        """
        Tell the device the print is over. Shape prints wait for the print-complete token.
        """
        self.command(CMD_END_PRINT)
        if wait:
            self.wait_for(TOKEN_PRINT_FINISHED, self.context.finish_timeout)
        else:
            self.read()


class PreviewController:
    """
    Simulation controller. Motion buffers are decoded and drawn into `canvas`, a device sized array of dwell values,
    offset by the print origin. Control commands are only logged.
    """

    def __init__(self, context):
        self.context = context
        self.canvas = np.zeros((DEVICE_HEIGHT, DEVICE_WIDTH), dtype=np.uint8)
        self.offset_x = 0
        self.offset_y = 0
        self.packet_count = 0
        self._abort = threading.Event()

        name = context.name
        self.pipe_channel = context.channel(f"{name}/events")
        self.send_channel = context.channel(f"{name}/send")

    def __repr__(self):
        return "PreviewController()"

    @property
    def aborted(self):
        return self._abort.is_set()

    def abort(self):
        self.pipe_channel("Abort requested.")
        self._abort.set()

    def reset(self):
        self._abort.clear()
        self.packet_count = 0

    def set_offset(self, x, y):
        self.offset_x = x
        self.offset_y = y

    def clear(self):
        self.canvas.fill(0)

    def read(self):
        return ""

    def command(self, line, delay=None, read=False):
        if self.send_channel:
            self.send_channel(f"(simulated) {line}")
        return "" if read else None

    def send_packet(self, packet):
        if self._abort.is_set():
            raise PrintAbortedError("Print aborted.")
        for move in decode_moves(packet):
            if move == ZERO_MOVE:
                continue
            x, y, dwell = move.offset(self.offset_x, self.offset_y)
            self.canvas[y, x] = dwell
        self.packet_count += 1

    def wait_for(self, token, timeout):
        return 0

    def finish(self, wait=True):
        self.command(CMD_END_PRINT)

    def save(self, filename):
        """
        Save the canvas as a grayscale image. Burned pixels are dark.
        """
        from PIL import Image

        Image.fromarray(255 - self.canvas).save(filename)
