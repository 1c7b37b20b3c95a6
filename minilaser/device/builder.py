"""
Packet Builder

Batches moves into the fixed size motion buffers the device accepts. Every buffer holds exactly 256 moves
(1024 bytes). Buffers are handed to a flush callable as soon as they fill up, the last partial buffer is padded with
zero moves, which the firmware treats as a no-op at the origin.
"""

from ..constants import MOVE_SIZE, PACKET_SIZE
from ..core.motion import ZERO_MOVE, Move, encode_move


class PacketBuilder:
    """
    PacketBuilder collects moves into a buffer and flushes full buffers. An offset can be given, it is added to every
    move and the result is clamped to the device field before encoding.
    """

    def __init__(self, flush, offset_x=0, offset_y=0, channel=None):
        self.flush = flush
        self.offset_x = offset_x
        self.offset_y = offset_y
        self.channel = channel
        self.data = bytearray(PACKET_SIZE)
        self.index = 0
        self.packet_count = 0
        self.move_count = 0

    def __len__(self):
        return self.index // MOVE_SIZE

    def add(self, move):
        x, y, dwell = move
        move = Move.clamped(x + self.offset_x, y + self.offset_y, dwell)
        self.data[self.index : self.index + MOVE_SIZE] = encode_move(*move)
        self.index += MOVE_SIZE
        self.move_count += 1
        if self.index >= PACKET_SIZE:
            self._flush()

    def extend(self, moves):
        for move in moves:
            self.add(move)
        return self

    def close(self):
        """
        Pad the partial buffer with zero moves and flush it. Nothing is sent if the buffer is empty.
        """
        if self.index == 0:
            return
        padding = (PACKET_SIZE - self.index) // MOVE_SIZE
        zero = encode_move(*ZERO_MOVE)
        while self.index < PACKET_SIZE:
            self.data[self.index : self.index + MOVE_SIZE] = zero
            self.index += MOVE_SIZE
        if self.channel:
            self.channel(f"Final buffer padded with {padding} zero moves.")
        self._flush()

    def _flush(self):
        packet = bytes(self.data)
        self.index = 0
        self.flush(packet)
        self.packet_count += 1
