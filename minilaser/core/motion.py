"""
Motion commands and their wire encoding.

A move is one (x, y, dwell) instruction for the laser head. On the wire every move is a 4 byte word:

    byte 0: low 8 bits of x
    byte 1: high nibble is bits 8-11 of x, low nibble is bits 8-11 of y
    byte 2: low 8 bits of y
    byte 3: dwell

The device field is 10 bits wide on each axis, the wire word carries 12. Values above 1023 are accepted by the
firmware but silently lose their meaning, so every producer clamps with `Move.clamped()` before encoding.
"""

from typing import Iterable, Iterator, NamedTuple

from ..constants import DEVICE_HEIGHT, DEVICE_WIDTH, MAX_DWELL, MOVE_SIZE


def clamp(value, low, high):
    if value < low:
        return low
    if value > high:
        return high
    return value


class Move(NamedTuple):
    x: int
    y: int
    dwell: int

    @classmethod
    def clamped(cls, x, y, dwell) -> "Move":
        return cls(
            clamp(int(x), 0, DEVICE_WIDTH - 1),
            clamp(int(y), 0, DEVICE_HEIGHT - 1),
            clamp(int(dwell), 0, MAX_DWELL),
        )

    def offset(self, dx, dy) -> "Move":
        return Move.clamped(self.x + dx, self.y + dy, self.dwell)


ZERO_MOVE = Move(0, 0, 0)

# Anything that yields moves in order can be streamed: shape planners, raster plotters, plain lists.
MotionSource = Iterable[Move]


def encode_move(x, y, dwell) -> bytes:
    return bytes(
        (
            x & 0xFF,
            ((x >> 4) & 0xF0) | ((y >> 8) & 0x0F),
            y & 0xFF,
            dwell & 0xFF,
        )
    )


def decode_move(data) -> Move:
    """
    Inverse of encode_move(). The y nibble is shifted by 8, exactly as it was packed.

    @param data: 4 bytes
    @return: Move
    """
    if len(data) != MOVE_SIZE:
        raise ValueError(f"Move words are {MOVE_SIZE} bytes, got {len(data)}.")
    return Move(
        data[0] | ((data[1] & 0xF0) << 4),
        data[2] | ((data[1] & 0x0F) << 8),
        data[3],
    )


def encode_moves(moves: Iterable[Move]) -> bytearray:
    data = bytearray()
    for move in moves:
        data += encode_move(*move)
    return data


def decode_moves(data) -> Iterator[Move]:
    if len(data) % MOVE_SIZE != 0:
        raise ValueError(f"Buffer length {len(data)} is not a multiple of {MOVE_SIZE}.")
    for i in range(0, len(data), MOVE_SIZE):
        yield decode_move(data[i : i + MOVE_SIZE])
