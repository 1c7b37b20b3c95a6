import unittest

from minilaser.core.motion import (
    ZERO_MOVE,
    Move,
    clamp,
    decode_move,
    decode_moves,
    encode_move,
    encode_moves,
)


class TestMoveCodec(unittest.TestCase):
    def test_encode_known_words(self):
        self.assertEqual(encode_move(0, 0, 0), b"\x00\x00\x00\x00")
        self.assertEqual(encode_move(255, 255, 255), b"\xff\x00\xff\xff")
        self.assertEqual(encode_move(0x123, 0x3A5, 7), b"\x23\x13\xa5\x07")
        self.assertEqual(encode_move(1023, 1023, 128), b"\xff\x33\xff\x80")

    def test_decode_known_words(self):
        self.assertEqual(decode_move(b"\x23\x13\xa5\x07"), Move(0x123, 0x3A5, 7))
        self.assertEqual(decode_move(b"\xff\x33\xff\x80"), Move(1023, 1023, 128))

    def test_high_y_decodes_consistently(self):
        """
        y above 255 uses the low nibble of byte 1, shifted by 8.
        """
        for y in (256, 511, 512, 767, 1000, 1023):
            self.assertEqual(decode_move(encode_move(5, y, 1)).y, y)

    def test_round_trip_samples(self):
        for x in (0, 1, 15, 16, 255, 256, 511, 700, 1023):
            for y in (0, 3, 128, 256, 640, 1023):
                for dwell in (0, 1, 127, 255):
                    data = encode_move(x, y, dwell)
                    self.assertEqual(len(data), 4)
                    self.assertEqual(decode_move(data), (x, y, dwell))

    def test_decode_rejects_wrong_length(self):
        with self.assertRaises(ValueError):
            decode_move(b"\x00\x00\x00")
        with self.assertRaises(ValueError):
            list(decode_moves(b"\x00" * 5))

    def test_encode_moves(self):
        moves = [Move(1, 2, 3), Move(300, 400, 255), ZERO_MOVE]
        data = encode_moves(moves)
        self.assertEqual(len(data), 12)
        self.assertEqual(list(decode_moves(data)), moves)


class TestMove(unittest.TestCase):
    def test_clamp(self):
        self.assertEqual(clamp(-5, 0, 10), 0)
        self.assertEqual(clamp(15, 0, 10), 10)
        self.assertEqual(clamp(7, 0, 10), 7)

    def test_clamped(self):
        self.assertEqual(Move.clamped(-1, 2000, 300), Move(0, 1023, 255))
        self.assertEqual(Move.clamped(10.0, 20.0, 30), Move(10, 20, 30))

    def test_offset_clamps(self):
        self.assertEqual(Move(1000, 10, 9).offset(100, 5), Move(1023, 15, 9))
        self.assertEqual(Move(10, 10, 9).offset(-20, 0), Move(0, 10, 9))


class TestWireWords(unittest.TestCase):
    def test_every_middle_byte_survives(self):
        """
        Every 4 byte word decodes to 12 bit fields which encode back to the same word.
        """
        for b1 in range(256):
            for b0, b2, b3 in ((0, 0, 0), (0x5A, 0xA5, 1), (0xFF, 0xFF, 0xFF)):
                word = bytes((b0, b1, b2, b3))
                self.assertEqual(encode_move(*decode_move(word)), word)
