import threading
import unittest
from test import bootstrap

from minilaser.core.exceptions import DeviceConnectionError, PrintAbortedError, ProtocolStallError
from minilaser.core.motion import Move, encode_moves
from minilaser.device.controller import LaserController, PreviewController
from minilaser.device.emulator import MockConnection


def packet(*moves):
    data = encode_moves(moves)
    return bytes(data + bytes(1024 - len(data)))


class TestLaserController(unittest.TestCase):
    def setUp(self):
        self.context = bootstrap.bootstrap()
        self.connection = MockConnection()
        self.connection.open()
        self.controller = LaserController(self.context, self.connection)

    def test_send_packet_acknowledged(self):
        self.controller.send_packet(packet(Move(1, 2, 3)))
        self.controller.send_packet(packet(Move(4, 5, 6)))
        self.assertEqual(self.controller.packet_count, 2)
        self.assertEqual(self.connection.emulator.moves, [(1, 2, 3), (4, 5, 6)])

    def test_stall_raises(self):
        self.connection.emulator.acknowledge = False
        self.context.packet_timeout = 0.5
        self.context.poll_interval = 0.25
        with self.assertRaises(ProtocolStallError) as cm:
            self.controller.send_packet(packet(Move(1, 1, 1)))
        self.assertEqual(cm.exception.token, "B1")
        self.assertEqual(cm.exception.attempts, 2)
        self.assertEqual(self.controller.packet_count, 0)

    def test_token_split_over_reads(self):
        self.connection.chunk_size = 1
        for i in range(5):
            self.controller.send_packet(packet(Move(i, i, i + 1)))
        self.assertEqual(self.controller.packet_count, 5)

    def test_wait_for_consumes_token(self):
        self.connection.add_read(b"xxB1yyB1")
        self.controller.wait_for("B1", 1.0)
        self.assertEqual(bytes(self.controller.recv_buffer), b"yyB1")
        self.controller.wait_for("B1", 1.0)
        self.assertEqual(bytes(self.controller.recv_buffer), b"")

    def test_wait_for_counts_polls(self):
        self.connection.chunk_size = 1
        self.connection.add_read(b"F22")
        self.assertEqual(self.controller.wait_for("F22", 1.0), 2)

    def test_finish(self):
        self.controller.finish(wait=True)
        self.assertEqual(self.connection.emulator.commands[-1], "$33")

    def test_abort(self):
        self.controller.abort()
        self.assertTrue(self.controller.aborted)
        with self.assertRaises(PrintAbortedError):
            self.controller.send_packet(packet(Move(1, 1, 1)))
        self.assertEqual(self.connection.emulator.packets, [])
        self.controller.reset()
        self.assertFalse(self.controller.aborted)

    def test_abort_from_other_thread(self):
        self.connection.emulator.acknowledge = False
        self.context.packet_timeout = 30.0
        self.context.poll_interval = 0.01
        timer = threading.Timer(0.1, self.controller.abort)
        timer.start()
        try:
            with self.assertRaises(PrintAbortedError):
                self.controller.send_packet(packet(Move(1, 1, 1)))
        finally:
            timer.cancel()

    def test_write_disconnected(self):
        self.connection.close()
        with self.assertRaises(DeviceConnectionError):
            self.controller.command("$8 P0.500")

    def test_read_arbitrary_bytes(self):
        self.connection.add_read(b"\\u12 \xff\xfeB1")
        self.assertEqual(self.controller.read(), "\\u12 \xff\xfeB1")

    def test_command_read(self):
        response = self.controller.command("$42", read=True)
        self.assertIn("ok", response)

    def test_send_channel(self):
        sent = []
        self.context.channel("minilaser_test/send").watch(sent.append)
        self.controller.command("$10 P0")
        self.assertEqual(sent, ["    $10 P0"])


class TestPreviewController(unittest.TestCase):
    def setUp(self):
        self.context = bootstrap.bootstrap()
        self.controller = PreviewController(self.context)

    def test_draws_with_offset(self):
        self.controller.set_offset(100, 200)
        self.controller.send_packet(packet(Move(1, 2, 50), Move(3, 4, 60)))
        canvas = self.controller.canvas
        self.assertEqual(canvas[202, 101], 50)
        self.assertEqual(canvas[204, 103], 60)
        self.assertEqual(int(canvas.astype(int).sum()), 110)
        self.assertEqual(self.controller.packet_count, 1)

    def test_zero_moves_not_drawn(self):
        self.controller.set_offset(10, 10)
        self.controller.send_packet(packet())
        self.assertEqual(int(self.controller.canvas.sum()), 0)

    def test_abort(self):
        self.controller.abort()
        with self.assertRaises(PrintAbortedError):
            self.controller.send_packet(packet(Move(1, 1, 1)))

    def test_clear(self):
        self.controller.send_packet(packet(Move(1, 1, 1)))
        self.controller.clear()
        self.assertEqual(int(self.controller.canvas.sum()), 0)
