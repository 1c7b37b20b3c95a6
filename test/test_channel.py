import unittest

from minilaser.kernel.channel import Channel


class TestChannel(unittest.TestCase):
    def setUp(self):
        self.channel = Channel("test_channel")

    def test_channel_initialization(self):
        channel = Channel("basic")
        self.assertEqual(channel.name, "basic")
        self.assertEqual(channel.buffer_size, 0)
        self.assertIsNone(channel.buffer)
        self.assertFalse(channel.timestamp)

        channel = Channel("buffered", buffer_size=10)
        self.assertEqual(len(channel), 10)
        self.assertIsNotNone(channel.buffer)

    def test_channel_bool(self):
        self.assertFalse(self.channel)
        self.channel.watch(print)
        self.assertTrue(self.channel)
        self.channel.unwatch(print)
        self.assertFalse(self.channel)
        self.assertTrue(Channel("buffered", buffer_size=5))

    def test_channel_indent(self):
        messages = []
        self.channel.watch(messages.append)
        self.channel("one\ntwo")
        self.channel("flat", indent=False)
        self.assertEqual(messages, ["    one\n    two", "flat"])

    def test_channel_bytes_pass_through(self):
        messages = []
        self.channel.watch(messages.append)
        self.channel(b"\x01\x02")
        self.assertEqual(messages, [b"\x01\x02"])

    def test_channel_line_end(self):
        messages = []
        channel = Channel("ended", line_end="\n")
        channel.watch(messages.append)
        channel("x", indent=False)
        self.assertEqual(messages, ["x\n"])

    def test_channel_timestamp(self):
        messages = []
        channel = Channel("stamped", timestamp=True)
        channel.watch(messages.append)
        channel("hello", indent=False)
        self.assertRegex(messages[0], r"^\[\d\d:\d\d:\d\d\] hello$")

    def test_channel_buffer_replay(self):
        channel = Channel("buffered", buffer_size=2)
        channel("a", indent=False)
        channel("b", indent=False)
        channel("c", indent=False)
        messages = []
        channel.watch(messages.append)
        self.assertEqual(messages, ["b", "c"])

    def test_channel_watch_once(self):
        messages = []
        watcher = messages.append
        self.channel.watch(watcher)
        self.channel += watcher
        self.channel("x", indent=False)
        self.assertEqual(messages, ["x"])
        self.channel -= watcher
        self.channel("y", indent=False)
        self.assertEqual(messages, ["x"])

    def test_resize_buffer(self):
        channel = Channel("resized", buffer_size=3)
        for m in "abc":
            channel(m, indent=False)
        channel.resize_buffer(1)
        self.assertEqual(list(channel.buffer), ["c"])
        channel.resize_buffer(0)
        self.assertIsNone(channel.buffer)
