import os
import tempfile
import unittest

from minilaser.kernel import Context, Settings, config_directory


class TestSettings(unittest.TestCase):
    def test_round_trip(self):
        with tempfile.TemporaryDirectory() as directory:
            settings = Settings(directory, "test.cfg")
            settings.write_persistent("device", "baud_rate", 57600)
            settings.write_persistent("device", "simulate", True)
            settings.write_persistent("device", "label", "100% power")
            settings.write_persistent("device", "origin", (10, 20))
            settings.write_configuration()
            self.assertTrue(os.path.exists(settings.config_file))

            settings = Settings(directory, "test.cfg")
            self.assertEqual(settings.read_persistent(int, "device", "baud_rate", 0), 57600)
            self.assertTrue(settings.read_persistent(bool, "device", "simulate", False))
            self.assertEqual(settings.read_persistent(str, "device", "label"), "100% power")
            self.assertEqual(settings.read_persistent(tuple, "device", "origin"), (10, 20))
            self.assertEqual(settings.keylist("device"), ["baud_rate", "simulate", "label", "origin"])

    def test_defaults(self):
        settings = Settings(None, "unused.cfg")
        self.assertIsNone(settings.config_file)
        self.assertEqual(settings.read_persistent(float, "device", "missing", 2.5), 2.5)
        settings.write_persistent("device", "broken", "abc")
        self.assertEqual(settings.read_persistent(int, "device", "broken", 7), 7)
        settings.delete_persistent("device", "broken")
        settings.delete_persistent("device", "broken")
        self.assertEqual(settings.keylist("device"), [])
        # Nothing to write to.
        settings.write_configuration()

    def test_ignore_settings(self):
        with tempfile.TemporaryDirectory() as directory:
            settings = Settings(directory, "test.cfg")
            settings.write_persistent("device", "baud_rate", 9600)
            settings.write_configuration()
            ignored = Settings(directory, "test.cfg", ignore_settings=True)
            self.assertEqual(ignored.read_persistent(int, "device", "baud_rate", 115200), 115200)

    def test_config_directory(self):
        self.assertTrue(config_directory("minilaser", system="Darwin").endswith(
            os.path.join("Application Support", "minilaser")
        ))
        self.assertTrue(config_directory("minilaser", system="Linux").endswith("minilaser"))


class TestContext(unittest.TestCase):
    def test_setting_persists(self):
        with tempfile.TemporaryDirectory() as directory:
            context = Context("minilaser_test", directory=directory)
            self.assertEqual(context.setting(float, "poll_interval", 0.05), 0.05)
            context.poll_interval = 0.2
            context.write_configuration()

            context = Context("minilaser_test", directory=directory)
            self.assertEqual(context.setting(float, "poll_interval", 0.05), 0.2)

    def test_existing_attribute_kept(self):
        context = Context("minilaser_test", ignore_settings=True)
        context.baud_rate = 9600
        self.assertEqual(context.setting(int, "baud_rate", 115200), 9600)

    def test_channels_shared(self):
        context = Context("minilaser_test", ignore_settings=True)
        channel = context.channel("minilaser_test/usb", buffer_size=10)
        self.assertIs(context.channel("minilaser_test/usb"), channel)
        context.channel("minilaser_test/usb", timestamp=True)
        self.assertTrue(channel.timestamp)
