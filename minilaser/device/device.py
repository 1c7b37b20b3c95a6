"""
Laser Device

The device session. It owns the connection state, the print origin and the printing flag, and sequences the control
commands and motion streams of every high level operation:

    connect / open / close
    set_print_origin, reset_origin
    start_area_preview, stop_area_preview
    set_laser_power, set_engraving_depth
    print_shape, print_image

While a print runs, origin changes and area previews are refused. The printing flag is held by a context manager,
so it is released however the print ends: finished, aborted, stalled or failed.
"""

import time
from contextlib import contextmanager

from ..constants import (
    CMD_FAN,
    CMD_HOME,
    CMD_LASER_POWER,
    CMD_ENGRAVING_DEPTH,
    CMD_PRINT_ORDER,
    CMD_RESET_ORIGIN,
    CMD_START_PREVIEW,
    CMD_STOP_PREVIEW,
    DEVICE_HEIGHT,
    DEVICE_WIDTH,
    FAN_OFF,
    FAN_ON,
    ORDER_FAN,
    ORDER_NO_FAN,
    TOKEN_CONNECT,
)
from ..core.exceptions import BusyError, DeviceConnectionError, OutOfBoundsError
from ..core.motion import clamp
from ..core.planner import ShapePlanner
from ..kernel import Context
from ..tools.rasterplotter import RasterPlotter
from .builder import PacketBuilder
from .connection import SerialConnection, list_ports
from .controller import LaserController, PreviewController

SIMULATED_PORT = "simulating"


class LaserDevice:
    def __init__(self, context=None, simulate=False, connection_factory=None, port_lister=None):
        """
        @param context: Context holding settings and channels. A default one is created if None.
        @param simulate: route motion buffers to a PreviewController instead of a transport.
        @param connection_factory: callable(port, channel) returning a transport, SerialConnection by default.
        @param port_lister: callable returning candidate ports for "auto", serial ports by default.
        """
        if context is None:
            context = Context()
        self.context = context
        self.simulate = simulate
        self.connection_factory = connection_factory
        self.port_lister = port_lister if port_lister is not None else list_ports

        self.port = None
        self.connection = None
        self.connected = False
        self.printing = False
        self.origin_x = 0
        self.origin_y = 0
        self.laser_power = None
        self.engraving_depth = None
        self.fan = False

        context.setting(int, "baud_rate", 115200)
        context.setting(float, "handshake_delay", 3.0)
        context.setting(float, "home_delay", 3.0)
        context.setting(float, "preview_delay", 2.0)
        context.setting(float, "order_delay", 0.5)
        context.setting(float, "command_delay", 0.05)
        context.setting(bool, "raster_origin_offset", True)

        name = context.name
        self.channel = context.channel(name)
        self.usb_log = context.channel(f"{name}/usb", buffer_size=500)

        if simulate:
            self.controller = PreviewController(context)
        else:
            self.controller = LaserController(context)

    def __repr__(self):
        return f"LaserDevice(port={repr(self.port)}, simulate={self.simulate})"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def is_connected(self):
        return self.connected

    # ==========
    # CONNECTION
    # ==========

    def _create_connection(self, port):
        if self.connection_factory is not None:
            return self.connection_factory(port, self.usb_log)
        return SerialConnection(port, baud_rate=self.context.baud_rate, channel=self.usb_log)

    def open(self, port):
        """
        Open the port and perform the handshake: home the head and look for the connect token in the reply.

        @param port: port name
        @raise DeviceConnectionError: port unavailable or handshake failed.
        """
        if self.connection is not None or self.connected:
            self.close()
        if self.simulate:
            self.port = SIMULATED_PORT
            self.connected = True
            self.channel("Simulating, no connection made.")
            return
        connection = self._create_connection(port)
        try:
            connection.open()
        except ConnectionError as e:
            raise DeviceConnectionError(f"Could not open {port}: {e}") from e
        self.controller.connection = connection
        try:
            self.controller.command(CMD_HOME, delay=self.context.handshake_delay)
            response = self.controller.read()
        except DeviceConnectionError:
            response = ""
        if TOKEN_CONNECT not in response:
            connection.close()
            self.controller.connection = None
            raise DeviceConnectionError(f"No handshake from {port}.")
        self.connection = connection
        self.port = port
        self.connected = True
        self.channel(f"Connected to {port}.")

    def connect(self, port="auto"):
        """
        Connect to a port, or with "auto" to the first enumerated port completing the handshake.

        @return: whether the device is connected.
        """
        if port == "auto":
            return self.auto_connect()
        try:
            self.open(port)
        except DeviceConnectionError as e:
            self.usb_log(str(e))
            self.channel(f"Laser not found on {port}.")
        return self.connected

    def auto_connect(self):
        if self.simulate:
            self.open(SIMULATED_PORT)
            return self.connected
        for port in self.port_lister():
            if self.connect(port):
                return True
        self.channel("No laser found on any port.")
        return False

    def close(self):
        """
        Reset the origin and release the transport.
        """
        if self.connection is not None:
            if self.connected and not self.printing:
                try:
                    self.controller.command(CMD_RESET_ORIGIN)
                except DeviceConnectionError as e:
                    self.usb_log(str(e))
            self.connection.close()
            self.connection = None
            self.controller.connection = None
        if self.connected:
            self.channel("Disconnected.")
        self.connected = False
        self.port = None

    # ==========
    # ORIGIN AND PREVIEW
    # ==========

    def _idle_hardware(self):
        """
        Whether commands that only make sense on idle hardware may run now.
        """
        if not self.connected or self.simulate:
            return False
        if self.printing:
            self.channel("Busy printing, command ignored.")
            return False
        return True

    def set_print_origin(self, x, y):
        """
        Set the print origin, clamped into the device field.

        @return: False if refused because a print is running.
        """
        if self.printing:
            self.channel("Busy printing, origin unchanged.")
            return False
        self.origin_x = clamp(int(x), 0, DEVICE_WIDTH - 1)
        self.origin_y = clamp(int(y), 0, DEVICE_HEIGHT - 1)
        return True

    def reset_origin(self):
        if not self._idle_hardware():
            return
        self.controller.command(CMD_RESET_ORIGIN, delay=self.context.home_delay, read=True)

    def start_area_preview(self, width, height):
        if not self._idle_hardware():
            return
        self.controller.command(
            f"{CMD_START_PREVIEW} P{self.origin_x} {self.origin_y} {int(width)} {int(height)}",
            delay=self.context.preview_delay,
            read=True,
        )

    def stop_area_preview(self):
        if not self._idle_hardware():
            return
        self.controller.command(
            f"{CMD_STOP_PREVIEW} P{self.origin_x} {self.origin_y}",
            delay=self.context.preview_delay,
            read=True,
        )

    # ==========
    # LASER PARAMETERS
    # ==========

    def set_laser_power(self, power):
        """
        @param power: laser power between 0 and 1
        """
        self.laser_power = clamp(float(power), 0.0, 1.0)
        if self.simulate or not self.connected:
            return
        self.controller.command(f"{CMD_LASER_POWER} P{self.laser_power:.3f}")

    def set_engraving_depth(self, depth):
        """
        @param depth: engraving depth between 0 and 1
        """
        self.engraving_depth = clamp(float(depth), 0.0, 1.0)
        if self.simulate or not self.connected:
            return
        self.controller.command(f"{CMD_ENGRAVING_DEPTH} P{self.engraving_depth:.3f}")

    # ==========
    # PRINTING
    # ==========

    def _check_printable(self, width, height):
        if not self.connected:
            raise DeviceConnectionError("Laser is not connected.")
        if self.printing:
            raise BusyError("A print is already running.")
        if width + self.origin_x > DEVICE_WIDTH or height + self.origin_y > DEVICE_HEIGHT:
            raise OutOfBoundsError(
                f"{width}x{height} at ({self.origin_x}, {self.origin_y}) exceeds the "
                f"{DEVICE_WIDTH}x{DEVICE_HEIGHT} field."
            )

    @contextmanager
    def _print_job(self, fan):
        self.printing = True
        self.controller.reset()
        try:
            self.fan = bool(fan)
            if not self.simulate:
                self.controller.command(f"{CMD_FAN} P{FAN_ON if fan else FAN_OFF}")
                order = ORDER_FAN if fan else ORDER_NO_FAN
                self.controller.command(
                    f"{CMD_PRINT_ORDER} P{self.origin_x} {self.origin_y} {order}",
                    delay=self.context.order_delay,
                    read=True,
                )
            yield
        finally:
            self.printing = False

    def abort(self):
        """
        Cancel the running print. The print call raises PrintAbortedError.
        """
        self.controller.abort()

    def _stream(self, source, offset_x=0, offset_y=0):
        builder = PacketBuilder(
            self.controller.send_packet,
            offset_x=offset_x,
            offset_y=offset_y,
            channel=self.channel,
        )
        builder.extend(source)
        builder.close()
        return builder

    def print_shape(self, segments, width, height, fan=False):
        """
        Print vector segments. Segments are reordered, interpolated and streamed in raw coordinates, the device
        applies the print origin.

        @param segments: list of Segment, reordered in place.
        @param width: width of the shape
        @param height: height of the shape
        @param fan: run the fan during the print.
        @return: number of motion buffers sent.
        """
        self._check_printable(width, height)
        start = time.time()
        with self._print_job(fan):
            planner = ShapePlanner(segments, in_place=True)
            if self.simulate:
                self.controller.set_offset(self.origin_x, self.origin_y)
            builder = self._stream(planner)
            self.controller.finish(wait=True)
        self.channel(
            f"Shape printed: {builder.move_count} moves in {builder.packet_count} buffers, "
            f"{time.time() - start:.1f}s."
        )
        return builder.packet_count

    def print_image(self, bitmap, width, height, fan=False):
        """
        Print a bitmap of dwell values, scanned serpentine.

        @param bitmap: 2-D array of dwell values, or flat row-major sequence.
        @param width: bitmap width
        @param height: bitmap height
        @param fan: run the fan during the print.
        @return: number of motion buffers sent.
        """
        self._check_printable(width, height)
        start = time.time()
        with self._print_job(fan):
            if self.context.raster_origin_offset:
                offset_x, offset_y = self.origin_x, self.origin_y
            else:
                offset_x, offset_y = 0, 0
            plotter = RasterPlotter(bitmap, width, height, offset_x=offset_x, offset_y=offset_y)
            if self.simulate:
                self.controller.set_offset(self.origin_x - offset_x, self.origin_y - offset_y)
            builder = self._stream(plotter)
            self.controller.finish(wait=False)
        self.channel(
            f"Image printed: {builder.move_count} moves in {builder.packet_count} buffers, "
            f"{time.time() - start:.1f}s."
        )
        return builder.packet_count
