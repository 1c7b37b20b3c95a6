"""
Command line driver for the minilaser engraver.

Prints SVG shapes or bitmap images on a 1024x1024 serial laser engraver, or simulates the print into a preview image.
"""

import argparse
import sys
import time
from math import cos, pi, sin

APPLICATION_NAME = "minilaser"
APPLICATION_VERSION = "0.3.0"


def pair(value):
    rv = value.split("=")
    if len(rv) != 2:
        raise argparse.ArgumentTypeError(f"expected key=value, got '{value}'")
    return rv


parser = argparse.ArgumentParser(prog=APPLICATION_NAME)
parser.add_argument("-V", "--version", action="store_true", help="minilaser version")
parser.add_argument(
    "-v", "--verbose", action="store_true", help="display verbose debugging"
)
parser.add_argument(
    "-p", "--port", type=str, default="auto", help="serial port, or auto to probe every port"
)
parser.add_argument(
    "-S", "--simulate", action="store_true", help="render into a preview image, nothing is sent"
)
parser.add_argument(
    "-m", "--mock", action="store_true", help="talk to an emulated device instead of a serial port"
)
parser.add_argument(
    "-o", "--output", type=str, default=None, help="preview image file written after a simulated print"
)
parser.add_argument(
    "-O", "--origin", type=int, nargs=2, default=(0, 0), metavar=("X", "Y"), help="print origin"
)
parser.add_argument(
    "-P", "--power", type=float, default=1.0, help="laser power between 0 and 1"
)
parser.add_argument(
    "-D", "--depth", type=float, default=0.6, help="engraving depth between 0 and 1"
)
parser.add_argument("-f", "--fan", action="store_true", help="run the fan while printing")
parser.add_argument(
    "-w",
    "--preview",
    type=float,
    default=0.0,
    metavar="SECONDS",
    help="show the print area for this long before printing",
)
parser.add_argument(
    "-s",
    "--set",
    action="append",
    type=pair,
    metavar="key=value",
    help="override a device setting",
)
parser.add_argument(
    "-X",
    "--nuke-settings",
    action="store_true",
    default=False,
    help="Don't load config file at startup",
)
parser.add_argument(
    "command",
    nargs="?",
    choices=("ports", "svg", "image", "demo", "lines"),
    help="what to do",
)
parser.add_argument("input", nargs="?", type=str, help="input file for svg and image")


def square_in_circle(radius=100):
    """
    Demo shape: a square of dwell 127 inside a circle of dwell 255 drawn in 5 degree steps.

    @return: segments, width, height
    """
    from .core.segment import Segment

    p1 = int(radius * 0.3)
    p2 = int(radius * 1.7)
    shapes = [
        Segment(p1, p1, p2, p1, 127),
        Segment(p2, p1, p2, p2, 127),
        Segment(p2, p2, p1, p2, 127),
        Segment(p1, p2, p1, p1, 127),
    ]

    def circle(angle):
        return (
            int(radius + cos(angle * pi / 180.0) * radius),
            int(radius + sin(angle * pi / 180.0) * radius),
        )

    step = 360 // 64
    for a in range(0, 360, step):
        x1, y1 = circle(a)
        x2, y2 = circle(a + step)
        shapes.append(Segment(x1, y1, x2, y2, 255))
    return shapes, radius * 2, radius * 2


def _override(context, key, value):
    current = getattr(context, key, None)
    if current is None:
        parser.error(f"unknown setting: {key}")
    if isinstance(current, bool):
        value = value.lower() in ("1", "true", "yes", "on")
    else:
        value = type(current)(value)
    setattr(context, key, value)


def _create_device(args):
    from .device.device import LaserDevice
    from .kernel import Context

    context = Context(APPLICATION_NAME, ignore_settings=args.nuke_settings)
    channel = context.channel(APPLICATION_NAME)
    channel.watch(print)
    if args.verbose:
        for name in ("usb", "send", "recv", "events"):
            context.channel(f"{APPLICATION_NAME}/{name}", timestamp=True).watch(print)
    connection_factory = None
    if args.mock:
        from .device.emulator import MockConnection

        def connection_factory(port, usb_log):
            return MockConnection(port, channel=usb_log)

    device = LaserDevice(
        context,
        simulate=args.simulate,
        connection_factory=connection_factory,
        port_lister=(lambda: ["mock"]) if args.mock else None,
    )
    context.setting(float, "svg_ppi", 505.0)
    if args.set:
        for key, value in args.set:
            _override(context, key, value)
    return context, device


def _print(device, args, job, width, height):
    from .core.exceptions import OutOfBoundsError, ProtocolStallError

    channel = device.channel
    channel(f"Print origin at {args.origin[0]},{args.origin[1]}")
    device.set_print_origin(*args.origin)
    if args.preview:
        channel(f"Area preview for {args.preview} seconds")
        device.start_area_preview(width, height)
        time.sleep(args.preview)
        device.stop_area_preview()
    device.set_laser_power(args.power)
    device.set_engraving_depth(args.depth)
    try:
        job()
    except OutOfBoundsError as e:
        channel(f"The print is out of the printing area: {e}")
        return 2
    except ProtocolStallError as e:
        channel(f"The laser stopped answering: {e}")
        return 3
    if device.simulate and args.output:
        device.controller.save(args.output)
        channel(f"Preview saved to {args.output}")
    return 0


def run():
    argv = sys.argv[1:]
    args = parser.parse_args(argv)

    if args.version:
        print(f"{APPLICATION_NAME} {APPLICATION_VERSION}")
        return 0
    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "ports":
        from .device.connection import list_ports

        for port in list_ports():
            print(port)
        return 0

    from .core.exceptions import BadFileError

    context, device = _create_device(args)
    if not device.connect(args.port):
        print("Laser printer not found")
        return 1
    try:
        if args.command == "svg":
            from .core.svg_io import load_svg

            if args.input is None:
                parser.error("svg needs an input file")
            try:
                segments, width, height = load_svg(args.input, ppi=context.svg_ppi)
            except BadFileError as e:
                device.channel(f"Could not read {args.input}: {e}")
                return 1
            return _print(
                device, args, lambda: device.print_shape(segments, width, height, args.fan), width, height
            )
        if args.command == "image":
            from .image.imagetools import load_bitmap

            if args.input is None:
                parser.error("image needs an input file")
            try:
                bitmap = load_bitmap(args.input)
            except BadFileError as e:
                device.channel(f"Could not read {args.input}: {e}")
                return 1
            height, width = bitmap.shape
            return _print(
                device, args, lambda: device.print_image(bitmap, width, height, args.fan), width, height
            )
        if args.command == "demo":
            segments, width, height = square_in_circle()
            return _print(
                device, args, lambda: device.print_shape(segments, width, height, args.fan), width, height
            )
        if args.command == "lines":
            from .image.imagetools import vertical_lines

            bitmap = vertical_lines()
            height, width = bitmap.shape
            return _print(
                device, args, lambda: device.print_image(bitmap, width, height, args.fan), width, height
            )
    finally:
        device.close()
        if not args.nuke_settings:
            context.write_configuration()
    return 0


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
