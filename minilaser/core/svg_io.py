"""
SVG loading.

Extracts the stroked geometry of an SVG document as cubic curves, using svgelements, and flattens them into
segments. Every shape is converted to cubic curves first: lines and closing lines become straight cubics,
quadratic curves are degree elevated and arcs are split into cubics. The dwell of a shape comes from its stroke
colour: dark opaque strokes burn longest, shapes without a stroke colour burn at full dwell.
"""

from xml.etree.ElementTree import ParseError

from svgelements import (
    SVG,
    Arc,
    Close,
    CubicBezier,
    Line,
    Move,
    QuadraticBezier,
    Shape,
    SVGText,
)

from ..tools.curveplotter import CurvePlotter
from .exceptions import BadFileError

DEFAULT_PPI = 505.0


def stroke_dwell(color):
    """
    Dwell for a stroke colour: 255 - round(((r + g + b) / (3 * 255)) * a).

    @param color: svgelements.Color, or None
    @return: dwell between 0 and 255
    """
    if color is None or color.value is None:
        return 255
    r, g, b, a = color.red, color.green, color.blue, color.alpha
    return 255 - int(round(((r + g + b) / (3.0 * 255.0)) * a))


def _cubic(start, c1, c2, end):
    return start.x, start.y, c1.x, c1.y, c2.x, c2.y, end.x, end.y


def _straight(start, end):
    dx = end.x - start.x
    dy = end.y - start.y
    return (
        start.x,
        start.y,
        start.x + dx / 3.0,
        start.y + dy / 3.0,
        start.x + 2.0 * dx / 3.0,
        start.y + 2.0 * dy / 3.0,
        end.x,
        end.y,
    )


def path_to_cubics(segments):
    """
    Cubic curves of path segments, as 8-tuples (start, control 1, control 2, end).
    """
    for segment in segments:
        if isinstance(segment, Move):
            continue
        if isinstance(segment, CubicBezier):
            yield _cubic(segment.start, segment.control1, segment.control2, segment.end)
        elif isinstance(segment, (Line, Close)):
            if segment.start is None or segment.end is None:
                continue
            yield _straight(segment.start, segment.end)
        elif isinstance(segment, QuadraticBezier):
            p0, p1, p2 = segment.start, segment.control, segment.end
            c1 = p0 + (p1 - p0) * (2.0 / 3.0)
            c2 = p2 + (p1 - p2) * (2.0 / 3.0)
            yield _cubic(p0, c1, c2, p2)
        elif isinstance(segment, Arc):
            for curve in segment.as_cubic_curves():
                yield _cubic(curve.start, curve.control1, curve.control2, curve.end)


def load_svg(source, ppi=DEFAULT_PPI):
    """
    Load the stroked shapes of an SVG file as segments.

    @param source: filename or file object
    @param ppi: pixels per inch, device units per inch of the document.
    @return: segments, width, height
    """
    try:
        svg = SVG.parse(source, reify=True, ppi=ppi, color="black")
    except (ParseError, OSError) as e:
        raise BadFileError(str(e)) from e
    segments = []
    for element in svg.elements():
        if not isinstance(element, Shape) or isinstance(element, SVGText):
            continue
        dwell = stroke_dwell(element.stroke)
        segments.extend(CurvePlotter.flatten_path(path_to_cubics(element.segments()), dwell=dwell))
    width = int(round(svg.width)) if svg.width else 0
    height = int(round(svg.height)) if svg.height else 0
    return segments, width, height
