from math import sqrt

from ..core.segment import Segment


class CurvePlotter:
    """
    Flattens cubic Bezier curves into line segments at device resolution.

    The curve is sampled at evenly spaced t values with De Casteljau's construction. A new segment is emitted only
    when the sample has moved at least one device unit on either axis since the last emitted point, so nearly
    straight stretches produce few segments and tight bends produce many. Curves whose chord is at most three units
    long are indistinguishable from a line on the device and are emitted as one.
    """

    @staticmethod
    def lerp(a, b, t):
        return a + (b - a) * t

    @staticmethod
    def point(t, x0, y0, x1, y1, x2, y2, x3, y3):
        lerp = CurvePlotter.lerp
        # level 1
        xa = lerp(x0, x1, t)
        ya = lerp(y0, y1, t)
        xb = lerp(x1, x2, t)
        yb = lerp(y1, y2, t)
        xc = lerp(x2, x3, t)
        yc = lerp(y2, y3, t)
        # level 2
        xm = lerp(xa, xb, t)
        ym = lerp(ya, yb, t)
        xn = lerp(xb, xc, t)
        yn = lerp(yb, yc, t)
        # level 3
        return lerp(xm, xn, t), lerp(ym, yn, t)

    @staticmethod
    def flatten_cubic(
        x0, y0, x1, y1, x2, y2, x3, y3, dwell=255, steps=100, threshold=1.0, short_chord=3.0
    ):
        """
        Flatten one cubic Bezier curve.

        @param x0, y0: start point
        @param x1, y1: first control point
        @param x2, y2: second control point
        @param x3, y3: end point
        @param dwell: dwell given to every segment
        @param steps: number of parametric steps between t=0 and t=1
        @param threshold: minimum movement on either axis before a segment is emitted
        @param short_chord: curves with a chord at most this long become a single segment
        @return: list of Segment
        """
        if sqrt((x3 - x0) ** 2 + (y3 - y0) ** 2) <= short_chord:
            return [Segment(x0, y0, x3, y3, dwell)]
        segments = []
        last_x = x0
        last_y = y0
        for i in range(steps + 1):
            x, y = CurvePlotter.point(i / steps, x0, y0, x1, y1, x2, y2, x3, y3)
            if abs(x - last_x) >= threshold or abs(y - last_y) >= threshold:
                segments.append(Segment(last_x, last_y, x, y, dwell))
                last_x = x
                last_y = y
        segments.append(Segment(last_x, last_y, x3, y3, dwell))
        return segments

    @staticmethod
    def flatten_path(curves, dwell=255, **kwargs):
        """
        Flatten a sequence of cubic curves, each given as 8 numbers (start, control 1, control 2, end).

        @param curves: iterable of 8-tuples
        @param dwell: dwell of the whole path
        @return: list of Segment
        """
        segments = []
        for curve in curves:
            segments.extend(CurvePlotter.flatten_cubic(*curve, dwell=dwell, **kwargs))
        return segments
