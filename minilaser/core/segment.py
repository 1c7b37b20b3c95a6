from math import ceil, sqrt

from .motion import Move


class Segment:
    """
    One straight stroke from start to end, burned with a uniform dwell. A dwell of 0 marks a travel-only segment,
    which is never emitted.
    """

    __slots__ = ("start_x", "start_y", "end_x", "end_y", "dwell")

    def __init__(self, start_x, start_y, end_x, end_y, dwell=255):
        self.start_x = int(round(start_x))
        self.start_y = int(round(start_y))
        self.end_x = int(round(end_x))
        self.end_y = int(round(end_y))
        self.dwell = int(dwell)

    def __repr__(self):
        return f"Segment({self.start_x}, {self.start_y}, {self.end_x}, {self.end_y}, {self.dwell})"

    def __eq__(self, other):
        if not isinstance(other, Segment):
            return NotImplemented
        return (
            self.start_x == other.start_x
            and self.start_y == other.start_y
            and self.end_x == other.end_x
            and self.end_y == other.end_y
            and self.dwell == other.dwell
        )

    def __copy__(self):
        return Segment(self.start_x, self.start_y, self.end_x, self.end_y, self.dwell)

    @property
    def start(self):
        return self.start_x, self.start_y

    @property
    def end(self):
        return self.end_x, self.end_y

    def length(self):
        return sqrt((self.end_x - self.start_x) ** 2 + (self.end_y - self.start_y) ** 2)

    def reverse(self):
        self.start_x, self.end_x = self.end_x, self.start_x
        self.start_y, self.end_y = self.end_y, self.start_y

    def interpolation(self):
        return Interpolation(self)


class Interpolation:
    """
    The moves needed to burn a segment, one per unit of distance.

    The start is always first and the end always last, even if they coincide. For a distance d > 1 there are
    ceil(d) - 1 points in between, each computed directly from the endpoints so no float error accumulates.
    Iterating again restarts from the beginning.
    """

    def __init__(self, segment):
        self.segment = segment

    def __len__(self):
        distance = self.segment.length()
        if distance > 1:
            return int(ceil(distance)) + 1
        return 2

    def __iter__(self):
        s = self.segment
        x0, y0, x1, y1, dwell = s.start_x, s.start_y, s.end_x, s.end_y, s.dwell
        yield Move(x0, y0, dwell)
        distance = s.length()
        if distance > 1:
            for i in range(1, int(ceil(distance))):
                t = i / distance
                yield Move(
                    int(round(x0 + (x1 - x0) * t)),
                    int(round(y0 + (y1 - y0) * t)),
                    dwell,
                )
        yield Move(x1, y1, dwell)
