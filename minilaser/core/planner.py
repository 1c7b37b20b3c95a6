"""
Shape planning.

Shapes arrive as lists of segments in drawing order. Before they are interpolated into moves the segments are
reordered so that consecutive strokes keep heading the same vertical direction, which saves the head a return trip
between neighbouring strokes. This is a run-reversal heuristic, not a travel optimizer.
"""

from copy import copy

from .motion import Move


def _ascending(segment):
    return segment.start_y <= segment.end_y


def reorder_segments(segments):
    """
    Reverse every maximal run of segments with start_y <= end_y: each segment in the run is reversed and the run
    itself is put in reverse order. Segments with start_y > end_y are left where they are.

    Works in place in a single pass and returns the list.

    @param segments: mutable list of Segment
    @return: segments
    """
    n = len(segments)
    i = 0
    while i < n:
        if not _ascending(segments[i]):
            i += 1
            continue
        j = i
        while j < n and _ascending(segments[j]):
            j += 1
        for k in range(i, j):
            segments[k].reverse()
        if j - i > 1:
            segments[i:j] = segments[i:j][::-1]
        i = j
    return segments


class ShapePlanner:
    """
    Motion source for vector shapes. Iterating yields the moves of every drawn segment, in reordered order.

    Travel segments (dwell 0) are skipped. When a segment ends exactly where the next drawn segment starts, the
    shared point is sent only once.
    """

    def __init__(self, segments, reorder=True, in_place=False):
        if in_place:
            self.segments = segments
        else:
            self.segments = [copy(s) for s in segments]
        if reorder:
            reorder_segments(self.segments)

    def __repr__(self):
        return f"ShapePlanner({len(self.segments)} segments)"

    def __iter__(self):
        segments = self.segments
        count = len(segments)
        for i, segment in enumerate(segments):
            if segment.dwell == 0:
                continue
            joined = False
            if i + 1 < count:
                following = segments[i + 1]
                joined = following.dwell != 0 and following.start == segment.end
            points = segment.interpolation()
            last = len(points) - 1
            for index, move in enumerate(points):
                if joined and index == last:
                    continue
                yield Move.clamped(*move)
