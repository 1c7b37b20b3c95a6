"""
The RasterPlotter maps pixel data to laser moves.

Rows are scanned serpentine (boustrophedon): even row indices run left to right, odd row indices run right to left,
so the head never travels back across the whole row between two scanlines. The parity of the row index decides the
direction, not the y coordinate, which only matters once an offset is applied.

Pixels with a dwell of 0 produce no move at all, the head coasts over them on its way to the next lit pixel.
"""

import numpy as np

from ..constants import DEVICE_HEIGHT, DEVICE_WIDTH
from ..core.motion import Move


class RasterPlotter:
    """
    Motion source for bitmaps. `data` is a 2-D array of dwell values (rows of pixels), or a flat row-major sequence
    of width * height values.
    """

    def __init__(self, data, width, height, offset_x=0, offset_y=0):
        if width > DEVICE_WIDTH or height > DEVICE_HEIGHT:
            raise ValueError(
                f"Bitmap {width}x{height} exceeds the {DEVICE_WIDTH}x{DEVICE_HEIGHT} device field."
            )
        data = np.asarray(data)
        if data.ndim == 1:
            data = data.reshape((height, width))
        if data.shape[0] < height or data.shape[1] < width:
            raise ValueError(f"Bitmap of shape {data.shape} is smaller than {width}x{height}.")
        self.data = data[:height, :width].astype(np.uint8)
        self.width = width
        self.height = height
        self.offset_x = offset_x
        self.offset_y = offset_y

    def __repr__(self):
        return f"RasterPlotter({self.width}, {self.height}, offset=({self.offset_x}, {self.offset_y}))"

    def px(self, x, y):
        if 0 <= y < self.height and 0 <= x < self.width:
            return int(self.data[y, x])
        return 0

    def burn_count(self):
        """
        Number of pixels which will be burned, also the number of moves plot() yields.
        """
        return int(np.count_nonzero(self.data))

    def row_order(self, y):
        """
        Column indices of the lit pixels in row y, in scan order.
        """
        columns = np.flatnonzero(self.data[y])
        if y % 2 == 1:
            columns = columns[::-1]
        return columns

    def plot(self):
        dx = self.offset_x
        dy = self.offset_y
        for y in range(self.height):
            row = self.data[y]
            for x in self.row_order(y):
                yield Move.clamped(int(x) + dx, y + dy, int(row[x]))

    def __iter__(self):
        return self.plot()
