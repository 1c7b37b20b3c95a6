"""
Bitmap preparation for raster prints.

Images are converted to dwell bitmaps: dark pixels burn long, white or transparent pixels are skipped.
"""

import numpy as np

from ..constants import DEVICE_HEIGHT, DEVICE_WIDTH
from ..core.exceptions import BadFileError


def image_to_bitmap(image, threshold=0):
    """
    Convert a PIL image to a dwell bitmap.

    Dwell is 255 minus the luminance, scaled by the alpha channel so transparent pixels never burn. Dwell values at
    or below `threshold` are dropped to 0.

    @param image: PIL.Image
    @param threshold: minimum dwell kept
    @return: numpy uint8 array of shape (height, width)
    """
    rgba = np.asarray(image.convert("RGBA"), dtype=np.float64)
    luminance = rgba[:, :, :3].mean(axis=2)
    alpha = rgba[:, :, 3] / 255.0
    dwell = np.rint((255.0 - luminance) * alpha).astype(np.uint8)
    if threshold:
        dwell[dwell <= threshold] = 0
    return dwell


def load_bitmap(filename, max_size=(DEVICE_WIDTH, DEVICE_HEIGHT), threshold=0):
    """
    Load an image file as a dwell bitmap, shrunk to fit in max_size if needed.

    @return: numpy uint8 array of shape (height, width)
    """
    from PIL import Image, UnidentifiedImageError

    try:
        image = Image.open(filename)
        image.load()
    except (OSError, UnidentifiedImageError) as e:
        raise BadFileError(str(e)) from e
    if image.width > max_size[0] or image.height > max_size[1]:
        image.thumbnail(max_size)
    return image_to_bitmap(image, threshold=threshold)


def vertical_lines(width=512, height=512, spacing=50, dwell=255):
    """
    Test pattern: full height vertical lines every `spacing` columns.
    """
    bitmap = np.zeros((height, width), dtype=np.uint8)
    bitmap[:, ::spacing] = dwell
    return bitmap
