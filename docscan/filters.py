"""
Tone enhancement and the page filters offered at capture time.
"""

import numpy as np

from .buffers import PixelBuffer
from .edges import luminance, to_byte

FILTER_NAMES = ("original", "grayscale", "blackwhite", "enhance")

BLACK_WHITE_THRESHOLD = 128


def _with_rgb(image, rgb):
    """New RGBA buffer with `rgb` in the colour channels and the source alpha kept."""
    data = image.data.copy()
    data[:, :, :3] = rgb
    return PixelBuffer(image.width, image.height, 4, data)


def enhance(image, contrast=1.3, brightness=15.0):
    """
    Stretch each colour channel around mid-grey and lift it:
    out = clamp((in - 128) * contrast + 128 + brightness). Alpha becomes 255.
    """
    image.require_channels(4)
    rgb = image.data[:, :, :3].astype(np.float64)
    data = np.empty_like(image.data)
    data[:, :, :3] = to_byte((rgb - 128.0) * contrast + 128.0 + brightness)
    data[:, :, 3] = 255
    return PixelBuffer(image.width, image.height, 4, data)


def grayscale_filter(image):
    gray = to_byte(luminance(image.data))
    return _with_rgb(image, gray[:, :, np.newaxis])


def black_white_filter(image, threshold=BLACK_WHITE_THRESHOLD):
    bw = np.where(luminance(image.data) > threshold, 255, 0).astype(np.uint8)
    return _with_rgb(image, bw[:, :, np.newaxis])


def enhance_filter(image, contrast=1.5, brightness=10.0):
    """Grayscale first, then contrast/brightness on the luma."""
    enhanced = to_byte((luminance(image.data) - 128.0) * contrast + 128.0 + brightness)
    return _with_rgb(image, enhanced[:, :, np.newaxis])


def apply_filter(image, name="original"):
    """Apply one of FILTER_NAMES to an RGBA page."""
    image.require_channels(4)
    if name == "original":
        return image.copy()
    if name == "grayscale":
        return grayscale_filter(image)
    if name == "blackwhite":
        return black_white_filter(image)
    if name == "enhance":
        return enhance_filter(image)
    raise ValueError(f"Unknown filter {name!r}, expected one of {FILTER_NAMES}")
