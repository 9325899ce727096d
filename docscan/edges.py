"""
Edge extraction: grayscale conversion, 3x3 Gaussian smoothing and a
thresholded Sobel gradient mask.
"""

import cv2
import numpy as np

from .buffers import PixelBuffer

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)

GAUSSIAN_KERNEL = np.array([[1, 2, 1], [2, 4, 2], [1, 2, 1]], dtype=np.float32) / 16.0


def to_byte(values):
    # Half-to-even rounding, then saturate
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def luminance(rgb):
    """Luma of an (..., 3+) uint8 array as float64, alpha ignored."""
    return rgb[..., :3].astype(np.float64) @ LUMA_WEIGHTS


def to_grayscale(frame):
    """RGBA frame -> single-channel luminance buffer."""
    frame.require_channels(4)
    gray = to_byte(luminance(frame.data))
    return PixelBuffer(frame.width, frame.height, 1, gray)


def gaussian_smooth(gray):
    """Smooth interior pixels with the 3x3 [1 2 1] kernel; the border ring keeps its input values."""
    gray.require_channels(1)
    src = gray.data[:, :, 0]
    result = src.copy()
    if gray.width < 3 or gray.height < 3:
        return PixelBuffer(gray.width, gray.height, 1, result)

    blurred = cv2.filter2D(src.astype(np.float32), -1, GAUSSIAN_KERNEL)
    result[1:-1, 1:-1] = to_byte(blurred[1:-1, 1:-1])
    return PixelBuffer(gray.width, gray.height, 1, result)


def gradient_magnitude(smoothed):
    """Sobel gradient magnitude as float32; zero on the border ring."""
    smoothed.require_channels(1)
    magnitude = np.zeros((smoothed.height, smoothed.width), dtype=np.float32)
    if smoothed.width < 3 or smoothed.height < 3:
        return magnitude

    src = smoothed.data[:, :, 0].astype(np.float32)
    gx = cv2.Sobel(src, cv2.CV_32F, 1, 0, ksize=3)
    gy = cv2.Sobel(src, cv2.CV_32F, 0, 1, ksize=3)
    magnitude[1:-1, 1:-1] = cv2.magnitude(gx, gy)[1:-1, 1:-1]
    return magnitude


def sobel_edges(smoothed, threshold=50.0):
    """Binary edge mask: 255 where the gradient magnitude exceeds threshold, else 0."""
    magnitude = gradient_magnitude(smoothed)
    edges = np.where(magnitude > threshold, 255, 0).astype(np.uint8)
    return PixelBuffer(smoothed.width, smoothed.height, 1, edges)


def edge_mask(frame, threshold=50.0):
    """Run stages 1-3 on an RGBA frame and return (gray, smoothed, edges)."""
    gray = to_grayscale(frame)
    smoothed = gaussian_smooth(gray)
    edges = sobel_edges(smoothed, threshold)
    return gray, smoothed, edges
