"""
Pixel buffer and geometry types shared by every pipeline stage.

Stages never modify the buffer they are given; each one allocates a new
PixelBuffer for its output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

import cv2
import numpy as np

from .geometry import polygon_area


class InvalidInputError(ValueError):
    pass


@dataclass(slots=True)
class PixelBuffer:
    """
    Row-major uint8 image of shape (height, width, channels).

    channels is 4 for RGBA frames and pages, 1 for luminance and edge masks.
    """

    width: int
    height: int
    channels: int
    data: np.ndarray

    def __post_init__(self):
        if self.width < 0 or self.height < 0 or self.channels < 1:
            raise InvalidInputError(
                f"Invalid buffer dimensions: {self.width}x{self.height}x{self.channels}"
            )
        data = np.asarray(self.data, dtype=np.uint8)
        expected = self.width * self.height * self.channels
        if data.size != expected:
            raise InvalidInputError(
                f"Buffer holds {data.size} bytes, expected {expected} "
                f"({self.width}x{self.height}x{self.channels})"
            )
        self.data = data.reshape(self.height, self.width, self.channels)

    @classmethod
    def from_bytes(cls, data, width, height, channels=4):
        return cls(width, height, channels, np.frombuffer(bytes(data), dtype=np.uint8))

    @classmethod
    def blank(cls, width, height, channels=4):
        return cls(width, height, channels, np.zeros((height, width, channels), np.uint8))

    @classmethod
    def from_bgr(cls, image):
        """Wrap an OpenCV image (gray, BGR or BGRA) as an RGBA buffer."""
        if image is None or image.size == 0:
            raise InvalidInputError("Empty image")
        if image.ndim == 2:
            rgba = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
        elif image.shape[2] == 3:
            rgba = cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
        elif image.shape[2] == 4:
            rgba = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
        else:
            raise InvalidInputError(f"Unsupported channel count: {image.shape[2]}")
        return cls(rgba.shape[1], rgba.shape[0], 4, rgba)

    def to_bgr(self):
        """Return an OpenCV-ordered copy (BGR for RGBA buffers, plain 2-D for masks)."""
        if self.channels == 1:
            return self.data[:, :, 0].copy()
        return cv2.cvtColor(self.data, cv2.COLOR_RGBA2BGR)

    def require_channels(self, channels):
        if self.channels != channels:
            raise InvalidInputError(
                f"Expected a {channels}-channel buffer, got {self.channels} channels"
            )

    def copy(self):
        return PixelBuffer(self.width, self.height, self.channels, self.data.copy())


class Point(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Quadrilateral:
    """
    Four corners in source-image pixel coordinates.

    The stored order is whatever produced the quad (hull order, caller order).
    Use `ordered()` to get top-left, top-right, bottom-right, bottom-left.
    """

    corners: tuple[Point, Point, Point, Point]

    def __post_init__(self):
        if len(self.corners) != 4:
            raise InvalidInputError(
                f"A quadrilateral needs exactly 4 corners, got {len(self.corners)}"
            )
        object.__setattr__(self, "corners", tuple(Point(*p) for p in self.corners))

    @classmethod
    def from_points(cls, points):
        return cls(tuple(points))

    def ordered(self):
        """Corners ordered as top-left, top-right, bottom-right, bottom-left."""
        return Quadrilateral(order_corners(self.corners))

    def as_array(self):
        return np.array(self.corners, dtype=np.float32)

    def area(self):
        return polygon_area(self.corners)


def order_corners(pts):
    """Order points in clockwise: top-left, top-right, bottom-right, bottom-left"""
    pts = np.asarray(pts, dtype=np.float64).reshape(-1, 2)
    point_sum = pts.sum(axis=1)
    diff = pts[:, 0] - pts[:, 1]
    return (
        Point(*pts[np.argmin(point_sum)].tolist()),  # top-left
        Point(*pts[np.argmax(diff)].tolist()),  # top-right
        Point(*pts[np.argmax(point_sum)].tolist()),  # bottom-right
        Point(*pts[np.argmin(diff)].tolist()),  # bottom-left
    )


@dataclass(frozen=True, slots=True)
class DetectionResult:
    quadrilateral: Quadrilateral | None
    frame_width: int
    frame_height: int

    @property
    def found(self):
        return self.quadrilateral is not None
