"""
Document boundary detection and A4 rectification for camera frames.
"""

from .buffers import (
    DetectionResult,
    InvalidInputError,
    PixelBuffer,
    Point,
    Quadrilateral,
    order_corners,
)
from .config import A4_ASPECT_RATIO, DEFAULT_CONFIG, ScannerConfig
from .detector import detect
from .filters import FILTER_NAMES, apply_filter, enhance
from .rectify import rectify
from .scanner import CapturedPage, DetectionLoop, DocumentScanner

__all__ = [
    "A4_ASPECT_RATIO",
    "DEFAULT_CONFIG",
    "FILTER_NAMES",
    "CapturedPage",
    "DetectionLoop",
    "DetectionResult",
    "DocumentScanner",
    "InvalidInputError",
    "PixelBuffer",
    "Point",
    "Quadrilateral",
    "ScannerConfig",
    "apply_filter",
    "detect",
    "enhance",
    "order_corners",
    "rectify",
]
