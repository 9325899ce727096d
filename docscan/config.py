from __future__ import annotations

from dataclasses import dataclass

A4_ASPECT_RATIO = 210 / 297  # width / height, portrait

WARP_METHODS = ("bilinear", "homography")


@dataclass(frozen=True, slots=True)
class ScannerConfig:
    """
    Detection and rectification parameters.

    Defaults reproduce the fixed constants of the camera scanner; every field
    can be tuned without touching the pipeline code.
    """

    # Edge detection
    edge_threshold: float = 50.0  # Sobel magnitude must exceed this

    # Contour tracing
    seed_stride: int = 5
    seed_border: int = 10
    max_contour_points: int = 1000
    min_contour_points: int = 50  # contour length must exceed this

    # Validation (fractions of the frame area, degrees)
    min_area_ratio: float = 0.10
    max_area_ratio: float = 0.80
    angle_tolerance: float = 30.0

    # Rectification
    target_width: int = 800
    aspect_ratio: float = A4_ASPECT_RATIO
    fallback_margin: float = 0.10
    warp_method: str = "bilinear"

    # Tone enhancement
    contrast: float = 1.3
    brightness: float = 15.0

    debug: bool = False

    @property
    def target_height(self):
        return int(self.target_width / self.aspect_ratio)

    def validate(self) -> None:
        if self.edge_threshold < 0:
            raise ValueError("edge_threshold must be >= 0")
        if self.seed_stride < 1:
            raise ValueError("seed_stride must be >= 1")
        if self.seed_border < 0:
            raise ValueError("seed_border must be >= 0")
        if self.max_contour_points < 1:
            raise ValueError("max_contour_points must be >= 1")
        if self.min_contour_points < 0:
            raise ValueError("min_contour_points must be >= 0")
        if not (0.0 <= self.min_area_ratio <= self.max_area_ratio <= 1.0):
            raise ValueError("area ratios must satisfy 0 <= min <= max <= 1")
        if not (0.0 <= self.angle_tolerance <= 90.0):
            raise ValueError("angle_tolerance must be within [0, 90]")
        if self.target_width < 1:
            raise ValueError("target_width must be >= 1")
        if self.aspect_ratio <= 0:
            raise ValueError("aspect_ratio must be > 0")
        if self.target_height < 1:
            raise ValueError("aspect_ratio leaves no output rows for target_width")
        if not (0.0 <= self.fallback_margin < 0.5):
            raise ValueError("fallback_margin must be within [0, 0.5)")
        if self.warp_method not in WARP_METHODS:
            raise ValueError(f"warp_method must be one of {WARP_METHODS}")
        if self.contrast < 0:
            raise ValueError("contrast must be >= 0")


DEFAULT_CONFIG = ScannerConfig()
