"""
Document boundary detection for a single camera frame.

Runs grayscale -> smoothing -> Sobel edges -> contour tracing -> convex hull
-> quadrilateral fit -> validation, and keeps the largest surviving
quadrilateral.
"""

from .buffers import Quadrilateral
from .config import DEFAULT_CONFIG
from .contours import convex_hull, fit_quadrilateral, trace_contours
from .edges import edge_mask
from .geometry import is_valid_quadrilateral, polygon_area, select_best


def quadrilateral_from_contour(contour, config=DEFAULT_CONFIG):
    """Fit four corners to a traced contour, or None if it is too short or degenerate."""
    if len(contour) <= config.min_contour_points:
        return None

    hull = convex_hull(contour)
    if len(hull) < 4:
        return None

    corners = fit_quadrilateral(hull)
    if len(corners) != 4:
        return None
    return Quadrilateral.from_points(corners)


def find_candidates(edges, config=DEFAULT_CONFIG):
    """All validated quadrilaterals in an edge buffer, in discovery order."""
    candidates = []
    for i, contour in enumerate(
        trace_contours(
            edges,
            stride=config.seed_stride,
            border=config.seed_border,
            max_points=config.max_contour_points,
        )
    ):
        quad = quadrilateral_from_contour(contour, config)
        if quad is None:
            continue

        valid = is_valid_quadrilateral(quad.corners, edges.width, edges.height, config)
        if config.debug:
            print(
                f"  Contour {i}: points={len(contour)}, "
                f"area={polygon_area(quad.corners):.0f}, valid={valid}"
            )
        if valid:
            candidates.append(quad)
    return candidates


def detect(frame, config=None):
    """
    Find the document outline in an RGBA frame.

    Returns a Quadrilateral or None when nothing page-like is visible. The
    frame is only read.
    """
    config = config or DEFAULT_CONFIG
    config.validate()
    frame.require_channels(4)

    _, _, edges = edge_mask(frame, config.edge_threshold)
    candidates = find_candidates(edges, config)
    best = select_best(candidates)

    if config.debug:
        print(f"Debug: {len(candidates)} candidate quadrilateral(s) accepted")
        if best is not None:
            print(f"Debug: selected corners {[tuple(p) for p in best.corners]}")
    return best
