"""
Polygon measurements and the accept/reject rules for candidate documents.
"""

import math


def polygon_area(points):
    """Shoelace area of a simple polygon given as (x, y) pairs."""
    points = list(points)
    if len(points) < 3:
        return 0.0

    area = 0.0
    for i, (x1, y1) in enumerate(points):
        x2, y2 = points[(i + 1) % len(points)]
        area += x1 * y2 - x2 * y1
    return abs(area) / 2.0


def corner_angle(p1, p2, p3):
    """Angle in degrees at p2 between p2->p1 and p2->p3; 0 for a zero-length edge."""
    v1 = (p1[0] - p2[0], p1[1] - p2[1])
    v2 = (p3[0] - p2[0], p3[1] - p2[1])
    mag1 = math.hypot(*v1)
    mag2 = math.hypot(*v2)
    if mag1 == 0 or mag2 == 0:
        return 0.0

    cos = (v1[0] * v2[0] + v1[1] * v2[1]) / (mag1 * mag2)
    return math.degrees(math.acos(max(-1.0, min(1.0, cos))))


def corner_angles(corners):
    """Interior angle at each vertex of a closed polygon, in vertex order."""
    corners = list(corners)
    n = len(corners)
    return [
        corner_angle(corners[i - 1], corners[i], corners[(i + 1) % n])
        for i in range(n)
    ]


def area_within_bounds(area, width, height, min_ratio=0.10, max_ratio=0.80):
    image_area = float(width * height)
    return min_ratio * image_area <= area <= max_ratio * image_area


def angles_within_tolerance(corners, tolerance=30.0):
    return all(abs(angle - 90.0) <= tolerance for angle in corner_angles(corners))


def is_valid_quadrilateral(corners, width, height, config):
    """Accept a 4-corner candidate when both its area and its corner angles look like a page."""
    corners = list(corners)
    if len(corners) != 4:
        return False

    area = polygon_area(corners)
    if area <= 0:
        return False
    if not area_within_bounds(
        area, width, height, config.min_area_ratio, config.max_area_ratio
    ):
        return False
    return angles_within_tolerance(corners, config.angle_tolerance)


def select_best(candidates):
    """Largest-area candidate; earlier candidates win ties. None when empty."""
    if not candidates:
        return None
    # sorted() is stable, so discovery order breaks ties
    ranked = sorted(candidates, key=lambda quad: quad.area(), reverse=True)
    return ranked[0]
