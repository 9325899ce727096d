"""
Contour tracing over a binary edge mask, convex hull and quadrilateral fitting.
"""

import math

from .buffers import Point

NEIGHBOURS = [(dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dx, dy) != (0, 0)]


def seed_points(width, height, stride=5, border=10):
    """Coarse grid of seed pixels, skipping `border` pixels on every side."""
    for y in range(border, height - border, stride):
        for x in range(border, width - border, stride):
            yield x, y


def flood_fill(mask, width, height, start_x, start_y, visited, max_points=1000):
    """
    Collect the 8-connected "on" pixels reachable from (start_x, start_y).

    `mask` and `visited` are flat row-major byte sequences; visited pixels are
    marked in place so a pixel is never collected twice within one pass.
    Uses an explicit stack and stops once `max_points` pixels are collected.
    """
    contour = []
    stack = [(start_x, start_y)]

    while stack and len(contour) < max_points:
        x, y = stack.pop()
        if x < 0 or x >= width or y < 0 or y >= height:
            continue
        index = y * width + x
        if visited[index] or not mask[index]:
            continue

        visited[index] = 1
        contour.append(Point(x, y))

        for dx, dy in NEIGHBOURS:
            stack.append((x + dx, y + dy))

    return contour


def trace_contours(edges, stride=5, border=10, max_points=1000):
    """Yield contours (lists of Points) of an edge buffer, in seed order."""
    edges.require_channels(1)
    width, height = edges.width, edges.height
    mask = edges.data.tobytes()
    visited = bytearray(width * height)

    for x, y in seed_points(width, height, stride, border):
        index = y * width + x
        if mask[index] and not visited[index]:
            yield flood_fill(mask, width, height, x, y, visited, max_points)


def cross(o, a, b):
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def convex_hull(points):
    """
    Graham scan around the bottom-most point (largest y, then smallest x).

    Fewer than 3 points are returned unchanged.
    """
    points = list(points)
    if len(points) < 3:
        return points

    pivot_index = min(range(len(points)), key=lambda i: (-points[i][1], points[i][0]))
    pivot = points[pivot_index]
    px, py = pivot[0], pivot[1]

    def polar_key(p):
        dx, dy = p[0] - px, p[1] - py
        return math.atan2(dy, dx), dx * dx + dy * dy

    rest = sorted(
        (p for i, p in enumerate(points) if i != pivot_index),
        key=polar_key,
    )

    hull = [pivot]
    for point in rest:
        while len(hull) > 1 and cross(hull[-2], hull[-1], point) <= 0:
            hull.pop()
        hull.append(point)
    return hull


def fit_quadrilateral(hull):
    """
    Reduce a convex hull to [top-left, top-right, bottom-right, bottom-left]
    using the extrema of x+y and x-y. Hulls of 4 points or fewer pass through.
    """
    hull = list(hull)
    if len(hull) <= 4:
        return hull

    top_left = min(hull, key=lambda p: p[0] + p[1])
    top_right = max(hull, key=lambda p: p[0] - p[1])
    bottom_right = max(hull, key=lambda p: p[0] + p[1])
    bottom_left = min(hull, key=lambda p: p[0] - p[1])
    return [top_left, top_right, bottom_right, bottom_left]
