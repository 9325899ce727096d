from __future__ import annotations

import unittest

import numpy as np

from docscan.buffers import PixelBuffer
from docscan.contours import convex_hull, fit_quadrilateral, seed_points, trace_contours


def mask_buffer(mask: np.ndarray) -> PixelBuffer:
    h, w = mask.shape
    return PixelBuffer(w, h, 1, np.where(mask, 255, 0).astype(np.uint8))


class TestContourTracing(unittest.TestCase):
    def test_seeds_skip_border_and_use_stride(self) -> None:
        seeds = list(seed_points(30, 25, stride=5, border=10))
        self.assertTrue(all(10 <= x < 20 and 10 <= y < 15 for x, y in seeds))
        self.assertEqual(seeds, [(10, 10), (15, 10)])

    def test_full_mask_is_visited_once(self) -> None:
        edges = mask_buffer(np.ones((30, 30), dtype=bool))
        contours = list(trace_contours(edges, stride=5, border=10, max_points=1000))

        self.assertEqual(len(contours), 1)
        self.assertEqual(len(contours[0]), 900)
        self.assertEqual(len(set(contours[0])), 900)

    def test_capped_contours_never_share_pixels(self) -> None:
        edges = mask_buffer(np.ones((40, 40), dtype=bool))
        contours = list(trace_contours(edges, stride=5, border=10, max_points=100))

        self.assertTrue(all(len(c) <= 100 for c in contours))
        points = [p for c in contours for p in c]
        self.assertEqual(len(points), len(set(points)))
        self.assertTrue(all(0 <= p.x < 40 and 0 <= p.y < 40 for p in points))

    def test_separate_components_are_separate_contours(self) -> None:
        mask = np.zeros((40, 40), dtype=bool)
        mask[10, 10:30] = True
        mask[25, 10:30] = True
        contours = list(trace_contours(mask_buffer(mask), stride=5, border=10))

        self.assertEqual(len(contours), 2)
        self.assertEqual(sorted(len(c) for c in contours), [20, 20])
        self.assertEqual({p.y for p in contours[0]}, {10})

    def test_empty_mask_has_no_contours(self) -> None:
        edges = mask_buffer(np.zeros((30, 30), dtype=bool))
        self.assertEqual(list(trace_contours(edges)), [])


class TestConvexHull(unittest.TestCase):
    def test_small_inputs_are_returned_unchanged(self) -> None:
        self.assertEqual(convex_hull([(1, 2), (3, 4)]), [(1, 2), (3, 4)])
        self.assertEqual(convex_hull([]), [])

    def test_grid_hull_is_its_corners(self) -> None:
        points = [(x, y) for y in range(11) for x in range(11)]
        hull = convex_hull(points)

        self.assertEqual(set(hull), {(0, 0), (10, 0), (10, 10), (0, 10)})
        # Pivot is the bottom-most, left-most point
        self.assertEqual(hull[0], (0, 10))

    def test_concavities_are_removed(self) -> None:
        points = [(0, 0), (10, 0), (5, 3), (10, 10), (0, 10), (2, 5)]
        hull = convex_hull(points)
        self.assertEqual(set(hull), {(0, 0), (10, 0), (10, 10), (0, 10)})


class TestQuadrilateralFit(unittest.TestCase):
    def test_four_or_fewer_points_pass_through(self) -> None:
        pts = [(0, 0), (5, 0), (5, 5)]
        self.assertEqual(fit_quadrilateral(pts), pts)

    def test_extreme_points_become_corners(self) -> None:
        hull = [(2, 40), (0, 20), (1, 1), (20, 0), (40, 2), (41, 20), (39, 39), (20, 41)]
        tl, tr, br, bl = fit_quadrilateral(hull)

        self.assertEqual(tl, (1, 1))
        self.assertEqual(tr, (40, 2))
        self.assertEqual(br, (39, 39))
        self.assertEqual(bl, (2, 40))


if __name__ == "__main__":
    unittest.main()
