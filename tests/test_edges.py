from __future__ import annotations

import unittest

import numpy as np

from docscan.buffers import InvalidInputError, PixelBuffer
from docscan.edges import edge_mask, gaussian_smooth, sobel_edges, to_grayscale


def solid_frame(width: int, height: int, rgb: tuple[int, int, int]) -> PixelBuffer:
    data = np.zeros((height, width, 4), dtype=np.uint8)
    data[:, :, :3] = rgb
    data[:, :, 3] = 255
    return PixelBuffer(width, height, 4, data)


class TestPixelBuffer(unittest.TestCase):
    def test_length_mismatch_is_rejected(self) -> None:
        with self.assertRaises(InvalidInputError):
            PixelBuffer.from_bytes(bytes(10), width=2, height=2, channels=4)

    def test_flat_bytes_are_reshaped(self) -> None:
        buf = PixelBuffer.from_bytes(bytes(range(16)), width=2, height=2, channels=4)
        self.assertEqual(buf.data.shape, (2, 2, 4))
        self.assertEqual(buf.data[1, 0].tolist(), [8, 9, 10, 11])

    def test_wrong_channel_count_is_rejected_by_stages(self) -> None:
        gray = PixelBuffer.blank(4, 4, channels=1)
        with self.assertRaises(InvalidInputError):
            to_grayscale(gray)


class TestGrayscale(unittest.TestCase):
    def test_constant_frame_gives_constant_luma(self) -> None:
        frame = solid_frame(12, 9, (200, 100, 40))
        gray = to_grayscale(frame)

        expected = round(0.299 * 200 + 0.587 * 100 + 0.114 * 40)
        self.assertEqual(gray.channels, 1)
        self.assertEqual((gray.width, gray.height), (12, 9))
        self.assertTrue(np.all(gray.data == expected))

    def test_alpha_is_ignored(self) -> None:
        frame = solid_frame(3, 3, (10, 20, 30))
        frame.data[:, :, 3] = 0
        opaque = solid_frame(3, 3, (10, 20, 30))
        np.testing.assert_array_equal(to_grayscale(frame).data, to_grayscale(opaque).data)

    def test_input_is_not_mutated(self) -> None:
        frame = solid_frame(5, 5, (1, 2, 3))
        before = frame.data.copy()
        edge_mask(frame)
        np.testing.assert_array_equal(frame.data, before)


class TestSmoothingAndEdges(unittest.TestCase):
    def test_smoothing_keeps_constant_image_and_border(self) -> None:
        data = np.full((6, 7, 1), 90, dtype=np.uint8)
        data[0, 0, 0] = 7
        smoothed = gaussian_smooth(PixelBuffer(7, 6, 1, data))

        self.assertEqual(int(smoothed.data[0, 0, 0]), 7)
        self.assertTrue(np.all(smoothed.data[2:-1, 2:-1] == 90))

    def test_smoothing_weights_centre_pixel(self) -> None:
        data = np.zeros((3, 3, 1), dtype=np.uint8)
        data[1, 1, 0] = 160
        smoothed = gaussian_smooth(PixelBuffer(3, 3, 1, data))
        self.assertEqual(int(smoothed.data[1, 1, 0]), 40)

    def test_tiny_buffers_pass_through(self) -> None:
        data = np.array([[[5], [6]]], dtype=np.uint8)
        smoothed = gaussian_smooth(PixelBuffer(2, 1, 1, data))
        np.testing.assert_array_equal(smoothed.data, data)
        self.assertFalse(sobel_edges(smoothed).data.any())

    def test_constant_frame_has_no_edges(self) -> None:
        _, _, edges = edge_mask(solid_frame(20, 15, (120, 130, 140)))
        self.assertFalse(edges.data.any())

    def test_vertical_step_gives_edge_band(self) -> None:
        data = np.zeros((20, 20, 1), dtype=np.uint8)
        data[:, 10:, 0] = 255
        gray = PixelBuffer(20, 20, 1, data)
        edges = sobel_edges(gaussian_smooth(gray), threshold=50)

        row = edges.data[10, :, 0]
        self.assertEqual(set(np.unique(row).tolist()), {0, 255})
        self.assertTrue(np.all(row[8:12] == 255))
        self.assertEqual(int(row[5]), 0)
        self.assertEqual(int(row[15]), 0)
        # Border ring is never marked
        self.assertFalse(edges.data[0].any())
        self.assertFalse(edges.data[-1].any())

    def test_threshold_is_strict(self) -> None:
        # Sobel response of a smoothed 0 -> 10 step peaks at 32
        data = np.zeros((10, 10, 1), dtype=np.uint8)
        data[:, 5:, 0] = 10
        gray = PixelBuffer(10, 10, 1, data)
        self.assertFalse(sobel_edges(gray, threshold=80).data.any())
        self.assertTrue(sobel_edges(gray, threshold=20).data.any())


if __name__ == "__main__":
    unittest.main()
