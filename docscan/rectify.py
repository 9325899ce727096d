"""
Perspective correction of a detected page into a fixed-size A4 image.
"""

import cv2
import numpy as np

from .buffers import PixelBuffer, order_corners
from .config import A4_ASPECT_RATIO, WARP_METHODS
from .geometry import polygon_area


def output_size(target_width, aspect_ratio):
    """(width, height) of the rectified page."""
    return int(target_width), int(target_width / aspect_ratio)


def bilinear_warp(image, corners, dest_width, dest_height):
    """
    Map every destination pixel back into `image` by blending the four
    ordered corners with (u, v) weights, sampling the nearest source pixel.

    Destination pixels that land outside the source stay transparent black.
    """
    (tl, tr, br, bl) = corners
    src = image.data
    out = np.zeros((dest_height, dest_width, 4), dtype=np.uint8)

    u = (np.arange(dest_width, dtype=np.float64) / dest_width)[np.newaxis, :]
    v = (np.arange(dest_height, dtype=np.float64) / dest_height)[:, np.newaxis]
    w_tl = (1 - u) * (1 - v)
    w_tr = u * (1 - v)
    w_br = u * v
    w_bl = (1 - u) * v

    src_x = tl[0] * w_tl + tr[0] * w_tr + br[0] * w_br + bl[0] * w_bl
    src_y = tl[1] * w_tl + tr[1] * w_tr + br[1] * w_br + bl[1] * w_bl
    # Round half up to the nearest source pixel
    xs = np.floor(src_x + 0.5).astype(np.int64)
    ys = np.floor(src_y + 0.5).astype(np.int64)

    inside = (xs >= 0) & (xs < image.width) & (ys >= 0) & (ys < image.height)
    out[inside, :3] = src[ys[inside], xs[inside], :3]
    out[inside, 3] = 255
    return out


def four_point_transform(image, corners, dest_width, dest_height):
    """Apply a true projective transform from the ordered corners onto the output page"""
    rect = np.array(corners, dtype="float32")

    # Destination points for the transform
    dst = np.array(
        [
            [0, 0],
            [dest_width - 1, 0],
            [dest_width - 1, dest_height - 1],
            [0, dest_height - 1],
        ],
        dtype="float32",
    )

    transform_matrix = cv2.getPerspectiveTransform(rect, dst)
    return cv2.warpPerspective(
        image.data,
        transform_matrix,
        (dest_width, dest_height),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(0, 0, 0, 0),
    )


def center_crop_box(width, height, aspect_ratio, margin=0.1):
    """
    Centered crop at `aspect_ratio` leaving at least `margin` of the frame on
    each side. Returns (x, y, crop_width, crop_height) as floats.
    """
    crop_width = width * (1 - 2 * margin)
    crop_height = min(crop_width / aspect_ratio, height * (1 - 2 * margin))
    final_width = crop_height * aspect_ratio

    start_x = (width - final_width) / 2
    start_y = (height - crop_height) / 2
    return start_x, start_y, final_width, crop_height


def center_crop(image, dest_width, dest_height, aspect_ratio, margin=0.1):
    """Fallback page: scale the centered crop of the frame to the output size."""
    if image.width == 0 or image.height == 0:
        return np.zeros((dest_height, dest_width, 4), dtype=np.uint8)

    start_x, start_y, crop_width, crop_height = center_crop_box(
        image.width, image.height, aspect_ratio, margin
    )
    x0 = min(max(int(round(start_x)), 0), image.width - 1)
    y0 = min(max(int(round(start_y)), 0), image.height - 1)
    x1 = min(max(int(round(start_x + crop_width)), x0 + 1), image.width)
    y1 = min(max(int(round(start_y + crop_height)), y0 + 1), image.height)

    crop = image.data[y0:y1, x0:x1]
    return cv2.resize(crop, (dest_width, dest_height), interpolation=cv2.INTER_LINEAR)


def rectify(
    frame,
    quad=None,
    target_width=800,
    aspect_ratio=A4_ASPECT_RATIO,
    method="bilinear",
    margin=0.1,
):
    """
    Produce an upright page of target_width x int(target_width / aspect_ratio).

    With a quadrilateral the page is warped out of the frame; without one a
    centered crop is used instead, so capture always yields a page.
    """
    frame.require_channels(4)
    if method not in WARP_METHODS:
        raise ValueError(f"Unknown warp method {method!r}, expected one of {WARP_METHODS}")
    dest_width, dest_height = output_size(target_width, aspect_ratio)
    if dest_width < 1 or dest_height < 1:
        raise ValueError(f"Output size {dest_width}x{dest_height} is empty")

    if quad is None:
        data = center_crop(frame, dest_width, dest_height, aspect_ratio, margin)
    else:
        corners = order_corners(quad.corners)
        data = None
        if method == "homography" and polygon_area(corners) > 0:
            try:
                data = four_point_transform(frame, corners, dest_width, dest_height)
            except cv2.error:
                data = None
        if data is None:
            data = bilinear_warp(frame, corners, dest_width, dest_height)

    return PixelBuffer(dest_width, dest_height, 4, data)
