"""
Command-line document scanner.

Detects the page outline in a photo, rectifies it to an A4 page, enhances it
and saves the result into a timestamped output folder.
"""

import argparse
import os
import sys
from datetime import datetime

import cv2
import numpy as np

from .buffers import InvalidInputError, PixelBuffer
from .config import WARP_METHODS, ScannerConfig
from .detector import find_candidates
from .edges import edge_mask
from .filters import FILTER_NAMES, apply_filter, enhance
from .geometry import select_best
from .rectify import rectify


def create_output_directory(output_path=None):
    """Create timestamped output directory"""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    if output_path:
        output_dir = os.path.abspath(output_path)

        # If the path doesn't end with a timestamped folder, add one
        if not os.path.basename(output_dir).startswith("scanned_output_"):
            output_dir = os.path.join(output_dir, f"scanned_output_{timestamp}")
    else:
        # Default: create timestamped folder in current directory
        output_dir = f"scanned_output_{timestamp}"

    os.makedirs(output_dir, exist_ok=True)
    return output_dir


def draw_outline(image, quad):
    """Copy of a BGR image with the detected corners outlined in green."""
    overlay = image.copy()
    if quad is not None:
        pts = np.round(quad.ordered().as_array()).astype(np.int32).reshape(-1, 1, 2)
        cv2.polylines(overlay, [pts], True, (0, 255, 0), 2)
    return overlay


def save_debug_images(debug_dir, image, gray, smoothed, edges, quad, rectified):
    """Save intermediate processing images"""
    os.makedirs(debug_dir, exist_ok=True)
    cv2.imwrite(f"{debug_dir}/debug_01_gray.png", gray.to_bgr())
    cv2.imwrite(f"{debug_dir}/debug_02_smoothed.png", smoothed.to_bgr())
    cv2.imwrite(f"{debug_dir}/debug_03_edges.png", edges.to_bgr())
    cv2.imwrite(f"{debug_dir}/debug_04_detected_contour.jpg", draw_outline(image, quad))
    cv2.imwrite(f"{debug_dir}/debug_05_rectified.png", rectified.to_bgr())


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Document scanner that detects a page in a photo and straightens it to A4",
        epilog="Example: docscan input_image.jpg --output ./scans/ --filter enhance",
    )
    parser.add_argument("input_file", help="Path to the input image file to scan")
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Output directory path (default: creates timestamped folder in current directory)",
    )
    parser.add_argument(
        "--filter",
        choices=FILTER_NAMES,
        default="original",
        help="Filter applied to the rectified page (default: original)",
    )
    parser.add_argument(
        "--contrast",
        type=float,
        default=1.3,
        help="Contrast factor of the tone enhancement (default: 1.3)",
    )
    parser.add_argument(
        "--brightness",
        type=float,
        default=15.0,
        help="Brightness offset of the tone enhancement (default: 15)",
    )
    parser.add_argument(
        "--edge-threshold",
        type=float,
        default=50.0,
        help="Sobel magnitude above which a pixel counts as an edge (default: 50)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=800,
        help="Width of the output page in pixels (default: 800)",
    )
    parser.add_argument(
        "--warp",
        choices=WARP_METHODS,
        default="bilinear",
        help="Corner mapping used for the page: bilinear (default) or a full homography",
    )
    parser.add_argument(
        "--no-detect",
        action="store_true",
        help="Skip detection and use the centered A4 crop",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode to save intermediate processing images",
    )
    return parser.parse_args(argv)


def run(args):
    """Scan one image as described by parsed arguments; returns the saved page path."""
    input_file = args.input_file
    debug_mode = args.debug

    # Check if input file exists
    if not os.path.exists(input_file):
        print(f"Error: Input file '{input_file}' not found!")
        sys.exit(1)

    image = cv2.imread(input_file)
    if image is None:
        print(
            f"Error: Unable to load image from '{input_file}'. "
            "Please check if it's a valid image file."
        )
        sys.exit(1)

    try:
        config = ScannerConfig(
            edge_threshold=args.edge_threshold,
            target_width=args.width,
            warp_method=args.warp,
            contrast=args.contrast,
            brightness=args.brightness,
            debug=debug_mode,
        )
        config.validate()
        frame = PixelBuffer.from_bgr(image)
    except (ValueError, InvalidInputError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Processing image: {input_file} ({frame.width}x{frame.height})")
    if debug_mode:
        print("Debug mode enabled - intermediate images will be saved")

    gray, smoothed, edges = edge_mask(frame, config.edge_threshold)
    quad = None
    if args.no_detect:
        print("Detection skipped, using centered A4 crop")
    else:
        quad = select_best(find_candidates(edges, config))
        if quad is None:
            print("No document contour found! Falling back to centered A4 crop.")
        else:
            corners = ", ".join(f"({p.x:.0f}, {p.y:.0f})" for p in quad.ordered().corners)
            print(f"Document contour found! Corners: {corners}")

    rectified = rectify(
        frame,
        quad,
        target_width=config.target_width,
        aspect_ratio=config.aspect_ratio,
        method=config.warp_method,
        margin=config.fallback_margin,
    )
    page = enhance(rectified, config.contrast, config.brightness)
    page = apply_filter(page, args.filter)
    print(f"Page size: {page.width}x{page.height}, filter: {args.filter}")

    output_dir = create_output_directory(args.output)
    result_path = f"{output_dir}/RECOMMENDED_scanned_document.jpg"
    if not cv2.imwrite(result_path, page.to_bgr()):
        print(f"Error saving output file: {result_path}")
        sys.exit(1)

    if debug_mode:
        debug_dir = f"{output_dir}/debug_processing"
        save_debug_images(debug_dir, image, gray, smoothed, edges, quad, rectified)
        print(f"Debug processing images saved to: {debug_dir}/")

    print(f"\nSUCCESS! Output saved to: {result_path}")
    return result_path


def main(argv=None):
    """Main function to handle CLI arguments and run the scanner."""
    run(parse_arguments(argv))


if __name__ == "__main__":
    main()
