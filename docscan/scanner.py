"""
Scanning session: periodic detection on live frames and on-demand capture.

A DocumentScanner owns the "last known detection" slot. Detection passes are
guarded by a non-blocking lock so a tick that arrives while a pass is still
running is dropped instead of queued. Capture reads whatever detection is in
the slot at that moment and never waits for a running pass.
"""

from __future__ import annotations

import itertools
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime

from .buffers import DetectionResult, PixelBuffer
from .config import DEFAULT_CONFIG
from .detector import detect
from .filters import apply_filter, enhance
from .rectify import rectify


@dataclass(frozen=True, slots=True)
class CapturedPage:
    page_id: int
    image: PixelBuffer
    timestamp: datetime
    has_detection: bool
    filter_name: str


class DocumentScanner:
    def __init__(self, config=None, filter_name="original"):
        self.config = config or DEFAULT_CONFIG
        self.config.validate()
        self.filter_name = filter_name
        self.last_detection: DetectionResult | None = None
        self._pages: list[CapturedPage] = []
        self._page_ids = itertools.count(1)
        self._detect_lock = threading.Lock()

    @property
    def is_detecting(self):
        return self._detect_lock.locked()

    def process_frame(self, frame):
        """
        Run one detection pass and publish the result to `last_detection`.

        Returns the DetectionResult, or None when another pass was already in
        flight and this tick was skipped.
        """
        if not self._detect_lock.acquire(blocking=False):
            if self.config.debug:
                print("Debug: detection pass still running, tick skipped")
            return None
        try:
            quad = detect(frame, self.config)
            result = DetectionResult(quad, frame.width, frame.height)
            # Latest wins, including "nothing found"
            self.last_detection = result
            return result
        finally:
            self._detect_lock.release()

    def capture(self, frame, filter_name=None):
        """Rectify, enhance and filter the frame into a new page."""
        filter_name = filter_name or self.filter_name
        detection = self.last_detection
        quad = detection.quadrilateral if detection is not None else None
        if quad is not None and (
            detection.frame_width != frame.width or detection.frame_height != frame.height
        ):
            # Corners from a differently sized frame do not apply
            quad = None

        cfg = self.config
        page = rectify(
            frame,
            quad,
            target_width=cfg.target_width,
            aspect_ratio=cfg.aspect_ratio,
            method=cfg.warp_method,
            margin=cfg.fallback_margin,
        )
        page = enhance(page, cfg.contrast, cfg.brightness)
        page = apply_filter(page, filter_name)

        captured = CapturedPage(
            page_id=next(self._page_ids),
            image=page,
            timestamp=datetime.now(),
            has_detection=quad is not None,
            filter_name=filter_name,
        )
        self._pages.append(captured)
        return captured

    @property
    def pages(self):
        return list(self._pages)

    def delete_page(self, page_id):
        before = len(self._pages)
        self._pages = [p for p in self._pages if p.page_id != page_id]
        return len(self._pages) != before

    def clear(self):
        count = len(self._pages)
        self._pages = []
        return count


class DetectionLoop:
    """
    Feed frames from `frame_source()` to a scanner every `interval` seconds.

    Each tick is handed to a worker thread; if the previous pass is still
    running the scanner drops the tick. A source returning None skips it.
    """

    def __init__(self, scanner, frame_source, interval=0.5, max_workers=2):
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self.scanner = scanner
        self.frame_source = frame_source
        self.interval = interval
        self.max_workers = max_workers
        self._stop = threading.Event()
        self._thread = None
        self._executor = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        self._stop.clear()
        self._executor = ThreadPoolExecutor(max_workers=self.max_workers)
        self._thread = threading.Thread(target=self._run, name="docscan-detect", daemon=True)
        self._thread.start()

    def stop(self):
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _tick(self):
        frame = self.frame_source()
        if frame is None:
            return None
        return self.scanner.process_frame(frame)

    @staticmethod
    def _report(future):
        exc = future.exception()
        if exc is not None:
            print(f"Detection error: {exc}")

    def _run(self):
        while not self._stop.is_set():
            if not self.scanner.is_detecting:
                self._executor.submit(self._tick).add_done_callback(self._report)
            self._stop.wait(self.interval)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
