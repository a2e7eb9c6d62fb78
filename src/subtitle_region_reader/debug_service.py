"""Debug service: per-request stage images and pipeline logging.

When ``SRR_DEBUG=1`` is set (or a directory is passed explicitly),
DebugService creates a session directory and records every stage of each
recognition request, so OCR quality problems can be traced to the stage
that caused them::

    .tests/debug/session_YYYYMMDD_HHMMSS/
        pipeline.log
        001/
            crop.png        # subtitle band cut from the frame
            upscaled.png
            gray.png
            denoised.png
            equalized.png
            binarized.png   # what the OCR engine sees
            raw.txt         # engine output
            text.txt        # cleaned text
        002/ ...

Each ``begin_request()`` returns its own ``DebugRequest`` bound to one
numbered folder, so requests still running on worker threads after a newer
one started keep writing into their own folder.
"""

from __future__ import annotations

import os
import threading
from datetime import datetime

import numpy as np
from PIL import Image

_DEBUG_ROOT = os.path.join(os.path.dirname(__file__), "..", "..", ".tests", "debug")


def is_debug_enabled() -> bool:
    return os.environ.get("SRR_DEBUG", "0") == "1"


class DebugService:
    def __init__(self, root: str | None = None) -> None:
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        self._session_dir = os.path.join(root or _DEBUG_ROOT, f"session_{ts}")
        os.makedirs(self._session_dir, exist_ok=True)

        log_path = os.path.join(self._session_dir, "pipeline.log")
        self._log_file = open(log_path, "w", encoding="utf-8")  # noqa: SIM115
        self._lock = threading.Lock()
        self._request_count = 0

        self.log("SESSION", f"started at {ts}")

    @property
    def session_dir(self) -> str:
        return self._session_dir

    # ------------------------------------------------------------------
    # Pipeline logging
    # ------------------------------------------------------------------

    def log(self, tag: str, text: str) -> None:
        ts = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        with self._lock:
            self._log_file.write(f"{ts}  [{tag}]  {text}\n")
            self._log_file.flush()

    # ------------------------------------------------------------------
    # Per-request artifacts
    # ------------------------------------------------------------------

    def begin_request(self) -> DebugRequest:
        with self._lock:
            self._request_count += 1
            number = self._request_count
        folder = os.path.join(self._session_dir, f"{number:03d}")
        os.makedirs(folder, exist_ok=True)
        self.log("REQUEST", f"{number:03d}")
        return DebugRequest(self, number, folder)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def shutdown(self) -> None:
        self.log("SESSION", "ended")
        with self._lock:
            self._log_file.close()


class DebugRequest:
    """Artifacts of one recognition request, written to its own folder."""

    def __init__(self, service: DebugService, number: int, folder: str) -> None:
        self._service = service
        self._number = number
        self._folder = folder

    @property
    def folder(self) -> str:
        return self._folder

    def save_stage(self, name: str, image: np.ndarray) -> None:
        Image.fromarray(np.ascontiguousarray(image, dtype=np.uint8)).save(
            os.path.join(self._folder, f"{name}.png")
        )
        self._service.log(
            "STAGE", f"{self._number:03d} {name} {image.shape[1]}x{image.shape[0]}"
        )

    def save_text(self, name: str, text: str) -> None:
        with open(os.path.join(self._folder, f"{name}.txt"), "w", encoding="utf-8") as f:
            f.write(text)
        self._service.log(name.upper(), f"{self._number:03d} {text!r}")
