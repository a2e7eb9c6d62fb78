"""Frame and image types shared by every pipeline stage.

A ``RawFrame`` is what a frame supplier hands over: an RGBA8 byte buffer
captured from the paused video surface. Everything downstream works on
``numpy`` arrays:

- PixelPlane      -- ``(h, w)`` uint8, one channel
- BinarizedImage  -- ``(h, w)`` uint8, every value 0 or 255
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

# Type aliases (documentation only, both are plain uint8 arrays)
PixelPlane = np.ndarray
BinarizedImage = np.ndarray

RGBA_CHANNELS = 4


class PipelineError(Exception):
    """Base class for errors raised by the recognition pipeline."""


class InvalidFrame(PipelineError):
    """Frame has zero dimensions or a pixel buffer of the wrong length."""


class InvalidConfig(PipelineError, ValueError):
    """A recognition option is out of its allowed range."""


class EmptyRegion(PipelineError):
    """The requested subtitle band contains no pixel rows."""


@dataclass(frozen=True)
class RawFrame:
    width: int
    height: int
    pixels: bytes  # RGBA8, row-major

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidFrame(
                f"frame has invalid size {self.width}x{self.height}"
            )
        expected = self.width * self.height * RGBA_CHANNELS
        if len(self.pixels) != expected:
            raise InvalidFrame(
                f"pixel buffer is {len(self.pixels)} bytes, "
                f"expected {expected} for {self.width}x{self.height} RGBA"
            )

    def as_array(self) -> np.ndarray:
        """Return a read-only ``(h, w, 4)`` view of the pixel buffer."""
        self.validate()
        arr = np.frombuffer(self.pixels, dtype=np.uint8)
        return arr.reshape((self.height, self.width, RGBA_CHANNELS))

    @classmethod
    def from_array(cls, rgba: np.ndarray) -> RawFrame:
        if rgba.ndim != 3 or rgba.shape[2] != RGBA_CHANNELS:
            raise InvalidFrame(f"expected an (h, w, 4) RGBA array, got {rgba.shape}")
        h, w = rgba.shape[:2]
        pixels = np.ascontiguousarray(rgba, dtype=np.uint8).tobytes()
        return cls(width=w, height=h, pixels=pixels)
