from __future__ import annotations

from dataclasses import dataclass

from PyQt6.QtCore import QSettings

from subtitle_region_reader.frame import InvalidConfig

SEGMENTATION_MODES = ("single-line", "auto-block")

DEFAULT_ALLOWED_CHARACTERS = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789.,!?'\" "
)


@dataclass
class RecognitionConfig:
    bottom_fraction: float = 0.10  # share of frame height covered by the band
    vertical_offset_fraction: float = 0.02  # lift above the bottom edge
    upscale_factor: int = 2
    allowed_characters: str = DEFAULT_ALLOWED_CHARACTERS  # "" = no whitelist
    page_segmentation_mode: str = "single-line"  # "single-line" | "auto-block"
    language: str = "eng"
    ocr_timeout_s: float = 10.0  # 0 = no timeout

    def validate(self) -> None:
        if not 0.0 < self.bottom_fraction <= 1.0:
            raise InvalidConfig(
                f"bottom_fraction must be in (0, 1], got {self.bottom_fraction}"
            )
        if not 0.0 <= self.vertical_offset_fraction < self.bottom_fraction:
            raise InvalidConfig(
                "vertical_offset_fraction must be in [0, bottom_fraction), "
                f"got {self.vertical_offset_fraction}"
            )
        factor = self.upscale_factor
        if isinstance(factor, bool) or not isinstance(factor, int) or factor < 1:
            raise InvalidConfig(
                f"upscale_factor must be an integer >= 1, got {self.upscale_factor!r}"
            )
        if self.page_segmentation_mode not in SEGMENTATION_MODES:
            raise InvalidConfig(
                f"page_segmentation_mode must be one of {SEGMENTATION_MODES}, "
                f"got {self.page_segmentation_mode!r}"
            )
        if self.ocr_timeout_s < 0:
            raise InvalidConfig(f"ocr_timeout_s must be >= 0, got {self.ocr_timeout_s}")

    def save(self, settings: QSettings | None = None) -> None:
        s = settings if settings is not None else _default_store()
        s.beginGroup("recognition")
        s.setValue("bottom_fraction", self.bottom_fraction)
        s.setValue("vertical_offset_fraction", self.vertical_offset_fraction)
        s.setValue("upscale_factor", self.upscale_factor)
        s.setValue("allowed_characters", self.allowed_characters)
        s.setValue("page_segmentation_mode", self.page_segmentation_mode)
        s.setValue("language", self.language)
        s.setValue("ocr_timeout_s", self.ocr_timeout_s)
        s.endGroup()
        s.sync()

    @classmethod
    def load(cls, settings: QSettings | None = None) -> RecognitionConfig:
        s = settings if settings is not None else _default_store()
        d = cls()
        s.beginGroup("recognition")
        config = cls(
            bottom_fraction=float(s.value("bottom_fraction", d.bottom_fraction)),
            vertical_offset_fraction=float(
                s.value("vertical_offset_fraction", d.vertical_offset_fraction)
            ),
            upscale_factor=int(s.value("upscale_factor", d.upscale_factor)),
            allowed_characters=str(s.value("allowed_characters", d.allowed_characters)),
            page_segmentation_mode=str(
                s.value("page_segmentation_mode", d.page_segmentation_mode)
            ),
            language=str(s.value("language", d.language)),
            ocr_timeout_s=float(s.value("ocr_timeout_s", d.ocr_timeout_s)),
        )
        s.endGroup()
        return config


def _default_store() -> QSettings:
    return QSettings("SubtitleRegionReader", "SubtitleRegionReader")
