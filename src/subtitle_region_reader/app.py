from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace

from subtitle_region_reader.debug_service import DebugService, is_debug_enabled
from subtitle_region_reader.frame import PipelineError, RawFrame
from subtitle_region_reader.frame_source import ScreenFrameSource, load_frame
from subtitle_region_reader.ocr_engine import TesseractEngine
from subtitle_region_reader.pipeline import recognize_subtitle_region
from subtitle_region_reader.settings import SEGMENTATION_MODES, RecognitionConfig

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NO_TEXT = 1
EXIT_FAILED = 2


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="subtitle-region-reader",
        description="Recognize the subtitle line at the bottom of a paused video frame.",
    )
    sub = p.add_subparsers(dest="source", required=True)

    image = sub.add_parser("image", help="Read a screenshot file.")
    image.add_argument("path", help="Path to the screenshot.")

    screen = sub.add_parser("screen", help="Grab a screen region (the video surface).")
    for name in ("left", "top", "width", "height"):
        screen.add_argument(name, type=int)

    p.add_argument("--bottom-fraction", type=float, default=None,
                   help="Share of the frame height to scan (0..1].")
    p.add_argument("--offset-fraction", type=float, default=None,
                   help="Lift of the band above the bottom edge, as a share of height.")
    p.add_argument("--scale", type=int, default=None, help="Upscale factor (>= 1).")
    p.add_argument("--psm", choices=SEGMENTATION_MODES, default=None,
                   help="Page segmentation hint for the OCR engine.")
    p.add_argument("--lang", default=None, help="Tesseract language (default: eng).")
    p.add_argument("--whitelist", default=None,
                   help="Characters the OCR engine may emit ('' disables the whitelist).")
    p.add_argument("--saved", action="store_true",
                   help="Start from the saved configuration instead of the defaults.")
    p.add_argument("--debug-dir", default=None,
                   help="Write per-stage images and logs under this directory.")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return p


def config_from_args(args: argparse.Namespace) -> RecognitionConfig:
    config = RecognitionConfig.load() if args.saved else RecognitionConfig()
    overrides = {
        "bottom_fraction": args.bottom_fraction,
        "vertical_offset_fraction": args.offset_fraction,
        "upscale_factor": args.scale,
        "page_segmentation_mode": args.psm,
        "language": args.lang,
        "allowed_characters": args.whitelist,
    }
    return replace(config, **{k: v for k, v in overrides.items() if v is not None})


def _read_frame(args: argparse.Namespace) -> RawFrame:
    if args.source == "image":
        return load_frame(args.path)
    return ScreenFrameSource((args.left, args.top, args.width, args.height)).capture()


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    debug: DebugService | None = None
    if args.debug_dir or is_debug_enabled():
        debug = DebugService(args.debug_dir)

    try:
        config = config_from_args(args)
        config.validate()
        frame = _read_frame(args)
        text = recognize_subtitle_region(frame, config, TesseractEngine(config), debug)
    except PipelineError as e:
        logger.debug("Recognition failed", exc_info=True)
        print(f"recognition failed: {e}", file=sys.stderr)
        return EXIT_FAILED
    finally:
        if debug:
            debug.shutdown()

    if not text:
        print("no subtitle detected", file=sys.stderr)
        return EXIT_NO_TEXT
    print(text)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
