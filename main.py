"""
GoAutoScore - Entry Point

Scans a cropped Go board photo and prints which intersections hold stones.

Example:
    python main.py board.jpg
    python main.py board.jpg --black-sample 40,40,8 --white-sample 120,40,8
    python main.py board.jpg --black 35,35,35 --white 150,150,150 --json
    python main.py --camera 0 --debug
"""

import sys
import json
import logging
import argparse
from datetime import datetime
from typing import List, Optional, Sequence

from goautoscore.capture import load_raster, grab_camera_frame
from goautoscore.scan_session import ScanSession
from goautoscore.settings import load_settings
from goautoscore.vision import (
    DEBUG_DIR,
    ColorThreshold,
    ScanError,
    get_policy_names,
    render_board,
    save_debug_image,
    summarize,
)


# Configure logging - output to both console and file
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
    handlers=[
        logging.StreamHandler(),  # Console output
        logging.FileHandler("goautoscore.log", mode='w', encoding='utf-8')  # File output
    ]
)
logger = logging.getLogger(__name__)


def _parse_numbers(text: str, count: int, kind=float) -> List:
    parts = text.split(",")
    if len(parts) != count:
        raise argparse.ArgumentTypeError(f"Expected {count} comma-separated values, got '{text}'")
    try:
        return [kind(p) for p in parts]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid number in '{text}'")


def _threshold_arg(text: str) -> ColorThreshold:
    return ColorThreshold.from_sequence(_parse_numbers(text, 3))


def _circle_arg(text: str) -> List[int]:
    return _parse_numbers(text, 3, int)


def parse_args(argv: Optional[Sequence[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="GoAutoScore - detect Go stones in a cropped board image"
    )
    parser.add_argument(
        "image",
        nargs="?",
        help="Cropped board image (omit when using --camera)"
    )
    parser.add_argument(
        "--camera",
        type=int,
        metavar="INDEX",
        help="Grab the board from this camera instead of a file"
    )
    parser.add_argument(
        "--black-sample",
        type=_circle_arg,
        metavar="X,Y,R",
        help="Calibrate black from a circle on a black stone"
    )
    parser.add_argument(
        "--white-sample",
        type=_circle_arg,
        metavar="X,Y,R",
        help="Calibrate white from a circle on a white stone"
    )
    parser.add_argument(
        "--black",
        type=_threshold_arg,
        metavar="R,G,B",
        help="Black threshold (default from config.json)"
    )
    parser.add_argument(
        "--white",
        type=_threshold_arg,
        metavar="R,G,B",
        help="White threshold (default from config.json)"
    )
    parser.add_argument(
        "--rounding",
        choices=get_policy_names(),
        help="Grid rounding policy (default from config.json)"
    )
    parser.add_argument(
        "--min-share",
        type=float,
        help="Minimum match share for a colour to be shown (0-1)"
    )
    parser.add_argument(
        "--max-size",
        type=lambda s: _parse_numbers(s, 2, int),
        metavar="W,H",
        help="Downscale the image to fit W,H before scanning"
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Settings file (default: config.json)"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print raw per-cell counts as JSON"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Save an annotated debug image"
    )
    args = parser.parse_args(argv)
    if args.image is None and args.camera is None:
        parser.error("an image path or --camera is required")
    return args


def run(args) -> int:
    """
    Run one scan with parsed arguments.

    Returns:
        Exit code
    """
    settings = load_settings(args.config)
    if args.rounding:
        settings["rounding"] = args.rounding
    min_share = args.min_share if args.min_share is not None else settings["min_share"]
    debug_mode = args.debug or settings.get("debug_enabled", False)

    if args.camera is not None:
        board = grab_camera_frame(args.camera)
        if board is None:
            logger.error("No frame captured")
            return 1
    else:
        board = load_raster(args.image, max_size=args.max_size)

    session = ScanSession.from_settings(settings)
    session.set_board(board)

    if args.black is not None:
        session.black = args.black
    if args.white is not None:
        session.white = args.white
    if args.black_sample:
        session.pick_black(*args.black_sample)
    if args.white_sample:
        session.pick_white(*args.white_sample)

    result = session.scan()

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(render_board(summarize(result, min_share)))

    if debug_mode:
        path = DEBUG_DIR / f"debug_{datetime.now():%Y%m%d_%H%M%S}.png"
        matches = session.classifier.iter_matches(board, session.black, session.white)
        save_debug_image(board, matches, result, str(path))
        logger.info(f"Debug image saved: {path}")

    return 0


def main():
    """Parse arguments and run a scan."""
    args = parse_args()
    try:
        code = run(args)
    except (ScanError, ValueError, OSError) as e:
        logger.error(f"Scan failed: {e}")
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
