#!/usr/bin/env python3
"""
Threshold sweep tool for scan tuning.

Runs the classifier over a range of black/white thresholds and every rounding
policy, and prints how many intersections each setting calls black, white or
conflicting. Use it to pick defaults for config.json on a new board or
lighting setup.

Usage:
    python sweep_thresholds.py image_path [--black-range 20,60,10] [--white-range 130,200,10]

Examples:
    python tools/sweep_thresholds.py photos/board.jpg
    python tools/sweep_thresholds.py photos/board.jpg --min-share 0.6
"""

import sys
import argparse
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from goautoscore.capture import load_raster
from goautoscore.vision import (
    CellState,
    ColorThreshold,
    GridClassifier,
    get_policy_names,
    summarize,
)


def _range_arg(text: str) -> range:
    start, stop, step = (int(p) for p in text.split(","))
    return range(start, stop + 1, step)


def sweep(board, black_values, white_values, min_share: float = 0.0) -> list:
    """
    Classify a board for every threshold/policy combination.

    Returns:
        List of (policy, black, white, black_cells, white_cells, conflicts) tuples
    """
    rows = []
    for policy in get_policy_names():
        classifier = GridClassifier(rounding=policy)
        for b in black_values:
            for w in white_values:
                result = classifier.classify(board, ColorThreshold(b, b, b), ColorThreshold(w, w, w))
                summary = summarize(result, min_share)
                rows.append((
                    policy, b, w,
                    summary.count(CellState.BLACK),
                    summary.count(CellState.WHITE),
                    summary.count(CellState.CONFLICT),
                ))
    return rows


def main():
    parser = argparse.ArgumentParser(description="Sweep stone thresholds over a board image")
    parser.add_argument("image", help="Cropped board image")
    parser.add_argument("--black-range", type=_range_arg, default=range(20, 61, 10),
                        help="start,stop,step for the black threshold (inclusive)")
    parser.add_argument("--white-range", type=_range_arg, default=range(130, 201, 10),
                        help="start,stop,step for the white threshold (inclusive)")
    parser.add_argument("--min-share", type=float, default=0.0)
    args = parser.parse_args()

    board = load_raster(args.image)
    print(f"Board: {board.width}x{board.height}")
    print(f"{'Policy':>7} {'Black':>6} {'White':>6} {'#B':>4} {'#W':>4} {'#?':>4}")
    print("-" * 38)

    for policy, b, w, n_black, n_white, n_conflict in sweep(
        board, args.black_range, args.white_range, args.min_share
    ):
        print(f"{policy:>7} {b:>6} {w:>6} {n_black:>4} {n_white:>4} {n_conflict:>4}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
