#!/usr/bin/env python3
"""
Test script for grid classification.

Covers:
1. Threshold boundaries and independent black/white predicates
2. Grid completeness and boundary discard
3. Count conservation against a per-pixel reference scan
4. End-to-end board scenarios
5. Rounding policies, cancellation and progress

Usage:
    python test_classifier.py
"""

import dataclasses
import math
import sys
from pathlib import Path

import numpy as np

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from goautoscore.vision import (
    CellAggregate,
    ColorThreshold,
    GridClassifier,
    InvalidRaster,
    Raster,
    ScanCancelled,
    ScanContext,
    StoneColor,
    classify,
    get_policy_names,
    project,
)


BLACK = ColorThreshold(35, 35, 35)
WHITE = ColorThreshold(150, 150, 150)
ALL_KEYS = {(col, row) for col in range(1, 20) for row in range(1, 20)}


def _board(width, height, fill=(200, 160, 100, 255)):
    """Wood-coloured board that matches neither default threshold."""
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[...] = fill
    return pixels


def _reference_scan(pixels, black, white, grid_size=19):
    """Plain per-pixel scan used as the expected result."""
    height, width = pixels.shape[:2]
    counts = {key: [0, 0] for key in ALL_KEYS}
    for y in range(height):
        for x in range(width):
            r, g, b = (int(v) for v in pixels[y, x, :3])
            colors = []
            if r <= black.r and g <= black.g and b <= black.b:
                colors.append(0)
            if r >= white.r and g >= white.g and b >= white.b:
                colors.append(1)
            for color in colors:
                col = min(grid_size, math.ceil(grid_size * (x / width)))
                row = min(grid_size, math.ceil(grid_size * (y / height)))
                if col <= 0 or row <= 0:
                    continue
                counts[(col, row)][color] += 1
    return counts


def test_threshold_boundary_inclusive():
    """Pixels equal to a threshold match (<= for black, >= for white)."""
    print("\n" + "="*60)
    print("TEST: Threshold boundaries")
    print("="*60)

    # In a 2x2 raster, pixel (1, 1) projects to cell (10, 10)
    pixels = _board(2, 2)
    pixels[1, 1] = (35, 35, 35, 255)
    result = classify(Raster(pixels=pixels), BLACK, WHITE)
    print(f"  Black-equal pixel: {result[(10, 10)]}")
    assert result[(10, 10)] == CellAggregate(stone_count=1, black_count=1, white_count=0)

    pixels[1, 1] = (150, 150, 150, 255)
    result = classify(Raster(pixels=pixels), BLACK, WHITE)
    print(f"  White-equal pixel: {result[(10, 10)]}")
    assert result[(10, 10)] == CellAggregate(stone_count=1, black_count=0, white_count=1)

    # One channel past the boundary is enough to fail
    pixels[1, 1] = (36, 35, 35, 255)
    assert classify(Raster(pixels=pixels), BLACK, WHITE).total_matches() == 0
    pixels[1, 1] = (150, 149, 150, 255)
    assert classify(Raster(pixels=pixels), BLACK, WHITE).total_matches() == 0

    print("  [PASS] Threshold boundaries")


def test_alpha_is_ignored_by_classifier():
    """Classification only looks at r, g, b."""
    pixels = _board(2, 2)
    pixels[1, 1] = (0, 0, 0, 0)
    result = classify(Raster(pixels=pixels), BLACK, WHITE)
    assert result[(10, 10)].black_count == 1


def test_pixel_can_match_both_colors():
    """Overlapping thresholds count a pixel for both colours."""
    pixels = _board(2, 2, fill=(100, 100, 100, 255))
    black = ColorThreshold(120, 120, 120)
    white = ColorThreshold(80, 80, 80)
    result = classify(Raster(pixels=pixels), black, white)

    # Only pixel (1, 1) survives the boundary discard
    assert result[(10, 10)] == CellAggregate(stone_count=2, black_count=1, white_count=1)
    assert result.total_matches() == 2


def test_out_of_range_thresholds():
    """Thresholds outside [0, 255] are accepted and act as always/never."""
    pixels = _board(2, 2, fill=(0, 0, 0, 255))
    never = ColorThreshold(-1, -1, -1)
    always = ColorThreshold(-10, -10, -10)

    result = classify(Raster(pixels=pixels), never, always)
    assert result[(10, 10)] == CellAggregate(stone_count=1, black_count=0, white_count=1)

    result = classify(Raster(pixels=pixels), ColorThreshold(300, 300, 300), ColorThreshold(256, 256, 256))
    assert result[(10, 10)] == CellAggregate(stone_count=1, black_count=1, white_count=0)


def test_grid_completeness():
    """Every result has exactly the 361 keys (1,1)..(19,19)."""
    print("\n" + "="*60)
    print("TEST: Grid completeness")
    print("="*60)

    for width, height in [(1, 1), (5, 3), (38, 38), (100, 40)]:
        result = classify(Raster(pixels=_board(width, height)), BLACK, WHITE)
        print(f"  {width}x{height}: {len(result)} cells")
        assert len(result) == 361
        assert set(result.keys()) == ALL_KEYS
        assert all(cell == CellAggregate() for cell in result.values())

    print("  [PASS] Grid completeness")


def test_boundary_discard():
    """Matches in the first pixel column or row project to 0 and are dropped."""
    print("\n" + "="*60)
    print("TEST: Boundary discard")
    print("="*60)

    classifier = GridClassifier()
    assert classifier.cell_for(0, 5, 100, 100) is None
    assert classifier.cell_for(5, 0, 100, 100) is None

    pixels = _board(100, 100)
    pixels[5, 0] = (0, 0, 0, 255)    # (x=0, y=5)
    pixels[0, 5] = (255, 255, 255, 255)  # (x=5, y=0)
    board = Raster(pixels=pixels)

    matches = list(classifier.iter_matches(board, BLACK, WHITE))
    print(f"  Matches found: {len(matches)}")
    assert len(matches) == 2

    result = classifier.classify(board, BLACK, WHITE)
    assert result.total_matches() == 0
    print("  [PASS] Boundary discard")


def test_single_pixel_raster():
    """A 1x1 raster only has the boundary pixel, so nothing is counted."""
    pixels = np.zeros((1, 1, 4), dtype=np.uint8)
    result = classify(Raster(pixels=pixels), BLACK, WHITE)
    assert len(result) == 361
    assert result.total_matches() == 0


def test_determinism():
    """Same inputs give equal results."""
    rng = np.random.default_rng(7)
    board = Raster(pixels=rng.integers(0, 256, size=(31, 47, 4), dtype=np.uint8))
    black = ColorThreshold(70, 70, 70)
    white = ColorThreshold(190, 190, 190)

    first = classify(board, black, white)
    second = classify(board, black, white)
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_matches_reference_scan():
    """Vectorised scan agrees with a per-pixel scan on random rasters."""
    print("\n" + "="*60)
    print("TEST: Reference scan")
    print("="*60)

    rng = np.random.default_rng(2024)
    for width, height in [(57, 43), (19, 19), (38, 38), (7, 61)]:
        pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
        black = ColorThreshold(90.5, 80, 100)
        white = ColorThreshold(170, 160.25, 150)

        result = classify(Raster(pixels=pixels), black, white)
        expected = _reference_scan(pixels, black, white)

        for key in ALL_KEYS:
            cell = result[key]
            assert (cell.black_count, cell.white_count) == tuple(expected[key]), key
            assert cell.stone_count == cell.black_count + cell.white_count
        print(f"  {width}x{height}: {result.total_matches()} matches agree")

    print("  [PASS] Reference scan")


def test_count_conservation():
    """Total stone_count equals the number of matches not on the boundary."""
    rng = np.random.default_rng(11)
    pixels = rng.integers(0, 256, size=(40, 64, 4), dtype=np.uint8)
    board = Raster(pixels=pixels)
    black = ColorThreshold(100, 100, 100)
    white = ColorThreshold(140, 140, 140)

    classifier = GridClassifier()
    result = classifier.classify(board, black, white)

    retained = 0
    per_cell = {}
    for match in classifier.iter_matches(board, black, white):
        cell = classifier.cell_for(match.x, match.y, board.width, board.height)
        if cell is None:
            assert match.x == 0 or match.y == 0
            continue
        retained += 1
        counts = per_cell.setdefault(cell, [0, 0])
        counts[int(match.color)] += 1

    assert result.total_matches() == retained
    for key, (n_black, n_white) in per_cell.items():
        assert result[key].black_count == n_black
        assert result[key].white_count == n_white


def test_end_to_end_corner_blocks():
    """
    38x38 board, black 2x2 block in the top-left corner, white 2x2 block in the
    bottom-right corner.

    On a 38 pixel side, cell c covers pixels 2c-1 and 2c. Pixel 0 is the
    discarded boundary and pixel 36 belongs to cell 18, so only one pixel of
    each block lands in the corner cell.
    """
    print("\n" + "="*60)
    print("TEST: End-to-end corner blocks")
    print("="*60)

    pixels = _board(38, 38)
    pixels[0:2, 0:2] = (0, 0, 0, 255)
    pixels[36:38, 36:38] = (255, 255, 255, 255)
    result = classify(Raster(pixels=pixels), BLACK, WHITE)

    expected = {
        (1, 1): CellAggregate(stone_count=1, black_count=1, white_count=0),
        (18, 18): CellAggregate(stone_count=1, black_count=0, white_count=1),
        (19, 18): CellAggregate(stone_count=1, black_count=0, white_count=1),
        (18, 19): CellAggregate(stone_count=1, black_count=0, white_count=1),
        (19, 19): CellAggregate(stone_count=1, black_count=0, white_count=1),
    }
    for key in ALL_KEYS:
        assert result[key] == expected.get(key, CellAggregate()), key

    print(f"  Occupied: {sorted(result.occupied_cells())}")
    print("  [PASS] End-to-end corner blocks")


def test_end_to_end_inset_blocks():
    """Blocks one pixel in from the edge land whole in a single cell."""
    pixels = _board(38, 38)
    pixels[1:3, 1:3] = (0, 0, 0, 255)
    pixels[35:37, 35:37] = (255, 255, 255, 255)
    result = classify(Raster(pixels=pixels), BLACK, WHITE)

    assert result[(1, 1)] == CellAggregate(stone_count=4, black_count=4, white_count=0)
    assert result[(18, 18)] == CellAggregate(stone_count=4, black_count=0, white_count=4)
    assert set(result.occupied_cells()) == {(1, 1), (18, 18)}
    assert result.total_matches() == 8


def test_last_cell_clamped():
    """Projection never exceeds the grid size."""
    width = 1000
    cols = project(np.arange(width), width, 19)
    assert cols.max() == 19
    assert cols.min() == 0
    # Monotonic, no gaps
    assert np.all(np.diff(cols) >= 0)
    assert set(cols.tolist()) == set(range(0, 20))


def test_rounding_policies():
    """'round' rounds half up; 'ceil' is the default."""
    assert get_policy_names()[:2] == ["ceil", "round"]
    assert GridClassifier().rounding == "ceil"

    pixels = _board(100, 100)
    pixels[50, 6] = (0, 0, 0, 255)  # fracX 0.06 -> 1.14, fracY 0.5 -> 9.5
    board = Raster(pixels=pixels)

    ceil_result = classify(board, BLACK, WHITE, rounding="ceil")
    round_result = classify(board, BLACK, WHITE, rounding="round")
    assert ceil_result[(2, 10)].black_count == 1
    assert round_result[(1, 10)].black_count == 1

    # Half-up at exactly .5
    assert int(project(1, 2, 19, "round")) == 10
    assert int(project(1, 38, 19, "round")) == 1


def test_unknown_policy_rejected():
    try:
        GridClassifier(rounding="nearest")
    except ValueError as e:
        assert "ceil" in str(e)
    else:
        raise AssertionError("Unknown policy should raise ValueError")


def test_custom_grid_size():
    """Smaller boards use the same projection rule."""
    pixels = _board(9, 9)
    pixels[8, 8] = (0, 0, 0, 255)
    result = classify(Raster(pixels=pixels), BLACK, WHITE, grid_size=9)

    assert len(result) == 81
    assert result.grid_size == 9
    assert result[(8, 8)].black_count == 1  # ceil(9 * 8/9) = 8


def test_invalid_raster_rejected_before_scan():
    """Wrong-length buffers never reach the classifier."""
    try:
        classify(Raster.from_bytes(10, 10, bytes(399)), BLACK, WHITE)
    except InvalidRaster:
        pass
    else:
        raise AssertionError("Expected InvalidRaster")


def test_cancellation():
    """A cancelled context raises instead of returning a partial result."""
    print("\n" + "="*60)
    print("TEST: Cancellation")
    print("="*60)

    board = Raster(pixels=_board(20, 20))
    context = ScanContext()
    context.cancel()

    try:
        classify(board, BLACK, WHITE, context=context)
    except ScanCancelled as e:
        print(f"  Raised: {e}")
    else:
        raise AssertionError("Expected ScanCancelled")

    # Cancel halfway through via the progress callback
    seen = []

    def on_progress(percent, message):
        seen.append(percent)
        if percent >= 0.5:
            context.cancel()

    context = ScanContext(progress_callback=on_progress)
    try:
        classify(Raster(pixels=_board(40, 40)), BLACK, WHITE, context=context)
    except ScanCancelled:
        pass
    else:
        raise AssertionError("Expected ScanCancelled mid-scan")
    assert 1.0 not in seen
    print("  [PASS] Cancellation")


def test_progress_reported():
    seen = []
    context = ScanContext(progress_callback=lambda p, m: seen.append(p))
    result = classify(Raster(pixels=_board(30, 45)), BLACK, WHITE, context=context)

    assert result.total_matches() == 0
    assert seen[0] == 0.0
    assert seen[-1] == 1.0
    assert seen == sorted(seen)


def test_scan_context_fields():
    """ScanContext only carries the cancel flag and the progress callback."""
    names = [f.name for f in dataclasses.fields(ScanContext)]
    assert names == ["cancel_flag", "progress_callback"]

    context = ScanContext()
    assert not context.is_cancelled()
    context.report_progress(0.5, "no callback set")
    context.cancel()
    assert context.is_cancelled()


def test_iter_matches_order():
    """Matches come out row-major, black before white for the same pixel."""
    pixels = _board(3, 2, fill=(100, 100, 100, 255))
    pixels[0, 2] = (200, 200, 200, 255)
    pixels[1, 0] = (10, 10, 10, 255)
    black = ColorThreshold(100, 100, 100)
    white = ColorThreshold(100, 100, 100)

    matches = list(GridClassifier().iter_matches(Raster(pixels=pixels), black, white))
    coords = [(m.x, m.y, m.color) for m in matches]

    assert coords == [
        (0, 0, StoneColor.BLACK), (0, 0, StoneColor.WHITE),
        (1, 0, StoneColor.BLACK), (1, 0, StoneColor.WHITE),
        (2, 0, StoneColor.WHITE),
        (0, 1, StoneColor.BLACK),
        (1, 1, StoneColor.BLACK), (1, 1, StoneColor.WHITE),
        (2, 1, StoneColor.BLACK), (2, 1, StoneColor.WHITE),
    ]


def test_result_is_read_only():
    result = classify(Raster(pixels=_board(4, 4)), BLACK, WHITE)
    try:
        result._cells[(1, 1)] = CellAggregate(stone_count=1)
    except TypeError:
        pass
    else:
        raise AssertionError("BoardResult cells should be read-only")


def test_result_to_dict_keys():
    """to_dict() keys are 'row-col'."""
    pixels = _board(38, 38)
    pixels[3, 1] = (0, 0, 0, 255)  # col 1, row 2
    result = classify(Raster(pixels=pixels), BLACK, WHITE)
    as_dict = result.to_dict()

    assert len(as_dict) == 361
    assert as_dict["2-1"] == {"stone": 1, "black": 1, "white": 0}
    assert as_dict["1-2"] == {"stone": 0, "black": 0, "white": 0}


def main():
    """Run all tests."""
    print("\n" + "#"*60)
    print("# CLASSIFIER TESTS")
    print("#"*60)

    tests = [
        test_threshold_boundary_inclusive,
        test_alpha_is_ignored_by_classifier,
        test_pixel_can_match_both_colors,
        test_out_of_range_thresholds,
        test_grid_completeness,
        test_boundary_discard,
        test_single_pixel_raster,
        test_determinism,
        test_matches_reference_scan,
        test_count_conservation,
        test_end_to_end_corner_blocks,
        test_end_to_end_inset_blocks,
        test_last_cell_clamped,
        test_rounding_policies,
        test_unknown_policy_rejected,
        test_custom_grid_size,
        test_invalid_raster_rejected_before_scan,
        test_cancellation,
        test_progress_reported,
        test_scan_context_fields,
        test_iter_matches_order,
        test_result_is_read_only,
        test_result_to_dict_keys,
    ]

    failed = 0
    for test in tests:
        try:
            test()
        except AssertionError as e:
            failed += 1
            print(f"  [FAIL] {test.__name__}: {e}")

    print()
    if failed == 0:
        print("All tests PASSED!")
        return 0
    print(f"{failed} test(s) FAILED!")
    return 1


if __name__ == "__main__":
    sys.exit(main())
