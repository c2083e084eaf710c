"""
Grid Projection Module - Registry of rounding policies.

A rounding policy maps pixel coordinates to 1-based grid indices. Policies
are registered by name so scans can be compared across policies without
copying the classifier.
"""

from typing import Callable, Dict, List

import numpy as np


# fn(coords, extent, grid_size) -> raw grid indices (before clamping)
RoundingPolicy = Callable[[np.ndarray, int, int], np.ndarray]

# Global registry of policies
_POLICIES: Dict[str, RoundingPolicy] = {}

DEFAULT_POLICY = "ceil"


def register_policy(name: str) -> Callable[[RoundingPolicy], RoundingPolicy]:
    """
    Decorator to register a rounding policy.

    Usage:
        @register_policy("floor_plus_one")
        def _floor_plus_one(coords, extent, grid_size):
            ...

    Args:
        name: Policy identifier

    Returns:
        Decorator returning the function unchanged
    """
    def decorator(fn: RoundingPolicy) -> RoundingPolicy:
        _POLICIES[name] = fn
        return fn
    return decorator


@register_policy("ceil")
def _ceil_policy(coords: np.ndarray, extent: int, grid_size: int) -> np.ndarray:
    # grid_size * (x / extent), same operation order as the reference scan
    return np.ceil(grid_size * (coords / extent)).astype(np.int64)


@register_policy("round")
def _round_policy(coords: np.ndarray, extent: int, grid_size: int) -> np.ndarray:
    # Half-up, not numpy's half-to-even
    return np.floor(grid_size * (coords / extent) + 0.5).astype(np.int64)


def get_policy(name: str) -> RoundingPolicy:
    """
    Look up a rounding policy by name.

    Raises:
        ValueError: If policy name not found
    """
    if name not in _POLICIES:
        available = ", ".join(_POLICIES.keys())
        raise ValueError(f"Unknown rounding policy: {name}. Available: {available}")
    return _POLICIES[name]


def get_policy_names() -> List[str]:
    """List registered rounding policy names."""
    return list(_POLICIES.keys())


def project(coords, extent: int, grid_size: int, policy: str = DEFAULT_POLICY) -> np.ndarray:
    """
    Project pixel coordinates along one axis onto grid indices.

    Indices are clamped to grid_size. Results <= 0 mean the match lies before
    the first grid line and must be discarded by the caller.

    Args:
        coords: Pixel coordinates (scalar or array)
        extent: Raster width (for x) or height (for y)
        grid_size: Number of grid lines on the board
        policy: Rounding policy name

    Returns:
        int64 array of indices in (-inf, grid_size]
    """
    fn = get_policy(policy)
    raw = fn(np.asarray(coords, dtype=np.float64), extent, grid_size)
    return np.minimum(grid_size, raw)
