"""Histogram and percentile helpers for choosing a display window."""

from typing import Optional, Tuple

import numpy as np


def _drop_nan(values) -> np.ndarray:
    values = np.asarray(values, dtype=np.float64).ravel()
    return values[~np.isnan(values)]


def compute_histogram(values, num_bins: int = 256,
                      vmin: Optional[float] = None,
                      vmax: Optional[float] = None) -> np.ndarray:
    """Counts of ``values`` in ``num_bins`` equal-width bins over ``[vmin, vmax]``.

    Values outside the range land in the first/last bin. NaN samples are not
    counted. A zero-width range is widened to ``[vmin, vmin + 1]``.
    """
    if num_bins <= 0:
        raise ValueError("num_bins must be positive")
    values = _drop_nan(values)
    if values.size == 0:
        return np.zeros(num_bins, dtype=np.int64)
    if vmin is None:
        vmin = float(values.min())
    if vmax is None:
        vmax = float(values.max())
    if vmin == vmax:
        vmax = vmin + 1
    bin_width = (vmax - vmin) / num_bins
    with np.errstate(invalid="ignore"):
        idx = np.floor((values - vmin) / bin_width)
    idx = np.clip(np.nan_to_num(idx, nan=0.0, posinf=num_bins - 1, neginf=0),
                  0, num_bins - 1).astype(np.int64)
    return np.bincount(idx, minlength=num_bins)


def percentile_range(values, lower: float = 0.0, upper: float = 1.0) -> Tuple[float, float]:
    """Values at fractions ``lower`` and ``upper`` of the sorted samples.

    Linear interpolation between neighbouring ranks; ``(0, 0)`` for no samples.
    """
    if not (0.0 <= lower <= 1.0 and 0.0 <= upper <= 1.0):
        raise ValueError("percentiles must be within [0, 1]")
    values = _drop_nan(values)
    if values.size == 0:
        return 0.0, 0.0
    low, high = np.quantile(values, [lower, upper])
    return float(low), float(high)


__all__ = ["compute_histogram", "percentile_range"]
