"""Feature extraction helpers."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike


def _to_1d_array(signal: ArrayLike) -> np.ndarray:
    """Convert input to a flat float64 numpy array."""
    return np.asarray(signal, dtype=float).reshape(-1)


def rms(signal: ArrayLike) -> float:
    """
    Compute root-mean-square (RMS) value of a sequence of samples.

    Parameters
    ----------
    signal:
        Array-like of samples. Multi-dimensional input is flattened.

    Returns
    -------
    float
        ``sqrt(mean(x**2))``, or ``0.0`` for an empty sequence.
    """
    arr = _to_1d_array(signal)
    if arr.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(np.square(arr))))
