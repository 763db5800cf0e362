"""
CPU-only random sampling helpers.

This module isolates NumPy RNG usage behind two samplers used by the tensor
factories:

- `sample_uniform`: float32 values in [0, 1).
- `sample_normal`: Box-Muller normal deviates. Each pair of uniforms
  ``(u1, u2)`` yields two deviates ``r*cos(theta)`` and ``r*sin(theta)`` for
  two consecutive output slots; for odd lengths the second deviate of the
  final pair is discarded.

A module-level `numpy.random.Generator` is shared by default and can be
reseeded with `manual_seed`. Callers may pass their own generator instead.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from ._constants import DTYPE

logger = logging.getLogger(__name__)

_default_generator: np.random.Generator = np.random.default_rng()


def manual_seed(seed: int) -> np.random.Generator:
    """
    Reseed the shared generator used by `rand` / `randn`.

    Parameters
    ----------
    seed : int
        Seed passed to `numpy.random.default_rng`.

    Returns
    -------
    numpy.random.Generator
        The new shared generator.
    """
    global _default_generator
    _default_generator = np.random.default_rng(seed)
    logger.debug("random generator reseeded with seed=%r", seed)
    return _default_generator


def default_generator() -> np.random.Generator:
    """Return the shared generator."""
    return _default_generator


def _resolve(generator: Optional[np.random.Generator]) -> np.random.Generator:
    return _default_generator if generator is None else generator


def sample_uniform(
    count: int, *, generator: Optional[np.random.Generator] = None
) -> np.ndarray:
    """
    Draw `count` float32 values uniformly from [0, 1).
    """
    rng = _resolve(generator)
    return rng.random(count, dtype=np.float32)


def sample_normal(
    count: int,
    *,
    mean: float = 0.0,
    std: float = 1.0,
    generator: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Draw `count` float32 normal deviates using the Box-Muller transform.

    Parameters
    ----------
    count : int
        Number of output values.
    mean : float, optional
        Mean of the distribution.
    std : float, optional
        Standard deviation; must be non-negative.
    generator : numpy.random.Generator, optional
        Source of uniforms; defaults to the shared generator.

    Returns
    -------
    np.ndarray
        1-D float32 array of length `count`.

    Raises
    ------
    ValueError
        If `std` is negative or not finite.
    """
    if not math.isfinite(std) or std < 0:
        raise ValueError(f"std must be a non-negative finite number, got {std!r}")

    rng = _resolve(generator)
    pairs = (count + 1) // 2

    # u1 in (0, 1] so log(u1) stays finite
    u1 = 1.0 - rng.random(pairs)
    u2 = rng.random(pairs)

    radius = np.sqrt(-2.0 * np.log(u1))
    theta = 2.0 * np.pi * u2

    out = np.empty(pairs * 2, dtype=np.float64)
    out[0::2] = radius * np.cos(theta)
    out[1::2] = radius * np.sin(theta)

    return (out[:count] * std + mean).astype(DTYPE)
