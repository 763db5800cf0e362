"""
Human-readable tensor rendering.

Tensors print as ``tensor(<nested-literal>, dtype=float32)``. 1-D tensors are
a flat bracketed list; higher ranks are nested, newline-separated brackets,
indented by `INDENT_WIDTH` spaces per level.
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from ._constants import DTYPE, DTYPE_NAME, INDENT_WIDTH
from ._shape import unflatten


def format_number(value: float) -> str:
    """
    Format a single element using the shortest float32 round-trip digits.

    Integral values drop the trailing ``.0`` (``1`` rather than ``1.0``).
    """
    return np.format_float_positional(DTYPE.type(value), unique=True, trim="-")


def format_nested(nested: Any, indent: int = 0) -> str:
    """
    Recursively format the output of `unflatten` as a bracketed literal.

    Parameters
    ----------
    nested : list or np.ndarray
        Nested lists of 1-D views, a 1-D view, or a 0-d view.
    indent : int, optional
        Current indentation (number of spaces) of the closing bracket.
    """
    if isinstance(nested, np.ndarray):
        if nested.ndim == 0:
            return format_number(nested.item())
        return "[" + ", ".join(format_number(v) for v in nested) + "]"

    if not nested:
        return "[]"

    inner = indent + INDENT_WIDTH
    inner_pad = " " * inner
    lines = [inner_pad + format_nested(sub, inner) for sub in nested]
    return "[\n" + ",\n".join(lines) + "\n" + " " * indent + "]"


def format_tensor(data: np.ndarray, shape: Sequence[int]) -> str:
    """
    Render a flat buffer with the given shape as ``tensor(..., dtype=float32)``.
    """
    formatted = format_nested(unflatten(data, shape))
    return f"tensor({formatted}, dtype={DTYPE_NAME})"
