"""
Shape inference, flattening and unflattening helpers (NumPy CPU backend).

This module holds the purely structural algorithms behind tensor
construction and display:

- `infer_shape` walks nested literal data and validates that every list at a
  given depth has the same length and that every number sits at the same
  depth. It never allocates the output buffer.
- `flatten_nested` linearizes validated nested data into a row-major float32
  buffer.
- `unflatten` rebuilds the nested structure from a flat buffer as NumPy views.
- `normalize_shape`, `numel` and `row_major_strides` are shared by every
  factory that accepts an explicit shape.

Design notes
------------
- Walks are iterative (explicit stack) so deeply nested input cannot hit the
  interpreter recursion limit during validation.
- Numbers are `int`/`float` and NumPy integer/floating scalars. `bool` is
  rejected even though it subclasses `int`.
"""

from __future__ import annotations

from typing import Any, Iterator, Sequence, Union

import numpy as np

from ...domain._errors import ShapeError
from ._constants import DTYPE

NestedList = Union[list, tuple]


def is_number(value: Any) -> bool:
    """
    Return True if `value` is a real scalar accepted as tensor element.
    """
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating))


def _is_nested(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def numel(shape: Sequence[int]) -> int:
    """
    Return the number of elements described by `shape`.

    The empty shape describes a scalar and has one element.
    """
    n = 1
    for d in shape:
        n *= int(d)
    return n


def row_major_strides(shape: Sequence[int]) -> tuple[int, ...]:
    """
    Return element strides for a contiguous row-major buffer.

    ``stride[d] == product(shape[d + 1:])``, so the element at multi-index
    ``(i0, ..., ik)`` lives at ``sum(i * s for i, s in zip(index, strides))``.
    """
    strides = []
    acc = 1
    for d in reversed(tuple(shape)):
        strides.append(acc)
        acc *= int(d)
    return tuple(reversed(strides))


def normalize_shape(shape: Union[int, Sequence[int]]) -> tuple[int, ...]:
    """
    Normalize a user-facing shape into a tuple of non-negative ints.

    Parameters
    ----------
    shape : int or Sequence[int]
        A single integer is treated as a 1-element shape.

    Returns
    -------
    tuple[int, ...]
        The normalized shape.

    Raises
    ------
    TypeError
        If the shape or one of its entries is not an integer.
    ShapeError
        If a dimension is negative.
    """
    if isinstance(shape, (int, np.integer)) and not isinstance(shape, bool):
        dims: Sequence[Any] = (shape,)
    elif isinstance(shape, (list, tuple)):
        dims = shape
    else:
        raise TypeError(f"shape must be an int or a sequence of ints, got {type(shape)!r}")

    out = []
    for d in dims:
        if isinstance(d, bool) or not isinstance(d, (int, np.integer)):
            raise TypeError(f"shape entries must be integers, got {d!r} in {tuple(dims)!r}")
        if d < 0:
            raise ShapeError(
                f"shape entries must be non-negative, got {tuple(dims)!r}",
                actual=tuple(dims),
            )
        out.append(int(d))
    return tuple(out)


def infer_shape(data: NestedList) -> tuple[int, ...]:
    """
    Infer and validate the shape of nested literal data.

    Parameters
    ----------
    data : list or tuple
        Nested sequences of numbers.

    Returns
    -------
    tuple[int, ...]
        The inferred shape, outermost dimension first.

    Raises
    ------
    TypeError
        If `data` is not a list/tuple, or a leaf is not a number.
    ShapeError
        If sibling sequences differ in length, or numbers appear at different
        nesting depths.
    """
    if not _is_nested(data):
        raise TypeError(f"nested data must be a list or tuple, got {type(data)!r}")

    shape: list[int] = []
    leaf_depth = None
    stack = [(data, 0)]

    while stack:
        node, depth = stack.pop()

        if _is_nested(node):
            if leaf_depth is not None and depth >= leaf_depth:
                raise ShapeError(
                    f"Inconsistent shape in nested data: found a sequence at depth "
                    f"{depth} where numbers were found at depth {leaf_depth}."
                )
            if len(shape) <= depth:
                shape.append(len(node))
            elif shape[depth] != len(node):
                raise ShapeError(
                    f"Inconsistent shape in nested data: expected length "
                    f"{shape[depth]} at depth {depth}, got {len(node)}.",
                    expected=shape[depth],
                    actual=len(node),
                )
            for i in range(len(node) - 1, -1, -1):
                stack.append((node[i], depth + 1))
            continue

        if not is_number(node):
            raise TypeError(f"Unsupported element type in nested data: {type(node)!r}")
        if leaf_depth is None:
            leaf_depth = depth
        elif leaf_depth != depth:
            raise ShapeError(
                f"Inconsistent shape in nested data: numbers found at depths "
                f"{leaf_depth} and {depth}."
            )

    if leaf_depth is not None and leaf_depth != len(shape):
        raise ShapeError(
            f"Inconsistent shape in nested data: numbers at depth {leaf_depth} "
            f"but sequences nest {len(shape)} deep."
        )
    return tuple(shape)


def _iter_leaves(data: NestedList) -> Iterator[float]:
    # Children are pushed in reverse so they pop in row-major order.
    stack = [data]
    while stack:
        node = stack.pop()
        if _is_nested(node):
            stack.extend(reversed(node))
        else:
            yield float(node)


def flatten_nested(data: NestedList) -> tuple[np.ndarray, tuple[int, ...]]:
    """
    Validate nested data and linearize it into a row-major float32 buffer.

    The input is fully validated by `infer_shape` before the output buffer is
    allocated, so a failure leaves nothing partially constructed.

    Returns
    -------
    tuple[np.ndarray, tuple[int, ...]]
        The flat 1-D float32 buffer and the inferred shape.
    """
    shape = infer_shape(data)
    count = numel(shape)
    flat = np.fromiter(_iter_leaves(data), dtype=DTYPE, count=count)
    return flat, shape


def unflatten(data: np.ndarray, shape: Sequence[int], offset: int = 0) -> Any:
    """
    Rebuild the nested structure of a flat buffer without copying it.

    The buffer is partitioned into ``shape[0]`` contiguous chunks of
    ``product(shape[1:])`` elements, recursively. Innermost rows are returned
    as 1-D NumPy views into `data`.

    Parameters
    ----------
    data : np.ndarray
        Flat row-major buffer.
    shape : Sequence[int]
        Target shape; ``numel(shape)`` elements starting at `offset` are used.
    offset : int, optional
        Starting index into `data` (used by the recursion).

    Returns
    -------
    list or np.ndarray
        Nested lists of views for rank >= 2, a 1-D view for rank 1, and a 0-d
        view for the empty shape.
    """
    shape = tuple(shape)
    if not shape:
        return data[offset : offset + 1].reshape(())
    if len(shape) == 1:
        return data[offset : offset + shape[0]]

    sub_size = numel(shape[1:])
    return [
        unflatten(data, shape[1:], offset + i * sub_size) for i in range(shape[0])
    ]
