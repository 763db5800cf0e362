"""
Concrete Tensor implementation (NumPy CPU backend).

This module provides the `Tensor` class that satisfies the domain-level
`ITensor` protocol. A tensor owns a flat, contiguous, 1-D float32 NumPy
buffer plus an immutable shape tuple; element ``(i0, ..., ik)`` lives at the
row-major offset given by `row_major_strides(shape)`.

Autograd is expressed by attaching an optional `Context` (parents +
backward_fn) to tensors produced by differentiable operations. `backward()`
seeds the root gradient and hands off to the engine in `_autograd`.

Design notes
------------
- Construction goes through a closed set of named factories
  (`from_nested`, `from_scalar`, `from_buffer`, `from_numpy`, `with_shape`,
  `zeros`, `ones`, `full`, `arange`, `rand`, `randn`). The constructor itself
  only allocates a zero-filled tensor of a given shape.
- Broadcasting is not implemented; elementwise operators require exact shape
  matches.
"""

from __future__ import annotations

import array
import logging
import math
from typing import Any, Optional, Sequence, Union

import numpy as np

from ...domain._errors import ShapeError
from ...domain._tensor import ITensor, BackwardFn, Number
from ._autograd import run_backward
from ._constants import DTYPE
from ._formatting import format_tensor
from ._random import sample_normal, sample_uniform
from ._shape import (
    flatten_nested,
    is_number,
    normalize_shape,
    numel,
    row_major_strides,
    unflatten,
)
from ._tensor_context import Context

logger = logging.getLogger(__name__)

ShapeLike = Union[int, Sequence[int]]


class Tensor(ITensor):
    """
    Float32 N-dimensional tensor with optional autograd history.

    Parameters
    ----------
    shape : int or Sequence[int]
        Tensor shape. A single integer is treated as a 1-element shape.
    requires_grad : bool, optional
        Whether this tensor should accumulate gradients during backprop.
        Defaults to False.
    ctx : Optional[Context], optional
        Backward context for autograd graph traversal. Typically set
        internally by differentiable operations. Defaults to None.

    Notes
    -----
    - The constructor allocates a zero-filled buffer, equivalent to
      `Tensor.with_shape`.
    - `_data` is always a 1-D float32 ndarray of length ``numel(shape)``.
    - Gradients (if any) are stored as another `Tensor` in `_grad`.
    """

    def __init__(
        self,
        shape: ShapeLike,
        *,
        requires_grad: bool = False,
        ctx: Optional[Context] = None,
    ) -> None:
        self._shape = normalize_shape(shape)
        self._data = np.zeros(numel(self._shape), dtype=DTYPE)

        # --- autograd fields (optional) ---
        self._requires_grad: bool = bool(requires_grad)
        self._grad: Optional["Tensor"] = None
        self._ctx: Optional[Context] = ctx

    @classmethod
    def _from_flat(
        cls,
        data: np.ndarray,
        shape: tuple[int, ...],
        *,
        requires_grad: bool = False,
        ctx: Optional[Context] = None,
    ) -> "Tensor":
        """
        Wrap an existing flat float32 buffer without copying it.

        This bypasses `__init__`; callers must pass a normalized shape and a
        1-D float32 buffer whose length matches it.
        """
        if data.shape != (numel(shape),):
            raise ShapeError(
                f"Buffer of length {data.size} cannot hold shape {shape}.",
                expected=numel(shape),
                actual=data.size,
            )
        obj = cls.__new__(cls)
        obj._shape = shape
        obj._data = data
        obj._requires_grad = bool(requires_grad)
        obj._grad = None
        obj._ctx = ctx
        return obj

    # ----------------------------
    # Factories
    # ----------------------------
    @classmethod
    def from_nested(cls, data: Sequence[Any], *, requires_grad: bool = False) -> "Tensor":
        """
        Create a tensor from nested lists/tuples of numbers.

        The whole input is validated before the buffer is allocated.

        Raises
        ------
        TypeError
            If `data` is not a list/tuple or contains a non-numeric leaf.
        ShapeError
            If sibling sequences differ in length or numbers sit at
            different depths.
        """
        flat, shape = flatten_nested(data)
        return cls._from_flat(flat, shape, requires_grad=requires_grad)

    @classmethod
    def from_scalar(cls, value: Number, *, requires_grad: bool = False) -> "Tensor":
        """
        Create a one-element tensor of shape ``(1,)`` holding `value`.
        """
        if not is_number(value):
            raise TypeError(f"from_scalar expects an int or float, got {type(value)!r}")
        flat = np.array([value], dtype=DTYPE)
        return cls._from_flat(flat, (1,), requires_grad=requires_grad)

    @classmethod
    def from_buffer(
        cls,
        buffer: Union[np.ndarray, array.array, memoryview],
        shape: Optional[ShapeLike] = None,
        *,
        requires_grad: bool = False,
    ) -> "Tensor":
        """
        Create a tensor over a flat numeric buffer.

        A contiguous 1-D float32 buffer is used as-is (no copy), so writes
        through either side are visible to the other. Other numeric dtypes
        are converted to a new float32 buffer.

        Parameters
        ----------
        buffer : np.ndarray, array.array or memoryview
            Flat numeric storage.
        shape : int or Sequence[int], optional
            Shape to view the buffer with; defaults to ``(len(buffer),)``.

        Raises
        ------
        TypeError
            If `buffer` is not a supported buffer type or is not numeric.
        ShapeError
            If the buffer is not 1-D or its length does not match `shape`.
        """
        if not isinstance(buffer, (np.ndarray, array.array, memoryview)):
            raise TypeError(
                f"from_buffer expects an ndarray, array.array or memoryview, got {type(buffer)!r}"
            )
        arr = np.asarray(buffer)
        if arr.dtype.kind not in "iuf":
            raise TypeError(f"from_buffer expects numeric data, got dtype={arr.dtype}")
        if arr.ndim != 1:
            raise ShapeError(
                f"from_buffer expects a flat buffer, got an array with shape {arr.shape}.",
                actual=arr.shape,
            )
        flat = np.ascontiguousarray(arr, dtype=DTYPE)

        resolved = (flat.size,) if shape is None else normalize_shape(shape)
        if numel(resolved) != flat.size:
            raise ShapeError(
                f"Buffer of length {flat.size} does not match shape {resolved}.",
                expected=numel(resolved),
                actual=flat.size,
            )
        return cls._from_flat(flat, resolved, requires_grad=requires_grad)

    @classmethod
    def from_numpy(cls, arr: np.ndarray, *, requires_grad: bool = False) -> "Tensor":
        """
        Create a tensor holding a float32 copy of an ndarray of any rank.
        """
        if not isinstance(arr, np.ndarray):
            raise TypeError(f"from_numpy expects an ndarray, got {type(arr)!r}")
        if arr.dtype.kind not in "iuf":
            raise TypeError(f"from_numpy expects numeric data, got dtype={arr.dtype}")
        flat = np.array(arr, dtype=DTYPE).reshape(-1)
        return cls._from_flat(flat, tuple(arr.shape), requires_grad=requires_grad)

    @classmethod
    def with_shape(cls, shape: ShapeLike, *, requires_grad: bool = False) -> "Tensor":
        """
        Allocate a zero-filled tensor of the given shape.
        """
        return cls(shape, requires_grad=requires_grad)

    @classmethod
    def zeros(cls, shape: ShapeLike, *, requires_grad: bool = False) -> "Tensor":
        """
        Create a tensor filled with zeros.
        """
        return cls(shape, requires_grad=requires_grad)

    @classmethod
    def ones(cls, shape: ShapeLike, *, requires_grad: bool = False) -> "Tensor":
        """
        Create a tensor filled with ones.
        """
        return cls.full(shape, 1.0, requires_grad=requires_grad)

    @classmethod
    def full(
        cls, shape: ShapeLike, fill_value: Number, *, requires_grad: bool = False
    ) -> "Tensor":
        """
        Create a tensor filled with a constant value.

        Raises
        ------
        TypeError
            If `fill_value` is not a number.
        """
        if not is_number(fill_value):
            raise TypeError(f"fill_value must be a number, got {type(fill_value)!r}")
        t = cls(shape, requires_grad=requires_grad)
        t._data.fill(fill_value)
        return t

    @classmethod
    def zeros_like(cls, other: "Tensor", *, requires_grad: bool = False) -> "Tensor":
        return cls(other.shape, requires_grad=requires_grad)

    @classmethod
    def ones_like(cls, other: "Tensor", *, requires_grad: bool = False) -> "Tensor":
        return cls.ones(other.shape, requires_grad=requires_grad)

    @classmethod
    def arange(
        cls,
        start: Number,
        stop: Optional[Number] = None,
        step: Number = 1,
        *,
        requires_grad: bool = False,
    ) -> "Tensor":
        """
        Create a 1-D tensor of evenly spaced values in ``[start, stop)``.

        With a single argument the range is ``[0, start)``.

        Raises
        ------
        TypeError
            If any bound is not a number.
        ValueError
            If `step` is zero or a bound is not finite.
        """
        if stop is None:
            start, stop = 0, start
        for name, v in (("start", start), ("stop", stop), ("step", step)):
            if not is_number(v):
                raise TypeError(f"arange {name} must be a number, got {type(v)!r}")
            if not math.isfinite(v):
                raise ValueError(f"arange {name} must be finite, got {v!r}")
        if step == 0:
            raise ValueError("arange step must be non-zero.")

        count = max(0, math.ceil((stop - start) / step))
        flat = (start + step * np.arange(count, dtype=np.float64)).astype(DTYPE)
        return cls._from_flat(flat, (count,), requires_grad=requires_grad)

    @classmethod
    def rand(
        cls,
        shape: ShapeLike,
        *,
        requires_grad: bool = False,
        generator: Optional[np.random.Generator] = None,
    ) -> "Tensor":
        """
        Create a tensor of uniform random values in [0, 1).
        """
        resolved = normalize_shape(shape)
        flat = sample_uniform(numel(resolved), generator=generator)
        return cls._from_flat(flat, resolved, requires_grad=requires_grad)

    @classmethod
    def randn(
        cls,
        shape: ShapeLike,
        *,
        mean: float = 0.0,
        std: float = 1.0,
        requires_grad: bool = False,
        generator: Optional[np.random.Generator] = None,
    ) -> "Tensor":
        """
        Create a tensor of normal random values (Box-Muller).
        """
        resolved = normalize_shape(shape)
        flat = sample_normal(numel(resolved), mean=mean, std=std, generator=generator)
        return cls._from_flat(flat, resolved, requires_grad=requires_grad)

    # ----------------------------
    # Storage and shape
    # ----------------------------
    @property
    def shape(self) -> tuple[int, ...]:
        return self._shape

    @property
    def data(self) -> np.ndarray:
        """
        Return the flat, row-major float32 buffer backing this tensor.

        The buffer is returned without copying; writing into it mutates the
        tensor.
        """
        return self._data

    @property
    def dtype(self) -> np.dtype:
        return DTYPE

    @property
    def ndim(self) -> int:
        return len(self._shape)

    def size(self, dim: Optional[int] = None) -> Union[int, tuple[int, ...]]:
        """
        Return the shape, or the size of dimension `dim`.

        Raises
        ------
        IndexError
            If `dim` is out of range.
        """
        if dim is None:
            return self._shape
        ndim = len(self._shape)
        if not -ndim <= dim < ndim:
            raise IndexError(
                f"Dimension out of range (expected to be in [{-ndim}, {ndim - 1}], got {dim})"
            )
        return self._shape[dim]

    def stride(self) -> tuple[int, ...]:
        """
        Return the row-major element strides of this tensor.
        """
        return row_major_strides(self._shape)

    def numel(self) -> int:
        return self._data.size

    def item(self) -> float:
        """
        Return the value of a one-element tensor as a Python float.

        Raises
        ------
        ValueError
            If the tensor does not hold exactly one element.
        """
        if self._data.size != 1:
            raise ValueError(
                f"item() requires a tensor with one element, got shape {self._shape}"
            )
        return float(self._data[0])

    def to_numpy(self) -> np.ndarray:
        """
        Return a shaped view of the buffer (no copy).
        """
        return self._data.reshape(self._shape)

    def tolist(self) -> Any:
        """
        Return the contents as nested Python lists of floats.
        """
        nested = unflatten(self._data, self._shape)

        def convert(node: Any) -> Any:
            if isinstance(node, np.ndarray):
                return node.tolist()
            return [convert(sub) for sub in node]

        return convert(nested)

    def reshape(self, new_shape: ShapeLike) -> "Tensor":
        """
        Return a tensor with a new shape sharing this tensor's buffer.

        A single ``-1`` entry is inferred from the remaining dimensions.

        Raises
        ------
        ShapeError
            If the element count of `new_shape` differs from this tensor's,
            or the shape holds more than one ``-1``.

        Notes
        -----
        - No data is copied; writes through either tensor are visible to the
          other.
        - Backward: reshapes the gradient back to the original shape.
        """
        resolved = self._resolve_reshape(new_shape)
        out = Tensor._from_flat(self._data, resolved, requires_grad=self.requires_grad)
        logger.debug("reshape %s -> %s", self._shape, resolved)

        if self.requires_grad:
            src_shape = self._shape

            def backward_fn(grad_out: "Tensor"):
                return (grad_out.reshape(src_shape),)

            out._set_ctx(Context(parents=(self,), backward_fn=backward_fn))

        return out

    def _resolve_reshape(self, new_shape: ShapeLike) -> tuple[int, ...]:
        dims = (new_shape,) if isinstance(new_shape, (int, np.integer)) else tuple(new_shape)
        infer = [i for i, d in enumerate(dims) if isinstance(d, (int, np.integer)) and d == -1]
        if len(infer) > 1:
            raise ShapeError(f"Only one dimension can be inferred, got {dims}.", actual=dims)

        if infer:
            known = normalize_shape(dims[: infer[0]] + dims[infer[0] + 1 :])
            known_count = numel(known)
            if known_count == 0 or self._data.size % known_count != 0:
                raise ShapeError(
                    f"Cannot reshape tensor of shape {self._shape} into {dims}.",
                    expected=self._shape,
                    actual=dims,
                )
            resolved = list(known)
            resolved.insert(infer[0], self._data.size // known_count)
            return tuple(resolved)

        resolved = normalize_shape(dims)
        if numel(resolved) != self._data.size:
            raise ShapeError(
                f"Cannot reshape tensor of shape {self._shape} "
                f"({self._data.size} elements) into {resolved}.",
                expected=self._data.size,
                actual=numel(resolved),
            )
        return resolved

    def detach(self) -> "Tensor":
        """
        Return a tensor sharing this buffer with no autograd history.
        """
        return Tensor._from_flat(self._data, self._shape, requires_grad=False)

    # ----------------------------
    # Formatting
    # ----------------------------
    def to_string(self) -> str:
        """
        Render as ``tensor(<nested-literal>, dtype=float32)``.
        """
        return format_tensor(self._data, self._shape)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return self.to_string()

    # ----------------------------
    # Autograd
    # ----------------------------
    @property
    def requires_grad(self) -> bool:
        return self._requires_grad

    @requires_grad.setter
    def requires_grad(self, value: bool) -> None:
        self._requires_grad = bool(value)

    @property
    def grad(self) -> Optional["Tensor"]:
        """
        Return the accumulated gradient, or None if nothing has flowed here.
        """
        return self._grad

    @property
    def parents(self) -> tuple["Tensor", ...]:
        """
        Return the tensors this tensor was computed from (empty for leaves).
        """
        if self._ctx is None:
            return ()
        return tuple(self._ctx.parents)

    @property
    def backward_fn(self) -> Optional[BackwardFn]:
        if self._ctx is None:
            return None
        return self._ctx.backward_fn

    def is_leaf(self) -> bool:
        return self._ctx is None

    def _set_ctx(self, ctx: Optional[Context]) -> None:
        """
        Attach or detach the backward context.

        This is an internal hook for differentiable operations.
        """
        self._ctx = ctx

    def _get_ctx(self) -> Optional[Context]:
        return self._ctx

    def zero_grad(self) -> None:
        """
        Reset the gradient to zeros in place.

        The gradient tensor keeps its shape and allocation; a tensor that has
        no gradient yet is left untouched.
        """
        if self._grad is not None:
            self._grad._data.fill(0.0)

    def _accumulate_grad_(self, g: "Tensor") -> None:
        """
        Add `g` into `self.grad`, allocating zeros on the first contribution.

        Raises
        ------
        TypeError
            If `g` is not a Tensor.
        ShapeError
            If `g` does not have this tensor's shape.
        """
        if not isinstance(g, Tensor):
            raise TypeError(f"Gradient must be a Tensor, got {type(g)!r}")
        if g.shape != self._shape:
            raise ShapeError(
                f"Gradient shape mismatch: expected {self._shape}, got {g.shape}",
                expected=self._shape,
                actual=g.shape,
            )

        if self._grad is None:
            self._grad = Tensor(self._shape)

        # numpy in-place add; creates no autograd edges
        np.add(self._grad._data, g._data, out=self._grad._data)

    def backward(self, grad_out: Optional["Tensor"] = None) -> None:
        """
        Backpropagate gradients from this tensor through the autograd graph.

        Parameters
        ----------
        grad_out : Optional[Tensor], optional
            Gradient w.r.t. this tensor, accumulated into `grad` before
            propagation. If omitted, an existing `grad` is used as the seed,
            otherwise `grad` is seeded with ones.

        Raises
        ------
        GraphError
            If a cycle is reachable, or a backward function returns the wrong
            number of gradients.
        ShapeError
            If `grad_out` or a propagated gradient has the wrong shape.

        Notes
        -----
        - Calling backward on a tensor that does not require gradients does
          nothing.
        - Gradients accumulate into `.grad` of every reachable tensor that has
          ``requires_grad=True``, including intermediate ones.
        """
        if not self._requires_grad:
            logger.debug("backward() called on a tensor that does not require grad")
            return

        if grad_out is not None:
            self._accumulate_grad_(grad_out)
            seed = grad_out
        else:
            if self._grad is None:
                self._grad = Tensor.ones(self._shape)
            seed = self._grad

        run_backward(self, seed)

    # ----------------------------
    # Elementwise operators
    # ----------------------------
    def __add__(self, other: Union["Tensor", Number]) -> "Tensor":
        from .._function import add

        return add(self, other)

    def __radd__(self, other: Number) -> "Tensor":
        from .._function import add

        return add(other, self)

    def __sub__(self, other: Union["Tensor", Number]) -> "Tensor":
        from .._function import sub

        return sub(self, other)

    def __rsub__(self, other: Number) -> "Tensor":
        from .._function import sub

        return sub(other, self)

    def __mul__(self, other: Union["Tensor", Number]) -> "Tensor":
        from .._function import mul

        return mul(self, other)

    def __rmul__(self, other: Number) -> "Tensor":
        from .._function import mul

        return mul(other, self)

    def __neg__(self) -> "Tensor":
        from .._function import neg

        return neg(self)

    def sum(self) -> "Tensor":
        """
        Sum all elements into a scalar tensor of shape ``()``.
        """
        from .._function import sum as sum_

        return sum_(self)
