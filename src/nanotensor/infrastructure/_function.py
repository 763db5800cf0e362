"""
Reference differentiable operations.

This module contains the small set of elementwise and reduction operations
that build autograd graphs on top of the tensor core, expressed in a
function-style autograd API:

- Each differentiable operation is a `Function` subclass with
  `forward(ctx, ...)` and `backward(ctx, grad_out)` static methods.
- A `Context` stores the parents and anything needed by backward.
- Public functional wrappers (`add`, `sub`, `mul`, `neg`, `sum`) validate
  inputs, build the `Context`, invoke `forward`, and attach the context to the
  output only when some parent requires gradients.

Notes
-----
- Binary operations require exact shape equality; Python scalars are lifted
  to constant tensors of the other operand's shape.
- Forward and backward math runs on the flat NumPy buffers directly, so
  gradients never create autograd edges of their own.
"""

from typing import Optional, Sequence, Union

import numpy as np

from ..domain._errors import ShapeError
from ..domain._function import Function
from ..domain._tensor import Number
from .tensor._shape import is_number
from .tensor._tensor import Tensor
from .tensor._tensor_context import Context


def _as_tensor_like(x: Union[Tensor, Number], like: Tensor) -> Tensor:
    """
    Lift a Python scalar to a constant tensor with `like`'s shape.

    Raises
    ------
    TypeError
        If `x` is neither a Tensor nor a number.
    """
    if isinstance(x, Tensor):
        return x
    if is_number(x):
        return Tensor.full(like.shape, x)
    raise TypeError(f"Unsupported operand type: {type(x)!r}")


def _binary_operands(a: Union[Tensor, Number], b: Union[Tensor, Number]) -> tuple[Tensor, Tensor]:
    if not isinstance(a, Tensor) and not isinstance(b, Tensor):
        raise TypeError("At least one operand must be a Tensor")
    if isinstance(a, Tensor):
        b = _as_tensor_like(b, a)
    else:
        a = _as_tensor_like(a, b)
    if a.shape != b.shape:
        raise ShapeError(
            f"Shape mismatch: {a.shape} vs {b.shape}", expected=a.shape, actual=b.shape
        )
    return a, b


def _wrap(values: np.ndarray, shape: tuple[int, ...], *, requires_grad: bool = False) -> Tensor:
    return Tensor._from_flat(
        np.ascontiguousarray(values, dtype=np.float32).reshape(-1),
        shape,
        requires_grad=requires_grad,
    )


def _apply(fn: type, *parents: Tensor) -> Tensor:
    """
    Run `fn.forward` and attach a Context when any parent requires grad.
    """
    ctx = Context(
        parents=parents,
        backward_fn=lambda grad_out: fn.backward(ctx, grad_out),
    )
    out = fn.forward(ctx, *parents)
    if any(p.requires_grad for p in parents):
        out.requires_grad = True
        out._set_ctx(ctx)
    return out


class AddFn(Function):
    """
    Elementwise addition ``out = a + b``; both gradients equal ``grad_out``.
    """

    @staticmethod
    def forward(ctx, a: Tensor, b: Tensor) -> Tensor:
        return _wrap(a.data + b.data, a.shape)

    @staticmethod
    def backward(ctx, grad_out: Tensor) -> Sequence[Optional[Tensor]]:
        g = grad_out.data
        return (_wrap(g.copy(), grad_out.shape), _wrap(g.copy(), grad_out.shape))


class SubFn(Function):
    """
    Elementwise subtraction ``out = a - b``.
    """

    @staticmethod
    def forward(ctx, a: Tensor, b: Tensor) -> Tensor:
        return _wrap(a.data - b.data, a.shape)

    @staticmethod
    def backward(ctx, grad_out: Tensor) -> Sequence[Optional[Tensor]]:
        g = grad_out.data
        return (_wrap(g.copy(), grad_out.shape), _wrap(-g, grad_out.shape))


class MulFn(Function):
    """
    Elementwise product ``out = a * b``.

    Backward:

        d(out)/da = b,  d(out)/db = a

    Notes
    -----
    Both inputs are saved; their buffers are read at backward time.
    """

    @staticmethod
    def forward(ctx, a: Tensor, b: Tensor) -> Tensor:
        ctx.save_for_backward(a, b)
        return _wrap(a.data * b.data, a.shape)

    @staticmethod
    def backward(ctx, grad_out: Tensor) -> Sequence[Optional[Tensor]]:
        a, b = ctx.saved_tensors
        g = grad_out.data
        grad_a = _wrap(g * b.data, a.shape) if a.requires_grad else None
        grad_b = _wrap(g * a.data, b.shape) if b.requires_grad else None
        return (grad_a, grad_b)


class NegFn(Function):
    """
    Elementwise negation ``out = -x``.
    """

    @staticmethod
    def forward(ctx, x: Tensor) -> Tensor:
        return _wrap(-x.data, x.shape)

    @staticmethod
    def backward(ctx, grad_out: Tensor) -> Sequence[Optional[Tensor]]:
        return (_wrap(-grad_out.data, grad_out.shape),)


class SumFn(Function):
    """
    Full reduction ``out = sum(x)`` to a scalar tensor of shape ``()``.

    Backward broadcasts the scalar gradient back to the input shape.
    """

    @staticmethod
    def forward(ctx, x: Tensor) -> Tensor:
        ctx.saved_meta["input_shape"] = x.shape
        total = np.sum(x.data, dtype=np.float64)
        return _wrap(np.array([total]), ())

    @staticmethod
    def backward(ctx, grad_out: Tensor) -> Sequence[Optional[Tensor]]:
        shape = ctx.saved_meta["input_shape"]
        return (Tensor.full(shape, grad_out.item()),)


def add(a: Union[Tensor, Number], b: Union[Tensor, Number]) -> Tensor:
    """
    Elementwise ``a + b`` with autograd support.

    Raises
    ------
    TypeError
        If neither operand is a Tensor, or an operand is not a number.
    ShapeError
        If the operand shapes differ.
    """
    a, b = _binary_operands(a, b)
    return _apply(AddFn, a, b)


def sub(a: Union[Tensor, Number], b: Union[Tensor, Number]) -> Tensor:
    """
    Elementwise ``a - b`` with autograd support.
    """
    a, b = _binary_operands(a, b)
    return _apply(SubFn, a, b)


def mul(a: Union[Tensor, Number], b: Union[Tensor, Number]) -> Tensor:
    """
    Elementwise ``a * b`` with autograd support.
    """
    a, b = _binary_operands(a, b)
    return _apply(MulFn, a, b)


def neg(x: Tensor) -> Tensor:
    if not isinstance(x, Tensor):
        raise TypeError("neg expects a Tensor")
    return _apply(NegFn, x)


def sum(x: Tensor) -> Tensor:
    """
    Sum all elements of `x` into a scalar tensor of shape ``()``.
    """
    if not isinstance(x, Tensor):
        raise TypeError("sum expects a Tensor")
    return _apply(SumFn, x)
