"""
Tensor interface definitions.

This module defines the domain-level interface for tensor-like objects using
structural typing. The interface captures the backend-agnostic surface a
tensor must provide to participate in computation graphs: shape
introspection, flat storage access, formatting, and the autograd hooks.

Notes
-----
The domain layer does not import NumPy. Storage is typed as `Any` here; the
infrastructure implementation backs it with a 1-D float32 ndarray.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, Sequence, Union, runtime_checkable

from typing_extensions import Self

Number = Union[int, float]
"""Scalar operand accepted by factories and elementwise operators."""

BackwardFn = Callable[["ITensor"], Sequence[Optional["ITensor"]]]
"""Maps the gradient of a node to one gradient (or None) per parent."""


@runtime_checkable
class ITensor(Protocol):
    """
    Tensor interface.

    An `ITensor` is an N-dimensional float array with a shape descriptor and
    contiguous flat storage that may optionally record the operation which
    produced it.

    Notes
    -----
    - A tensor *is* a graph node; there is no separate node type.
    - `parents` and `backward_fn` are empty/None for leaf tensors.
    """

    # ---------------------------------------------------------------------
    # Storage and shape
    # ---------------------------------------------------------------------
    @property
    def shape(self) -> tuple[int, ...]:
        """
        Return the shape of the tensor.

        Returns
        -------
        tuple[int, ...]
            Dimension sizes, outermost first.
        """
        ...

    @property
    def data(self) -> Any:
        """
        Return the flat, row-major storage buffer.

        Returns
        -------
        Any
            Backend-native 1-D buffer whose length equals the product of
            `shape`.
        """
        ...

    def size(self, dim: Optional[int] = None) -> Union[int, tuple[int, ...]]:
        """
        Return the full shape, or the size of a single dimension.

        Parameters
        ----------
        dim : int, optional
            Dimension index; negative values count from the end.
        """
        ...

    def numel(self) -> int:
        """
        Return the total number of elements in the tensor.
        """
        ...

    def reshape(self, new_shape: Sequence[int]) -> Self:
        """
        Return a tensor with a new shape over the same storage.

        Raises
        ------
        ShapeError
            If the element counts differ.
        """
        ...

    def to_string(self) -> str:
        """
        Return the nested textual rendering of the tensor.
        """
        ...

    # ---------------------------------------------------------------------
    # Autograd flags and gradient storage
    # ---------------------------------------------------------------------
    @property
    def requires_grad(self) -> bool:
        """
        Indicate whether this tensor should accumulate gradients.
        """
        ...

    @requires_grad.setter
    def requires_grad(self, value: bool) -> None: ...

    @property
    def grad(self) -> Optional["ITensor"]:
        """
        Return the accumulated gradient, or None before the first contribution.
        """
        ...

    @property
    def parents(self) -> tuple["ITensor", ...]:
        """
        Return the tensors this tensor was derived from.
        """
        ...

    @property
    def backward_fn(self) -> Optional[BackwardFn]:
        """
        Return the backward rule of the producing operation, if any.
        """
        ...

    def zero_grad(self) -> None:
        """
        Reset the stored gradient to zeros without releasing it.
        """
        ...

    def backward(self, grad_out: Optional["ITensor"] = None) -> None:
        """
        Propagate gradients from this tensor to every reachable tensor that
        requires them.

        Parameters
        ----------
        grad_out : ITensor, optional
            Explicit upstream gradient accumulated into this tensor before
            propagation. When omitted, an existing `grad` is used as the seed,
            otherwise a tensor of ones.
        """
        ...
