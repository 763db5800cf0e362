"""
Autograd function interface definitions.

This module defines the abstract base class for differentiable operations
built on top of the tensor core. Concrete subclasses implement both the
forward computation and the matching backward rule; the functional wrapper
that invokes them attaches a `Context` (parents + backward_fn) to the output.

The design follows function-level autograd systems (e.g., PyTorch's
`autograd.Function`) while staying small enough to audit by hand.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence, Union

from ._tensor import ITensor


class Function(ABC):
    """
    Abstract base class for differentiable operations.

    Subclasses must implement `forward` and `backward` as static methods.
    Anything needed for the backward pass is stored on the per-call `ctx`.

    Notes
    -----
    - `backward` must return exactly one entry per input passed to
      `forward`, in the same order. Entries may be None for inputs that do not
      need a gradient.
    - Methods are static so a `Function` class can be reused across graphs.
    """

    @staticmethod
    @abstractmethod
    def forward(ctx, *inputs: Union[ITensor, Any]) -> ITensor:
        """
        Perform the forward computation.

        Parameters
        ----------
        ctx : Context
            Per-call context used to save values for backward.
        *inputs : ITensor
            Input tensor(s) to the operation.

        Returns
        -------
        ITensor
            The output tensor.
        """
        ...

    @staticmethod
    @abstractmethod
    def backward(ctx, grad_out: ITensor) -> Sequence[Optional[ITensor]]:
        """
        Compute gradients with respect to the forward inputs.

        Parameters
        ----------
        ctx : Context
            The context populated during the forward pass.
        grad_out : ITensor
            Gradient of the root with respect to the operation's output.

        Returns
        -------
        Sequence[ITensor | None]
            One gradient per forward input, in input order.
        """
        ...
