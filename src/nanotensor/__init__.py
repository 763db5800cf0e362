"""
nanotensor: a minimal float32 N-dimensional tensor with reverse-mode autograd.

Typical usage
-------------
    from nanotensor import Tensor

    x = Tensor.from_nested([[1, 2, 3], [4, 5, 6]], requires_grad=True)
    loss = (x * x).sum()
    loss.backward()
    print(x.grad)
"""

from .domain import ShapeError, GraphError, ITensor, Function
from .infrastructure import (
    Tensor,
    Context,
    manual_seed,
    add,
    sub,
    mul,
    neg,
)

__version__ = "0.1.0"

__all__ = [
    ShapeError.__name__,
    GraphError.__name__,
    ITensor.__name__,
    Function.__name__,
    Tensor.__name__,
    Context.__name__,
    manual_seed.__name__,
    add.__name__,
    sub.__name__,
    mul.__name__,
    neg.__name__,
]
