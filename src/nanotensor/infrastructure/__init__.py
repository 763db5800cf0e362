"""
Concrete (NumPy CPU) implementations of the nanotensor domain interfaces.
"""

from .tensor import Tensor, Context, manual_seed
from ._function import AddFn, SubFn, MulFn, NegFn, SumFn, add, sub, mul, neg

__all__ = [
    Tensor.__name__,
    Context.__name__,
    manual_seed.__name__,
    AddFn.__name__,
    SubFn.__name__,
    MulFn.__name__,
    NegFn.__name__,
    SumFn.__name__,
    add.__name__,
    sub.__name__,
    mul.__name__,
    neg.__name__,
]
