"""
NumPy-backed tensor implementation, its autograd context and engine.
"""

from ._tensor import Tensor
from ._tensor_context import Context
from ._random import manual_seed

__all__ = [
    Tensor.__name__,
    Context.__name__,
    manual_seed.__name__,
]
