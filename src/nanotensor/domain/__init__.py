"""
Backend-agnostic interfaces and error types for nanotensor.
"""

from ._errors import ShapeError, GraphError
from ._tensor import ITensor, BackwardFn, Number
from ._function import Function

__all__ = [
    ShapeError.__name__,
    GraphError.__name__,
    ITensor.__name__,
    Function.__name__,
    "BackwardFn",
    "Number",
]
