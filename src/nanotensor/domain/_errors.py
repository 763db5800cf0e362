"""
Shape- and graph-related exceptions for nanotensor.

This module defines the custom errors raised by tensor construction, reshape
and the backward pass. They allow the library to fail fast and clearly at the
exact point where an invariant is violated, before any buffer is allocated or
any gradient is written.

Builtin `TypeError` and `ValueError` are used directly for unsupported input
kinds and invalid numeric parameters; only failures with tensor-specific
meaning get a dedicated type.
"""

from typing import Any, Optional


class ShapeError(ValueError):
    """
    Raised when tensor shapes are inconsistent.

    Typical causes are ragged nested input (e.g. ``[[1, 2], [3]]``), a reshape
    whose element count differs from the source buffer, a buffer whose length
    does not match an explicitly requested shape, or a gradient whose shape
    differs from the tensor it is accumulated into.

    Attributes
    ----------
    expected : Any, optional
        The shape (or length) that was required, when known.
    actual : Any, optional
        The shape (or length) that was observed, when known.
    """

    def __init__(
        self,
        message: str,
        *,
        expected: Optional[Any] = None,
        actual: Optional[Any] = None,
    ) -> None:
        """
        Initialize the ShapeError.

        Parameters
        ----------
        message : str
            Human-readable description of the violation.
        expected : Any, optional
            Required shape or length.
        actual : Any, optional
            Observed shape or length.
        """
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class GraphError(RuntimeError):
    """
    Raised when the autograd graph reachable from a root is malformed.

    The graph is a DAG by construction: a node's parents exist before the
    node does. A cycle, or a `backward_fn` that does not return exactly one
    gradient per parent, indicates a bug in the layer that built the graph
    rather than a recoverable runtime state.

    Attributes
    ----------
    node : str, optional
        Short description of the tensor at which the problem was detected.
    """

    def __init__(self, message: str, *, node: Optional[str] = None) -> None:
        """
        Initialize the GraphError.

        Parameters
        ----------
        message : str
            Human-readable description of the problem.
        node : str, optional
            Description of the offending tensor.
        """
        super().__init__(message)
        self.node = node
