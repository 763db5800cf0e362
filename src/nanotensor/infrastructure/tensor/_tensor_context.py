from typing import Any, Callable, Sequence, Optional
from dataclasses import dataclass, field

from ...domain._tensor import ITensor


@dataclass
class Context:
    """
    Backward context attached to a Tensor produced by an operation.

    A `Context` is the edge list of a graph node: it records which tensors the
    node was computed from and how to turn the node's gradient into gradients
    for those tensors.

    Attributes
    ----------
    parents : Sequence[Tensor]
        The input tensors used to compute the output tensor, in the order the
        backward function returns their gradients.
    backward_fn : Callable[[Tensor], Sequence[Optional[Tensor]]]
        Takes the (accumulated) gradient of the output and returns one
        gradient per `parents` entry. Entries may be None for parents that do
        not require gradients.
    saved_tensors : list[ITensor]
        Tensors saved during the forward pass for use in backward.
    saved_meta : dict[str, Any]
        Non-tensor metadata required for backward (e.g. original shapes).
    """

    parents: Sequence["ITensor"]
    backward_fn: Callable[["ITensor"], Sequence[Optional["ITensor"]]]
    saved_tensors: list["ITensor"] = field(default_factory=list)
    saved_meta: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # parents are shared, read-only references; freeze the sequence
        self.parents = tuple(self.parents)

    def save_for_backward(self, *tensors: "ITensor") -> None:
        """
        Save tensors for use during the backward computation.

        Parameters
        ----------
        *tensors : Tensor
            Any number of tensors to be stored in `saved_tensors`.
        """
        self.saved_tensors.extend(tensors)
