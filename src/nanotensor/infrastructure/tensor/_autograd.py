"""
Backward-pass engine.

The autograd graph is implicit: every tensor exposes `parents` and an
optional `backward_fn`. Running backward from a root happens in two steps:

1. `topological_order` performs an iterative depth-first post-order walk
   over `parents` edges, coloring nodes grey while they are on the DFS stack
   and black once finished. Meeting a grey node means the graph has a cycle.
2. `run_backward` visits the finished nodes in reverse finish order. Every
   consumer of a node therefore finishes contributing before the node's own
   `backward_fn` is called, and each node is visited once. A node's
   `backward_fn` receives only the gradient delivered during the current
   pass; `.grad` keeps the running total across passes.

Nodes with ``requires_grad=False`` are walked through structurally but never
receive gradient and never have their `backward_fn` invoked.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from ...domain._errors import GraphError

if TYPE_CHECKING:
    from ._tensor import Tensor

logger = logging.getLogger(__name__)

_GREY = 1
_BLACK = 2


def _describe(t: "Tensor") -> str:
    return f"Tensor(shape={t.shape}, requires_grad={t.requires_grad})"


def topological_order(root: "Tensor") -> list["Tensor"]:
    """
    Return the tensors reachable from `root`, parents before children.

    Parameters
    ----------
    root : Tensor
        Start of the walk.

    Returns
    -------
    list[Tensor]
        DFS finish order; `root` is the last element.

    Raises
    ------
    GraphError
        If a cycle is reachable from `root`.
    """
    color: dict[int, int] = {id(root): _GREY}
    order: list["Tensor"] = []
    stack = [(root, iter(root.parents))]

    while stack:
        node, pending = stack[-1]
        for parent in pending:
            state = color.get(id(parent))
            if state is None:
                color[id(parent)] = _GREY
                stack.append((parent, iter(parent.parents)))
                break
            if state == _GREY:
                raise GraphError(
                    "Cycle detected in autograd graph.", node=_describe(parent)
                )
        else:
            stack.pop()
            color[id(node)] = _BLACK
            order.append(node)

    return order


def run_backward(root: "Tensor", seed: "Tensor") -> None:
    """
    Propagate `seed` from `root` to every reachable tensor that requires
    gradients.

    Each call only propagates its own contribution. A per-call table keyed by
    node identity collects what this pass delivers to each node, and that
    table (not the running `.grad` total) is what each `backward_fn` receives.
    Contributions are added to `.grad` as they arrive, so repeated calls
    accumulate without re-sending earlier passes through intermediate nodes.

    Parameters
    ----------
    root : Tensor
        Tensor the pass starts from. The caller updates `root.grad`.
    seed : Tensor
        Gradient w.r.t. `root` for this pass.

    Raises
    ------
    GraphError
        If the graph has a cycle, or a `backward_fn` returns the wrong number
        of gradients.
    TypeError
        If a `backward_fn` returns something other than a Tensor or None.
    ShapeError
        If a returned gradient does not match its parent's shape.
    """
    order = topological_order(root)
    logger.debug("backward: %d tensor(s) reachable from %s", len(order), _describe(root))

    pending: dict[int, "Tensor"] = {id(root): seed}

    for node in reversed(order):
        if not node.requires_grad:
            continue
        backward_fn = node.backward_fn
        grad = pending.pop(id(node), None)
        if backward_fn is None or grad is None:
            continue

        parents = node.parents
        parent_grads = tuple(backward_fn(grad))
        if len(parent_grads) != len(parents):
            raise GraphError(
                "backward_fn must return one grad per parent. "
                f"Got {len(parent_grads)} grads for {len(parents)} parents.",
                node=_describe(node),
            )

        for parent, g in zip(parents, parent_grads):
            if g is None or not parent.requires_grad:
                continue
            parent._accumulate_grad_(g)
            _add_pending(pending, parent, g)


def _add_pending(pending: dict[int, "Tensor"], parent: "Tensor", g: "Tensor") -> None:
    key = id(parent)
    current = pending.get(key)
    if current is None:
        # pending entries own their buffers
        pending[key] = type(g)._from_flat(g.data.copy(), g.shape)
    else:
        np.add(current.data, g.data, out=current.data)
