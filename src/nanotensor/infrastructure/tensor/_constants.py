"""
Library-wide tensor constants.

nanotensor is float32-only; these values are shared by storage allocation,
formatting and the random factories so they never drift apart.
"""

import numpy as np

DTYPE = np.dtype(np.float32)
"""Element type of every tensor buffer."""

DTYPE_NAME = "float32"
"""Name printed in the `dtype=` suffix of formatted tensors."""

INDENT_WIDTH = 2
"""Spaces added per nesting level when formatting tensors of rank >= 2."""
