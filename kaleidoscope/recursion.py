"""
Recursion limit management.

The parser, the resolver, the printer and the evaluator all walk the tree
recursively. Their depth is bounded (by the parser's nesting limit and the
evaluator's call depth), but the bound can sit above the interpreter's
default recursion limit.
"""

import sys
from contextlib import contextmanager


@contextmanager
def recursion_headroom(frames: int):
    """Raise the interpreter recursion limit by ``frames`` for the block."""
    previous = sys.getrecursionlimit()
    sys.setrecursionlimit(previous + frames)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)
