"""
Builtin implementations for extern declarations.

An extern such as `extern sin(x);` binds to the entry of the same name. All
math builtins are numpy ufuncs so they follow IEEE semantics (sqrt(-1) is
nan, log(0) is -inf) instead of raising.
"""

from typing import Callable, Dict

import numpy as np


MATH_BUILTINS: Dict[str, Callable[..., np.float64]] = {
    "sin": np.sin,
    "cos": np.cos,
    "tan": np.tan,
    "atan": np.arctan,
    "sqrt": np.sqrt,
    "exp": np.exp,
    "log": np.log,
    "fabs": np.fabs,
    "floor": np.floor,
    "pow": np.power,
}

BUILTIN_ARITIES: Dict[str, int] = {
    "sin": 1,
    "cos": 1,
    "tan": 1,
    "atan": 1,
    "sqrt": 1,
    "exp": 1,
    "log": 1,
    "fabs": 1,
    "floor": 1,
    "pow": 2,
    "printd": 1,
    "putchard": 1,
}
