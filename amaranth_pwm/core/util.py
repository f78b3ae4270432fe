"""Language-level utilities for Amaranth."""

import inspect

from amaranth import *


def ProductRepr(obj: object) -> str:
    # Use the non-self constructor arguments
    params = inspect.getfullargspec(type(obj).__init__).args[1:]
    clsname = type(obj).__name__
    if len(params) > 1:
        args = [f'{p}={getattr(obj, p)!r}' for p in params]
    else:
        args = [f'{getattr(obj, p)!r}' for p in params]
    return f'{clsname}({", ".join(args)})'


def ShapeMin(s: Shape) -> int:
    """The minimum value representable by s."""
    return -(2**(s.width - 1)) if s.signed else 0


def ShapeMax(s: Shape) -> int:
    """The maximum value representable by s."""
    return 2**(s.width - 1) - 1 if s.signed else 2**s.width - 1


def ShapeCovers(s: Shape, values: range) -> bool:
    """Whether every value in the range is representable by s."""
    return ShapeMin(s) <= values.start and values.stop - 1 <= ShapeMax(s)
