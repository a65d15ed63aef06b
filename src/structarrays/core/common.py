from __future__ import annotations

import functools
import operator
from collections.abc import Iterable
from typing import Literal

# One normalized axis: a bare length (indices 0..n-1) or a unit-step range
AxisEntry = int | range
Shape = tuple[AxisEntry, ...]
Coords = tuple[int, ...]
MemoryOrder = Literal["C", "F"]


def product(tup: Iterable[int]) -> int:
    return functools.reduce(operator.mul, tup, 1)
