"""
Normalization and validation of array shapes.

A shape is stored as a tuple with one entry per dimension. Each entry is either a bare
length ``n`` (the axis has indices ``0..n-1``) or a unit-step ``range`` (the axis has
indices ``r.start..r.stop-1``). Ranges starting at zero are collapsed to their length so
that the common case stores plain integers only.

Conversion (:func:`as_shape`) and validation (:func:`check_shape`) are separate passes.
:func:`as_shape` is a pure per-axis map that accepts any integer or range, and
:func:`check_shape` only raises. :func:`normalize_shape` runs both.
"""

from __future__ import annotations

import numbers
from typing import TYPE_CHECKING, Any

import numpy as np

from structarrays.core.common import product
from structarrays.errors import InvalidShapeError

if TYPE_CHECKING:
    from structarrays.core.common import AxisEntry, Coords, Shape

__all__ = [
    "as_array_axes",
    "as_array_size",
    "as_axis",
    "as_dimension",
    "as_range",
    "as_shape",
    "check_shape",
    "dimension_count",
    "element_count",
    "format_shape",
    "has_offset_axes",
    "lower_bound",
    "lower_bounds",
    "normalize_shape",
    "shape_of",
]


def _as_entry(x: Any) -> AxisEntry:
    if isinstance(x, numbers.Integral):
        return int(x)
    if isinstance(x, range):
        # zero-based ranges are stored as bare lengths
        if x.start == 0:
            return len(x)
        if not x:
            # empty ranges keep their start so that stop == start
            return range(x.start, x.start)
        return x
    raise InvalidShapeError(x, type(x).__name__)


def as_shape(x: Any, as_tuple: bool = False) -> AxisEntry | Shape:
    """Convert ``x`` to a proper array shape entry, or a tuple of entries if ``x`` is a
    tuple or a list.

    Integers are converted to ``int`` and ranges starting at zero are replaced by their
    length. No validation is performed, call :func:`check_shape` first.

    Parameters
    ----------
    x : int, range, tuple or list
        Axis specification(s).
    as_tuple : bool, optional
        If True, a single axis specification yields a 1-tuple.
    """
    if isinstance(x, (tuple, list)):
        return tuple(map(_as_entry, x))
    entry = _as_entry(x)
    if as_tuple:
        return (entry,)
    return entry


def _check_entry(x: Any) -> None:
    if isinstance(x, numbers.Integral) and not isinstance(x, bool):
        if x < 0:
            raise InvalidShapeError(f"array dimension must be nonnegative, got {x}")
    elif isinstance(x, range):
        if x.step != 1:
            raise InvalidShapeError(f"range has non-unit step: {x!r}")
    else:
        raise InvalidShapeError(x, type(x).__name__)


def check_shape(x: Any) -> None:
    """Raise :class:`InvalidShapeError` if ``as_shape(x)`` would not yield a proper array
    shape."""
    if isinstance(x, (tuple, list)):
        for entry in x:
            _check_entry(entry)
    else:
        _check_entry(x)


def normalize_shape(*args: Any) -> Shape:
    """Convenience function to normalize the axis specifications of an array.

    Accepts the axis specifications either as separate arguments or as a single tuple
    or list, e.g. ``normalize_shape(3, 4)`` and ``normalize_shape((3, range(-1, 2)))``.
    """
    # handle tuple/list convenience form
    if len(args) == 1 and isinstance(args[0], (tuple, list)):
        args = tuple(args[0])

    check_shape(args)
    return as_shape(args)


def as_dimension(entry: AxisEntry) -> int:
    """Length of a normalized shape entry."""
    if isinstance(entry, range):
        return len(entry)
    return entry


def as_axis(entry: AxisEntry) -> tuple[int, int]:
    """Inclusive ``(lower, upper)`` bounds of a normalized shape entry. An empty axis
    has ``upper == lower - 1``."""
    if isinstance(entry, range):
        return entry.start, entry.stop - 1
    return 0, entry - 1


def as_range(entry: AxisEntry) -> range:
    if isinstance(entry, range):
        return entry
    return range(entry)


def lower_bound(entry: AxisEntry) -> int:
    if isinstance(entry, range):
        return entry.start
    return 0


def as_array_size(shape: Shape) -> Coords:
    return tuple(map(as_dimension, shape))


def as_array_axes(shape: Shape) -> tuple[range, ...]:
    return tuple(map(as_range, shape))


def lower_bounds(shape: Shape) -> Coords:
    return tuple(map(lower_bound, shape))


def dimension_count(shape: Shape) -> int:
    return len(shape)


def element_count(shape: Shape) -> int:
    """Number of elements, 0 if any axis is empty and 1 for a 0-dimensional shape."""
    return product(as_array_size(shape))


def has_offset_axes(shape: Shape) -> bool:
    return any(isinstance(entry, range) for entry in shape)


def shape_of(a: Any) -> Shape:
    """Normalized shape of array ``a``.

    The result is similar to the axes of ``a`` except that axes starting at zero are
    replaced by their lengths, hence for a NumPy array ``shape_of(a) == a.shape``.
    structarrays containers directly store their shape.
    """
    if isinstance(a, np.ndarray):
        return a.shape
    inds = getattr(a, "inds", None)
    if inds is not None:
        return inds
    axes = getattr(a, "axes", None)
    if axes is not None:
        return normalize_shape(tuple(axes))
    return np.shape(a)


def format_shape(shape: Shape) -> str:
    return ", ".join(repr(entry) for entry in shape)
