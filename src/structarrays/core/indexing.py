from __future__ import annotations

import numbers
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeGuard, cast

from structarrays.core.shape import as_array_size, as_range, lower_bound
from structarrays.errors import BoundsCheckError, NegativeStepError

if TYPE_CHECKING:
    from structarrays.core.common import AxisEntry, Coords, MemoryOrder, Shape

SelectionNormalized = tuple[int | slice, ...]


class IndexStyle(Enum):
    """
    How the function of a structured array is called.

    With ``LINEAR``, the function receives one flat index in ``0..size-1``. With
    ``CARTESIAN``, it receives one coordinate per dimension, expressed along each axis
    in the coordinates of that axis.
    """

    LINEAR = "linear"
    CARTESIAN = "cartesian"


def parse_index_style(data: Any) -> IndexStyle:
    if isinstance(data, IndexStyle):
        return data
    if isinstance(data, str):
        try:
            return IndexStyle(data.lower())
        except ValueError:
            pass
    msg = f"Expected one of ('linear', 'cartesian'), got {data!r} instead."
    raise ValueError(msg)


def normalize_order(order: Any) -> MemoryOrder:
    order = str(order).upper()
    if order not in ("C", "F"):
        raise ValueError(f"order must be either 'C' or 'F', found: {order!r}")
    return cast("MemoryOrder", order)


def err_too_many_indices(selection: Any, shape: Shape) -> None:
    raise IndexError(f"too many indices for array; expected {len(shape)}, got {len(selection)}")


def is_integer(x: Any) -> TypeGuard[int]:
    return isinstance(x, numbers.Integral) and not isinstance(x, bool)


def is_slice(s: Any) -> TypeGuard[slice]:
    return isinstance(s, slice)


def ensure_tuple(v: Any) -> tuple[Any, ...]:
    if not isinstance(v, tuple):
        v = (v,)
    return v


def normalize_integer_selection(dim_sel: int, entry: AxisEntry, wraparound: bool = True) -> int:
    """Absolute coordinate selected by ``dim_sel`` along the axis described by ``entry``.

    Negative values wrap around on bare-length axes when ``wraparound`` is set. Offset
    axes always take literal coordinates.
    """
    # normalize type to int
    index = int(dim_sel)

    if isinstance(entry, range):
        if index not in entry:
            raise BoundsCheckError(len(entry), dim_sel)
        return index

    # handle wraparound
    if wraparound and index < 0:
        index = entry + index

    # handle out of bounds
    if index >= entry or index < 0:
        raise BoundsCheckError(entry, dim_sel)

    return index


def normalize_linear_index(index: int, count: int, wraparound: bool = True) -> int:
    return normalize_integer_selection(index, count, wraparound)


def normalize_cartesian_index(
    selection: tuple[int, ...], shape: Shape, wraparound: bool = True
) -> Coords:
    """Check a full integer index against ``shape`` and return absolute coordinates.

    Trailing indices beyond the number of dimensions address implicit singleton
    dimensions: they must select the sole index ``0`` and are dropped.
    """
    ndim = len(shape)
    if len(selection) < ndim:
        raise IndexError(
            f"too few indices for array; expected {ndim}, got {len(selection)}"
        )
    for extra in selection[ndim:]:
        normalize_integer_selection(extra, 1, wraparound)
    return tuple(
        normalize_integer_selection(dim_sel, entry, wraparound)
        for dim_sel, entry in zip(selection, shape, strict=False)
    )


def cartesian_to_linear(coords: Coords, shape: Shape, order: MemoryOrder = "C") -> int:
    """Flat index of the element at absolute coordinates ``coords``."""
    dims = as_array_size(shape)
    offsets = [c - lower_bound(entry) for c, entry in zip(coords, shape, strict=True)]
    if order == "F":
        dims = dims[::-1]
        offsets.reverse()
    index = 0
    for offset, dim_len in zip(offsets, dims, strict=True):
        index = index * dim_len + offset
    return index


def linear_to_cartesian(index: int, shape: Shape, order: MemoryOrder = "C") -> Coords:
    """Absolute coordinates of the element with flat index ``index``."""
    dims = as_array_size(shape)
    offsets = []
    if order == "C":
        for dim_len in reversed(dims):
            index, offset = divmod(index, dim_len)
            offsets.append(offset)
        offsets.reverse()
    else:
        for dim_len in dims:
            index, offset = divmod(index, dim_len)
            offsets.append(offset)
    return tuple(offset + lower_bound(entry) for offset, entry in zip(offsets, shape, strict=True))


def replace_ellipsis(selection: Any, shape: Shape) -> SelectionNormalized:
    selection = ensure_tuple(selection)

    # count number of ellipsis present
    n_ellipsis = sum(1 for i in selection if i is Ellipsis)

    if n_ellipsis > 1:
        # more than 1 is an error
        raise IndexError("an index can only have a single ellipsis ('...')")

    elif n_ellipsis == 1:
        # locate the ellipsis, count how many items to left and right
        n_items_l = selection.index(Ellipsis)  # items to left of ellipsis
        n_items_r = len(selection) - (n_items_l + 1)  # items to right of ellipsis
        n_items = len(selection) - 1  # all non-ellipsis items

        if n_items >= len(shape):
            # ellipsis does nothing, just remove it
            selection = tuple(i for i in selection if i is not Ellipsis)

        else:
            # replace ellipsis with as many slices are needed for number of dims
            new_item = selection[:n_items_l] + ((slice(None),) * (len(shape) - n_items))
            if n_items_r:
                new_item += selection[-n_items_r:]
            selection = new_item

    # fill out selection if not completely specified
    if len(selection) < len(shape):
        selection += (slice(None),) * (len(shape) - len(selection))

    return cast(SelectionNormalized, selection)


def slice_to_range(s: slice, entry: AxisEntry) -> range:
    """Coordinates selected by slice ``s`` along the axis described by ``entry``.

    Slice bounds on offset axes are literal coordinates clipped to the axis.
    """
    if s.step is not None and s.step < 1:
        raise NegativeStepError
    if not isinstance(entry, range):
        return range(*s.indices(entry))
    lo, hi = entry.start, entry.stop
    start = lo if s.start is None else min(max(s.start, lo), hi)
    stop = hi if s.stop is None else min(max(s.stop, lo), hi)
    return range(start, max(start, stop), s.step or 1)


def selection_to_ranges(
    selection: Any, shape: Shape, wraparound: bool = True
) -> tuple[tuple[range, ...], tuple[int, ...]]:
    """Resolve a basic selection into the coordinates it selects along every axis.

    Returns
    -------
    ranges : tuple of range
        Selected coordinates, one range per dimension of ``shape``.
    drop_axes : tuple of int
        Dimensions selected by an integer, which do not appear in the result shape.
    """
    selection = replace_ellipsis(selection, shape)
    ndim = len(shape)

    ranges = []
    drop_axes = []
    for axis, (dim_sel, entry) in enumerate(zip(selection, shape, strict=False)):
        if is_integer(dim_sel):
            coord = normalize_integer_selection(dim_sel, entry, wraparound)
            ranges.append(range(coord, coord + 1))
            drop_axes.append(axis)
        elif is_slice(dim_sel):
            ranges.append(slice_to_range(dim_sel, entry))
        else:
            raise IndexError(
                "unsupported selection item for basic indexing; "
                f"expected integer or slice, got {type(dim_sel)!r}"
            )

    # trailing integers address implicit singleton dimensions
    for extra in selection[ndim:]:
        if not is_integer(extra):
            err_too_many_indices(selection, shape)
        normalize_integer_selection(extra, 1, wraparound)

    return tuple(ranges), tuple(drop_axes)


def is_total_selection(selection: Any, shape: Shape, wraparound: bool = True) -> bool:
    """Determine whether ``selection`` denotes every index of an array with the given
    ``shape``. Used to decide whether a uniform array can be overwritten."""
    ranges, _ = selection_to_ranges(selection, shape, wraparound)
    return ranges == tuple(as_range(entry) for entry in shape)
