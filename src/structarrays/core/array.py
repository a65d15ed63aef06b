from __future__ import annotations

import functools
import itertools
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any, ClassVar, Literal, overload

import numpy as np
import numpy.typing as npt

from structarrays.core.common import product
from structarrays.core.config import config
from structarrays.core.indexing import (
    IndexStyle,
    cartesian_to_linear,
    ensure_tuple,
    is_integer,
    is_total_selection,
    linear_to_cartesian,
    normalize_cartesian_index,
    normalize_linear_index,
    normalize_order,
    parse_index_style,
    selection_to_ranges,
)
from structarrays.core.shape import (
    as_array_axes,
    as_array_size,
    as_dimension,
    as_range,
    element_count,
    format_shape,
    has_offset_axes,
    lower_bounds,
    normalize_shape,
)
from structarrays.errors import AxisBoundsError, ReadOnlyError, UnsupportedWriteError

if TYPE_CHECKING:
    from structarrays.core.common import Coords, MemoryOrder, Shape

__all__ = [
    "AbstractStructuredArray",
    "AbstractUniformArray",
    "FastUniformArray",
    "FlatIndex",
    "MutableUniformArray",
    "StructuredArray",
    "UniformArray",
    "infer_dtype",
]

logger = getLogger(__name__)


def infer_dtype(value: Any) -> np.dtype[Any]:
    """NumPy data type able to hold ``value``.

    Numbers get their natural NumPy type. Strings, bytes and anything else (tuples,
    arrays, arbitrary objects) are stored with the ``object`` data type, fixed-width
    string types would truncate longer values.
    """
    if np.isscalar(value) and not isinstance(value, (str, bytes)):
        return np.asarray(value).dtype
    return np.dtype(object)


def _converter(dtype: np.dtype[Any]) -> Callable[[Any], Any]:
    if dtype.hasobject:
        return _identity

    def convert(value: Any) -> Any:
        if np.ndim(value) != 0:
            raise ValueError(
                f"expected a scalar value for data type {dtype}, got {type(value).__name__}"
            )
        # same cast as storing into an array of this dtype, e.g. truncation to "<U2"
        return np.asarray(value, dtype=dtype)[()]

    return convert


def _accumulator(dtype: np.dtype[Any]) -> np.dtype[Any]:
    """Data type NumPy uses to sum or multiply elements of ``dtype``."""
    if dtype.kind in "bi" and dtype.itemsize < np.dtype(np.int_).itemsize:
        return np.dtype(np.int_)
    if dtype.kind == "u" and dtype.itemsize < np.dtype(np.uint).itemsize:
        return np.dtype(np.uint)
    return dtype


def _identity(value: Any) -> Any:
    return value


def _filled(shape: Coords, value: Any, dtype: np.dtype[Any]) -> npt.NDArray[Any]:
    out = np.empty(shape, dtype=dtype)
    if dtype.hasobject:
        # element-wise so that sequence values are stored as objects
        flat = out.reshape(-1)
        for k in range(flat.size):
            flat[k] = value
    else:
        out.fill(value)
    return out


def _format_args(*parts: str) -> str:
    return ", ".join(part for part in parts if part)


@dataclass(frozen=True)
class FlatIndex:
    """Linear indexing of an array, ``a.flat[k]`` with ``k`` in ``0..a.size-1``."""

    array: AbstractStructuredArray

    def __getitem__(self, index: int) -> Any:
        if not is_integer(index):
            raise IndexError(
                f"only integer indices are supported for linear indexing, got {type(index)!r}"
            )
        array = self.array
        return array._getflat(normalize_linear_index(index, array.size, array._wraparound))

    def __setitem__(self, index: Any, value: Any) -> None:
        self.array.set_flat_selection(index, value)

    def __len__(self) -> int:
        return self.array.size

    def __iter__(self) -> Iterator[Any]:
        getflat = self.array._getflat
        for k in range(self.array.size):
            yield getflat(k)


class AbstractStructuredArray:
    """Common interface of arrays whose elements are not stored.

    Subclasses store their shape and a payload (a value or a function) and implement
    ``_getindex`` (read at absolute Cartesian coordinates) and ``_getflat`` (read at a
    flat index).
    """

    _inds: Shape
    _dtype: np.dtype[Any]
    _wraparound: bool

    def __init__(self, inds: Shape, wraparound: bool | None = None) -> None:
        # N.B., expect inds already normalized
        self._inds = inds
        self._size = element_count(inds)
        if wraparound is None:
            wraparound = config.get("array.wraparound")
        self._wraparound = bool(wraparound)

    def _getindex(self, coords: Coords) -> Any:
        raise NotImplementedError

    def _getflat(self, index: int) -> Any:
        raise NotImplementedError

    @property
    def inds(self) -> Shape:
        """The normalized shape: one bare length or unit-step range per dimension."""
        return self._inds

    @property
    def shape(self) -> Coords:
        """A tuple of integers describing the length of each dimension of the array."""
        return as_array_size(self._inds)

    @property
    def ndim(self) -> int:
        """Number of dimensions."""
        return len(self._inds)

    @property
    def size(self) -> int:
        """The total number of elements in the array."""
        return self._size

    @property
    def dtype(self) -> np.dtype[Any]:
        """The NumPy data type."""
        return self._dtype

    @property
    def axes(self) -> tuple[range, ...]:
        """A tuple with the range of valid indices along each dimension."""
        return as_array_axes(self._inds)

    @property
    def has_offset_axes(self) -> bool:
        return has_offset_axes(self._inds)

    @property
    def read_only(self) -> bool:
        """A boolean, True if modification operations are not permitted."""
        return True

    @property
    def flat(self) -> FlatIndex:
        """Shortcut for linear indexing, see :class:`FlatIndex`."""
        return FlatIndex(self)

    def dim(self, axis: int) -> int:
        """Length of dimension ``axis``, 1 for any dimension past ``ndim``."""
        if axis < 0:
            raise AxisBoundsError(axis)
        if axis >= self.ndim:
            return 1
        return as_dimension(self._inds[axis])

    def axis(self, axis: int) -> range:
        """Valid indices along dimension ``axis``, ``range(1)`` past ``ndim``."""
        if axis < 0:
            raise AxisBoundsError(axis)
        if axis >= self.ndim:
            return range(1)
        return as_range(self._inds[axis])

    def __len__(self) -> int:
        if self._inds:
            return as_dimension(self._inds[0])
        else:
            # 0-dimensional array, same error message as numpy
            raise TypeError("len() of unsized object")

    def __iter__(self) -> Iterator[Any]:
        if not self._inds:
            # Same error as numpy
            raise TypeError("iteration over a 0-d array")
        for index in as_range(self._inds[0]):
            yield self[index]

    def __getitem__(self, selection: Any) -> Any:
        """Retrieve an element or a region of the array.

        Parameters
        ----------
        selection : tuple
            One integer per dimension selects a single element. Anything else is a
            basic selection (integers, slices and one ellipsis) and yields a NumPy
            array, see :meth:`get_basic_selection`.

        Notes
        -----
        Integers and slice bounds are coordinates along each axis. On axes that are a
        bare length, negative integers count from the end (unless disabled with the
        ``array.wraparound`` setting). On offset axes, they are literal coordinates.
        """
        selection = ensure_tuple(selection)
        if len(selection) >= self.ndim and all(map(is_integer, selection)):
            coords = normalize_cartesian_index(selection, self._inds, self._wraparound)
            return self._getindex(coords)
        return self.get_basic_selection(selection)

    def get_basic_selection(self, selection: Any = Ellipsis) -> npt.NDArray[Any]:
        """Retrieve a region of the array as a dense NumPy array."""
        ranges, drop_axes = selection_to_ranges(selection, self._inds, self._wraparound)
        out_shape = tuple(len(r) for axis, r in enumerate(ranges) if axis not in drop_axes)
        out = np.empty(product(map(len, ranges)), dtype=self._dtype)
        getindex = self._getindex
        for k, coords in enumerate(itertools.product(*ranges)):
            out[k] = getindex(coords)
        return out.reshape(out_shape)

    def __setitem__(self, selection: Any, value: Any) -> None:
        raise ReadOnlyError

    def set_flat_selection(self, index: Any, value: Any) -> None:
        raise ReadOnlyError

    @overload
    def to_numpy(self, keep_axes: Literal[False] = ...) -> npt.NDArray[Any]: ...

    @overload
    def to_numpy(
        self, keep_axes: Literal[True]
    ) -> tuple[npt.NDArray[Any], tuple[range, ...]]: ...

    def to_numpy(
        self, keep_axes: bool = False
    ) -> npt.NDArray[Any] | tuple[npt.NDArray[Any], tuple[range, ...]]:
        """Copy every element into a new dense NumPy array.

        The dense array is indexed from zero. With ``keep_axes=True``, the result is a
        ``(dense, axes)`` pair where ``dense[k0, k1, ...]`` is the element at index
        ``(axes[0][k0], axes[1][k1], ...)``, so that offsets of the axes are preserved.
        """
        logger.debug("materializing %r", self)
        dense = self.get_basic_selection(Ellipsis)
        if keep_axes:
            return dense, self.axes
        return dense

    def __array__(
        self, dtype: npt.DTypeLike | None = None, copy: bool | None = None
    ) -> npt.NDArray[Any]:
        """
        This method is used by numpy when converting a structured array into a numpy array.
        For more information, see https://numpy.org/devdocs/user/basics.interoperability.html#the-array-method
        """
        if copy is False:
            msg = "`copy=False` is not supported. This method always creates a copy."
            raise ValueError(msg)

        arr = self.to_numpy()
        if dtype is not None:
            arr = arr.astype(dtype)
        return arr

    def copy(self) -> AbstractStructuredArray:
        # immutable, hence no need to copy
        return self

    def __copy__(self) -> AbstractStructuredArray:
        return self.copy()

    def __deepcopy__(self, memo: dict[int, Any]) -> AbstractStructuredArray:
        return self.copy()


class AbstractUniformArray(AbstractStructuredArray):
    """Arrays whose elements all have the same value.

    Reading any valid index yields :attr:`value`. Comparison, hashing and the
    reductions below only depend on the value and the number of elements.
    """

    _value: Any

    @property
    def value(self) -> Any:
        """The value of every element."""
        return self._value

    def _getindex(self, coords: Coords) -> Any:
        return self._value

    def _getflat(self, index: int) -> Any:
        return self._value

    def get_basic_selection(self, selection: Any = Ellipsis) -> npt.NDArray[Any]:
        ranges, drop_axes = selection_to_ranges(selection, self._inds, self._wraparound)
        out_shape = tuple(len(r) for axis, r in enumerate(ranges) if axis not in drop_axes)
        return _filled(out_shape, self._value, self._dtype)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({_format_args(repr(self._value), format_shape(self._inds))})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AbstractUniformArray):
            return NotImplemented
        if self.axes != other.axes:
            return False
        return self._size == 0 or bool(self._value == other._value)

    def __hash__(self) -> int:
        return hash((self.axes, self._value if self._size else None))

    def _is_numeric(self) -> bool:
        return self._dtype.kind in "biufc"

    def sum(self) -> Any:
        if not self._is_numeric():
            return self.to_numpy().sum()
        return np.multiply(self._value, self._size, dtype=_accumulator(self._dtype))

    def prod(self) -> Any:
        if not self._is_numeric():
            return self.to_numpy().prod()
        return np.power(self._value, self._size, dtype=_accumulator(self._dtype))

    def min(self) -> Any:
        if self._size == 0:
            raise ValueError("zero-size array to reduction operation minimum which has no identity")
        return self._value

    def max(self) -> Any:
        if self._size == 0:
            raise ValueError("zero-size array to reduction operation maximum which has no identity")
        return self._value

    def all(self) -> bool:
        return self._size == 0 or bool(self._value)

    def any(self) -> bool:
        return self._size > 0 and bool(self._value)

    def count_nonzero(self) -> int:
        return self._size if self._size and bool(self._value) else 0

    def unique(self) -> npt.NDArray[Any]:
        return _filled((min(self._size, 1),), self._value, self._dtype)


class UniformArray(AbstractUniformArray):
    """Read-only array whose elements all equal ``value``.

    Parameters
    ----------
    value : object
        The value of every element.
    *inds : int or range
        Axis specifications, either as separate arguments or as a single tuple. A
        non-negative integer ``n`` gives an axis with indices ``0..n-1``, a unit-step
        ``range`` gives an axis with the indices of the range.
    dtype : str or dtype, optional
        NumPy data type. If not given, it is inferred from ``value``.

    Examples
    --------
        >>> a = UniformArray(7, 3, 4)
        >>> a.shape, a.size, a[1, 1]
        ((3, 4), 12, np.int64(7))
    """

    def __init__(
        self, value: Any, *inds: Any, dtype: npt.DTypeLike | None = None
    ) -> None:
        shape = normalize_shape(*inds)
        self._dtype = infer_dtype(value) if dtype is None else np.dtype(dtype)
        self._value = _converter(self._dtype)(value)
        super().__init__(shape)


class FastUniformArray(AbstractUniformArray):
    """Read-only uniform array whose value and data type belong to its class.

    ``FastUniformArray[value]`` is a subclass of :class:`FastUniformArray` dedicated to
    ``value``, instances only store their shape. Two fast uniform arrays with different
    values have different types. ``value`` must be hashable.

    Examples
    --------
        >>> a = FastUniformArray[7](3, 4)
        >>> type(a) is type(FastUniformArray[7](5))
        True
    """

    _specialized: ClassVar[bool] = False

    def __init__(self, *inds: Any) -> None:
        if not self._specialized:
            raise TypeError(
                "FastUniformArray must be specialized with a value, e.g. FastUniformArray[7](3, 4)"
            )
        super().__init__(normalize_shape(*inds))

    def __class_getitem__(cls, value: Any) -> type[FastUniformArray]:
        return cls.specialize(value)

    @classmethod
    def specialize(
        cls, value: Any, dtype: npt.DTypeLike | None = None
    ) -> type[FastUniformArray]:
        """Subclass dedicated to ``value`` stored with ``dtype``."""
        dtype = infer_dtype(value) if dtype is None else np.dtype(dtype)
        # cache key is the converted value, 7 and np.int64(7) share a class
        value = _converter(dtype)(value)
        if dtype.kind == "f" and np.isnan(value):
            # NaN never compares equal, the cache must see a single NaN object
            value = _nan(dtype)
        return _specialize_fast_uniform(value, dtype)

    def __reduce__(self) -> tuple[Any, ...]:
        return _rebuild_fast_uniform, (self._value, self._dtype, self._inds)


@functools.lru_cache(maxsize=None)
def _nan(dtype: np.dtype[Any]) -> Any:
    return dtype.type("nan")


@functools.lru_cache(maxsize=None, typed=True)
def _specialize_fast_uniform(value: Any, dtype: np.dtype[Any]) -> type[FastUniformArray]:
    name = f"FastUniformArray[{value!r}]"
    return type(
        name,
        (FastUniformArray,),
        {
            "__module__": FastUniformArray.__module__,
            "__qualname__": name,
            "_specialized": True,
            "_value": value,
            "_dtype": dtype,
        },
    )


def _rebuild_fast_uniform(value: Any, dtype: np.dtype[Any], inds: Shape) -> FastUniformArray:
    return FastUniformArray.specialize(value, dtype)(inds)


class MutableUniformArray(AbstractUniformArray):
    """Uniform array whose value can be replaced as a whole.

    Assigning to a selection that covers every element, e.g. ``a[...] = v``,
    ``a[:] = v`` or ``a.fill(v)``, replaces the value. Any other assignment raises
    :class:`~structarrays.errors.UnsupportedWriteError` as there is no per-element
    storage.

    Slices with a negative step, such as ``a[::-1] = v``, are rejected with
    :class:`~structarrays.errors.NegativeStepError` like in reads, even when they
    cover every element.

    Parameters
    ----------
    value : object
        Initial value of every element.
    *inds : int or range
        Axis specifications, see :class:`UniformArray`.
    dtype : str or dtype, optional
        NumPy data type. If not given, it is inferred from the initial ``value``.
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(
        self, value: Any, *inds: Any, dtype: npt.DTypeLike | None = None
    ) -> None:
        shape = normalize_shape(*inds)
        self._dtype = infer_dtype(value) if dtype is None else np.dtype(dtype)
        self._convert = _converter(self._dtype)
        self._value = self._convert(value)
        super().__init__(shape)

    @property
    def read_only(self) -> bool:
        return False

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, new: Any) -> None:
        self.fill(new)

    def __setitem__(self, selection: Any, value: Any) -> None:
        """Replace the value of every element.

        Raises
        ------
        UnsupportedWriteError
            If ``selection`` does not denote every index of the array.
        NegativeStepError
            If ``selection`` contains a slice with a negative step.
        """
        if not is_total_selection(selection, self._inds, self._wraparound):
            logger.debug("rejecting partial write to %r at %r", self, selection)
            raise UnsupportedWriteError
        self._store(value)

    def set_flat_selection(self, index: Any, value: Any) -> None:
        if not is_total_selection(index, (self._size,), self._wraparound):
            logger.debug("rejecting partial linear write to %r at %r", self, index)
            raise UnsupportedWriteError
        self._store(value)

    def fill(self, value: Any) -> None:
        """Set every element to ``value``."""
        self._store(value)

    def _store(self, value: Any) -> None:
        # convert first, the array is left untouched if this fails
        new = self._convert(value)
        self._value = new

    def copy(self) -> MutableUniformArray:
        return MutableUniformArray(self._value, self._inds, dtype=self._dtype)


def _bind_dispatch(
    func: Callable[..., Any],
    inds: Shape,
    style: IndexStyle,
    order: MemoryOrder,
    convert: Callable[[Any], Any],
) -> tuple[Callable[[Coords], Any], Callable[[int], Any]]:
    """Readers at Cartesian coordinates and at a flat index for the given index style."""
    if style is IndexStyle.CARTESIAN:

        def getindex(coords: Coords) -> Any:
            return convert(func(*coords))

        def getflat(index: int) -> Any:
            return convert(func(*linear_to_cartesian(index, inds, order)))

    else:

        def getindex(coords: Coords) -> Any:
            return convert(func(cartesian_to_linear(coords, inds, order)))

        def getflat(index: int) -> Any:
            return convert(func(index))

    return getindex, getflat


class StructuredArray(AbstractStructuredArray):
    """Read-only array whose elements are computed by a function of their index.

    Parameters
    ----------
    func : callable
        Function computing the elements. It is called on every read, results are not
        cached.
    *inds : int or range
        Axis specifications, see :class:`UniformArray`.
    style : IndexStyle or str, optional
        With ``"cartesian"`` (the default), ``func`` is called with one coordinate per
        dimension. With ``"linear"``, ``func`` is called with a single flat index in
        ``0..size-1``, enumerating the elements in row-major order unless ``order``
        (or the ``array.order`` setting) is ``"F"`` for column-major order.
    dtype : str or dtype, optional
        NumPy data type of the elements. If not given, ``func`` is called once at the
        first index of the array and the data type is inferred from the result; the
        result type of ``func`` must not depend on the index.
    order : {'C', 'F'}, optional
        Order in which flat indices enumerate the elements. Default is taken from the
        ``array.order`` setting.

    Examples
    --------
        >>> a = StructuredArray(lambda i, j: i >= j, 3, 3)
        >>> bool(a[2, 1]), bool(a[1, 2])
        (True, False)
    """

    def __init__(
        self,
        func: Callable[..., Any],
        *inds: Any,
        style: IndexStyle | str = IndexStyle.CARTESIAN,
        dtype: npt.DTypeLike | None = None,
        order: MemoryOrder | None = None,
    ) -> None:
        if not callable(func):
            raise TypeError(f"expected a callable, got {type(func).__name__}")
        shape = normalize_shape(*inds)
        style = parse_index_style(style)
        if order is None:
            order = config.get("array.order")
        order = normalize_order(order)
        super().__init__(shape)

        if dtype is not None:
            dtype = np.dtype(dtype)
        elif self._size == 0:
            dtype = np.dtype(config.get("array.empty_dtype"))
        else:
            dtype = self._probe_dtype(func, shape, style)

        self._func = func
        self._style = style
        self._order = order
        self._dtype = dtype
        self._getindex, self._getflat = _bind_dispatch(  # type: ignore[method-assign]
            func, shape, style, order, _converter(dtype)
        )

    @staticmethod
    def _probe_dtype(func: Callable[..., Any], shape: Shape, style: IndexStyle) -> np.dtype[Any]:
        if style is IndexStyle.CARTESIAN:
            first: Any = lower_bounds(shape)
            result = func(*first)
        else:
            first = 0
            result = func(first)
        dtype = infer_dtype(result)
        logger.debug("inferred dtype %s for %r from its value at %r", dtype, func, first)
        return dtype

    @property
    def func(self) -> Callable[..., Any]:
        """The function computing the elements."""
        return self._func

    @property
    def style(self) -> IndexStyle:
        return self._style

    @property
    def order(self) -> MemoryOrder:
        """Order in which flat indices enumerate the elements."""
        return self._order

    def __repr__(self) -> str:
        args = _format_args(repr(self._func), format_shape(self._inds))
        return f"{type(self).__name__}({args}, style={self._style.value!r})"
