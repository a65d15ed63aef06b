import numpy as np

from structarrays.core.array import (
    AbstractStructuredArray,
    AbstractUniformArray,
    FastUniformArray,
    MutableUniformArray,
    StructuredArray,
    UniformArray,
)
from structarrays.core.shape import shape_of

__all__ = [
    "create",
    "full",
    "full_like",
    "materialize",
    "ones",
    "ones_like",
    "structured",
    "zeros",
    "zeros_like",
]


def _fast(fill_value, shape, dtype=None):
    return FastUniformArray.specialize(fill_value, dtype)(shape)


_uniform_kinds = {
    "uniform": UniformArray,
    "fast": _fast,
    "mutable": MutableUniformArray,
}


def create(shape, fill_value, kind="uniform", dtype=None):
    """Create a uniform array.

    Parameters
    ----------
    shape : int, range or tuple
        Array shape; integers give axes indexed from zero, unit-step ranges give axes
        with the indices of the range.
    fill_value : object
        Value of every element.
    kind : {'uniform', 'fast', 'mutable'}, optional
        Create a :class:`UniformArray` (the default), a :class:`FastUniformArray` or a
        :class:`MutableUniformArray`.
    dtype : string or dtype, optional
        NumPy dtype. If not given, it is inferred from `fill_value`.

    Returns
    -------
    a : structarrays.AbstractUniformArray

    Examples
    --------
    >>> import structarrays
    >>> a = structarrays.create((3, range(-1, 2)), 7)
    >>> a
    UniformArray(np.int64(7), 3, range(-1, 2))
    >>> a[0, -1]
    np.int64(7)

    """
    try:
        cls = _uniform_kinds[kind]
    except KeyError:
        raise ValueError(
            f"kind must be one of {tuple(_uniform_kinds)}, found: {kind!r}"
        ) from None
    return cls(fill_value, shape, dtype=dtype)


def zeros(shape, **kwargs):
    """Create a uniform array of zeros.

    For parameter definitions see :func:`structarrays.creation.create`.

    Examples
    --------
    >>> import structarrays
    >>> z = structarrays.zeros((2, 2))
    >>> z[...]
    array([[0., 0.],
           [0., 0.]])

    """
    kwargs.setdefault("dtype", "f8")
    return create(shape=shape, fill_value=0, **kwargs)


def ones(shape, **kwargs):
    """Create a uniform array of ones.

    For parameter definitions see :func:`structarrays.creation.create`.

    """
    kwargs.setdefault("dtype", "f8")
    return create(shape=shape, fill_value=1, **kwargs)


def full(shape, fill_value, **kwargs):
    """Create a uniform array with every element equal to `fill_value`.

    For parameter definitions see :func:`structarrays.creation.create`.

    """
    return create(shape=shape, fill_value=fill_value, **kwargs)


def _like_args(a, kwargs):
    kwargs.setdefault("shape", shape_of(a))
    if hasattr(a, "dtype"):
        kwargs.setdefault("dtype", a.dtype)
    if isinstance(a, MutableUniformArray):
        kwargs.setdefault("kind", "mutable")
    elif isinstance(a, FastUniformArray):
        kwargs.setdefault("kind", "fast")


def zeros_like(a, **kwargs):
    """Create a uniform array of zeros like `a`."""
    _like_args(a, kwargs)
    return zeros(**kwargs)


def ones_like(a, **kwargs):
    """Create a uniform array of ones like `a`."""
    _like_args(a, kwargs)
    return ones(**kwargs)


def full_like(a, fill_value=None, **kwargs):
    """Create a uniform array like `a`. If `a` is a uniform array, `fill_value`
    defaults to its value."""
    _like_args(a, kwargs)
    if fill_value is None:
        if not isinstance(a, AbstractUniformArray):
            raise TypeError("fill_value is required unless a is a uniform array")
        fill_value = a.value
    return full(fill_value=fill_value, **kwargs)


def structured(func, shape, **kwargs):
    """Create an array whose elements are computed by `func`.

    For parameter definitions see :class:`structarrays.StructuredArray`.

    Examples
    --------
    >>> import structarrays
    >>> a = structarrays.structured(lambda i, j: 10 * i + j, (2, 3))
    >>> a[...]
    array([[ 0,  1,  2],
           [10, 11, 12]])

    """
    return StructuredArray(func, shape, **kwargs)


def materialize(a, keep_axes=False):
    """Copy every element of `a` into a new dense NumPy array.

    Parameters
    ----------
    a : array_like
        Array to copy.
    keep_axes : bool, optional
        If True, return a ``(dense, axes)`` pair where `axes` holds the range of
        indices of `a` along each dimension, so that offset axes are preserved.

    Examples
    --------
    >>> import structarrays
    >>> a = structarrays.structured(lambda i: 10 * i, range(-1, 2))
    >>> dense, axes = structarrays.materialize(a, keep_axes=True)
    >>> dense
    array([-10,   0,  10])
    >>> axes
    (range(-1, 2),)

    """
    if isinstance(a, AbstractStructuredArray):
        return a.to_numpy(keep_axes=keep_axes)
    dense = np.asarray(a)
    if keep_axes:
        return dense, tuple(map(range, dense.shape))
    return dense
