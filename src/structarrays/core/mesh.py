"""
Cartesian meshes: callables mapping an index to physical coordinates.

Along dimension ``k``, the coordinate of index ``i`` is ``step[k] * (i - origin[k])``.
``step`` and ``origin`` are either a scalar used for every dimension or a tuple with one
value per dimension, and ``origin`` may be absent (``None``), meaning that every
dimension originates at index 0. The formula used by a mesh is chosen once, when the
mesh is built, according to the kinds of its parameters.
"""

from __future__ import annotations

import numbers
from collections.abc import Callable
from enum import Enum
from logging import getLogger
from typing import Any

from structarrays.core.array import StructuredArray
from structarrays.core.common import Coords
from structarrays.core.indexing import IndexStyle
from structarrays.core.shape import normalize_shape
from structarrays.errors import InvalidMeshError

__all__ = ["CartesianMesh", "CartesianMeshArray", "ParameterKind", "cartesian_mesh_array"]

logger = getLogger(__name__)

Parameter = Any  # a number or a tuple of numbers
Formula = Callable[[Coords], tuple[Any, ...]]


class ParameterKind(Enum):
    """How a mesh parameter is applied."""

    ABSENT = "absent"
    SCALAR = "scalar"
    TUPLE = "tuple"


def _parse_parameter(name: str, value: Any) -> Parameter:
    if isinstance(value, (tuple, list)):
        value = tuple(value)
        for v in value:
            if not isinstance(v, numbers.Number):
                raise InvalidMeshError(f"{name} must contain numbers, got {v!r}")
        return value
    if not isinstance(value, numbers.Number):
        raise InvalidMeshError(f"{name} must be a number or a tuple of numbers, got {value!r}")
    return value


def _classify(value: Parameter) -> tuple[ParameterKind, Any]:
    """Kind of a parameter and the value its formula uses."""
    if value is None:
        return ParameterKind.ABSENT, None
    if isinstance(value, tuple):
        # a tuple with equal entries is applied as a scalar
        if len(value) > 0 and all(v == value[0] for v in value[1:]):
            return ParameterKind.SCALAR, value[0]
        return ParameterKind.TUPLE, value
    return ParameterKind.SCALAR, value


def _formula(step_kind: ParameterKind, s: Any, origin_kind: ParameterKind, o: Any) -> Formula:
    if step_kind is ParameterKind.SCALAR:
        if origin_kind is ParameterKind.ABSENT:
            return lambda index: tuple(s * i for i in index)
        if origin_kind is ParameterKind.SCALAR:
            return lambda index: tuple(s * (i - o) for i in index)
        return lambda index: tuple(s * (i - ok) for i, ok in zip(index, o, strict=True))
    if origin_kind is ParameterKind.ABSENT:
        return lambda index: tuple(sk * i for sk, i in zip(s, index, strict=True))
    if origin_kind is ParameterKind.SCALAR:
        return lambda index: tuple(sk * (i - o) for sk, i in zip(s, index, strict=True))
    return lambda index: tuple(
        sk * (i - ok) for sk, i, ok in zip(s, index, o, strict=True)
    )


class CartesianMesh:
    """Callable mapping an index to the coordinates of a Cartesian mesh.

    Parameters
    ----------
    ndim : int, optional
        Number of dimensions. May be omitted if ``step`` or ``origin`` is a tuple.
    step : number or tuple of numbers, optional
        Spacing of the mesh nodes along every dimension or along each dimension.
        Default is 1.
    origin : number or tuple of numbers, optional
        Index of the node at coordinate zero, for every dimension or for each
        dimension. If ``None`` (the default), every dimension originates at index 0.

    Examples
    --------
        >>> mesh = CartesianMesh(1, step=2.0)
        >>> mesh(5)
        (10.0,)
        >>> CartesianMesh(1, step=2.0, origin=1.0)(5)
        (8.0,)
    """

    def __init__(
        self, ndim: int | None = None, *, step: Parameter = 1, origin: Parameter = None
    ) -> None:
        step = _parse_parameter("step", step)
        if origin is not None:
            origin = _parse_parameter("origin", origin)

        lengths = {len(p) for p in (step, origin) if isinstance(p, tuple)}
        if len(lengths) > 1:
            raise InvalidMeshError("step and origin must have the same number of dimensions")
        if ndim is None:
            if not lengths:
                raise InvalidMeshError(
                    "the number of dimensions must be given when step and origin are scalars"
                )
            ndim = lengths.pop()
        elif not isinstance(ndim, numbers.Integral) or ndim < 0:
            raise InvalidMeshError(
                f"the number of dimensions must be a nonnegative integer, got {ndim!r}"
            )
        elif lengths and lengths != {ndim}:
            raise InvalidMeshError(f"step and origin must have {ndim} values, got {lengths.pop()}")

        self._ndim = int(ndim)
        self._step = step
        self._origin = origin

        step_kind, s = _classify(step)
        origin_kind, o = _classify(origin)
        self._strategy = (step_kind, origin_kind)
        self._coordinates = _formula(step_kind, s, origin_kind, o)
        logger.debug(
            "CartesianMesh with %d dimensions uses %s step and %s origin",
            self._ndim,
            step_kind.value,
            origin_kind.value,
        )

    @property
    def ndim(self) -> int:
        return self._ndim

    @property
    def step(self) -> Parameter:
        """The step as given: a number or a tuple of numbers."""
        return self._step

    @property
    def origin(self) -> Parameter:
        """The origin as given: ``None``, a number or a tuple of numbers."""
        return self._origin

    @property
    def strategy(self) -> tuple[ParameterKind, ParameterKind]:
        """How step and origin are applied by the formula of this mesh."""
        return self._strategy

    def step_tuple(self) -> tuple[Any, ...]:
        """The step along each dimension."""
        if isinstance(self._step, tuple):
            return self._step
        return (self._step,) * self._ndim

    def origin_tuple(self) -> tuple[Any, ...]:
        """The origin along each dimension, zeros when the origin is absent."""
        if self._origin is None:
            return (0,) * self._ndim
        if isinstance(self._origin, tuple):
            return self._origin
        return (self._origin,) * self._ndim

    def __call__(self, *index: Any) -> tuple[Any, ...]:
        """Coordinates of the node at ``index``, given as separate integers or a tuple."""
        if len(index) == 1 and isinstance(index[0], tuple):
            index = index[0]
        if len(index) != self._ndim:
            raise IndexError(
                f"expected {self._ndim} indices for a {self._ndim}-dimensional mesh, "
                f"got {len(index)}"
            )
        return self._coordinates(index)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CartesianMesh):
            return NotImplemented
        return (
            self._ndim == other._ndim
            and self._step == other._step
            and self._origin == other._origin
        )

    def __hash__(self) -> int:
        return hash((self._ndim, self._step, self._origin))

    def __repr__(self) -> str:
        return f"CartesianMesh({self._ndim}, step={self._step!r}, origin={self._origin!r})"


class CartesianMeshArray(StructuredArray):
    """Array of the coordinates of the nodes of a Cartesian mesh.

    Every element is the tuple of coordinates returned by ``mesh`` at the index of the
    element, the array has the ``object`` data type.
    """

    def __init__(self, mesh: CartesianMesh, *inds: Any) -> None:
        shape = normalize_shape(*inds)
        if len(shape) != mesh.ndim:
            raise InvalidMeshError(
                f"a {mesh.ndim}-dimensional mesh cannot index a {len(shape)}-dimensional array"
            )
        super().__init__(mesh, shape, style=IndexStyle.CARTESIAN, dtype=object)

    @property
    def mesh(self) -> CartesianMesh:
        return self._func  # type: ignore[return-value]


def cartesian_mesh_array(
    *inds: Any, step: Parameter = 1, origin: Parameter = None
) -> CartesianMeshArray:
    """Array of the coordinates of a Cartesian mesh with as many dimensions as ``inds``."""
    shape = normalize_shape(*inds)
    return CartesianMeshArray(CartesianMesh(len(shape), step=step, origin=origin), shape)
