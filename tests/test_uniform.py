import copy
import pickle
from typing import Any

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from structarrays import (
    AbstractUniformArray,
    FastUniformArray,
    MutableUniformArray,
    UniformArray,
)
from structarrays.errors import (
    AxisBoundsError,
    BoundsCheckError,
    InvalidShapeError,
    NegativeStepError,
    ReadOnlyError,
    UnsupportedWriteError,
)


def test_uniform_array() -> None:
    a = UniformArray(7, 3, 4)
    assert a.shape == (3, 4)
    assert a.inds == (3, 4)
    assert a.ndim == 2
    assert a.size == 12
    assert len(a) == 3
    assert a.dtype == np.int64
    assert a.value == 7
    assert a[1, 1] == 7
    assert a[-1, -1] == 7
    assert a.read_only
    assert not a.has_offset_axes
    assert a.axes == (range(3), range(4))


def test_uniform_array_shape_forms() -> None:
    assert UniformArray(0, (3, 4)).inds == (3, 4)
    assert UniformArray(0, [3, 4]).inds == (3, 4)
    assert UniformArray(0, range(0, 3)).inds == (3,)
    assert UniformArray(0).inds == ()
    with pytest.raises(InvalidShapeError):
        UniformArray(0, -1)
    with pytest.raises(InvalidShapeError):
        UniformArray(0, range(0, 4, 2))


def test_uniform_array_read_only() -> None:
    a = UniformArray(7, 3, 4)
    with pytest.raises(ReadOnlyError):
        a[0, 0] = 1
    with pytest.raises(ReadOnlyError):
        a[...] = 1
    with pytest.raises(ReadOnlyError):
        a.flat[0] = 1
    assert a.value == 7


def test_uniform_array_bounds() -> None:
    a = UniformArray(7, 3, 4)
    with pytest.raises(BoundsCheckError):
        a[3, 0]
    with pytest.raises(BoundsCheckError):
        a[0, -5]
    with pytest.raises(BoundsCheckError):
        a.flat[12]
    assert a.flat[-12] == 7


def test_uniform_array_offset_axes() -> None:
    a = UniformArray(1.5, range(-1, 2), 2)
    assert a.inds == (range(-1, 2), 2)
    assert a.shape == (3, 2)
    assert a.axes == (range(-1, 2), range(2))
    assert a.has_offset_axes
    assert a[-1, 0] == 1.5
    with pytest.raises(BoundsCheckError):
        a[2, 0]
    assert_array_equal(a[...], np.full((3, 2), 1.5))
    assert_array_equal(a[0:, :], np.full((2, 2), 1.5))


def test_dim_and_axis() -> None:
    a = UniformArray(0, 3, range(2, 5))
    assert a.dim(0) == 3
    assert a.dim(1) == 3
    assert a.dim(2) == 1
    assert a.axis(1) == range(2, 5)
    assert a.axis(5) == range(1)
    with pytest.raises(AxisBoundsError):
        a.dim(-1)
    with pytest.raises(AxisBoundsError):
        a.axis(-1)


def test_trailing_singleton_indices() -> None:
    a = UniformArray(7, 3)
    assert a[1, 0] == 7
    assert a[1, 0, 0] == 7
    with pytest.raises(BoundsCheckError):
        a[1, 1]


def test_too_few_indices() -> None:
    a = UniformArray(7, 3, 4)
    result = a[1]
    assert isinstance(result, np.ndarray)
    assert_array_equal(result, np.full(4, 7))


def test_basic_selection() -> None:
    a = UniformArray(7, 3, 4)
    assert_array_equal(a[...], np.full((3, 4), 7))
    assert_array_equal(a[:, 1], np.full(3, 7))
    assert_array_equal(a[1:, ::2], np.full((2, 2), 7))
    assert a[...].dtype == np.int64
    with pytest.raises(NegativeStepError):
        a[::-1]


def test_zero_dimensional() -> None:
    a = UniformArray(7)
    assert a.shape == ()
    assert a.size == 1
    assert a[()] == 7
    assert_array_equal(a[...], np.array(7))
    with pytest.raises(TypeError):
        len(a)
    with pytest.raises(TypeError):
        list(a)
    assert list(a.flat) == [7]


def test_empty() -> None:
    a = UniformArray(7, 0, 3)
    assert a.size == 0
    assert a.shape == (0, 3)
    assert a[...].shape == (0, 3)
    with pytest.raises(BoundsCheckError):
        a[0, 0]
    assert list(a.flat) == []


def test_iteration() -> None:
    a = UniformArray(2, 3)
    assert list(a) == [2, 2, 2]
    b = UniformArray(2, range(1, 3), 2)
    rows = list(b)
    assert len(rows) == 2
    assert_array_equal(rows[0], [2, 2])


def test_flat() -> None:
    a = UniformArray(7, 2, 3)
    assert len(a.flat) == 6
    assert a.flat[5] == 7
    assert list(a.flat) == [7] * 6
    with pytest.raises(IndexError):
        a.flat[1:2]


@pytest.mark.parametrize(
    ("value", "dtype", "expected"),
    [
        (7, None, np.dtype("int64")),
        (7, "f4", np.dtype("float32")),
        (1.5, None, np.dtype("float64")),
        (True, None, np.dtype("bool")),
        (1 + 2j, None, np.dtype("complex128")),
        ("abc", None, np.dtype(object)),
        (b"abc", None, np.dtype(object)),
        ("abc", "<U2", np.dtype("<U2")),
        ((1, 2), None, np.dtype(object)),
        (None, None, np.dtype(object)),
    ],
)
def test_dtype(value: Any, dtype: Any, expected: np.dtype[Any]) -> None:
    a = UniformArray(value, 2, dtype=dtype)
    assert a.dtype == expected


def test_value_is_converted() -> None:
    a = UniformArray(7, 2, dtype="f8")
    assert isinstance(a.value, np.float64)
    assert isinstance(a[0], np.float64)
    with pytest.raises(ValueError):
        UniformArray([1, 2], 2, dtype="f8")


def test_fixed_width_string() -> None:
    a = UniformArray("abcd", 2, dtype="<U2")
    assert a.value == "ab"
    assert a[0] == "ab"
    assert_array_equal(np.asarray(a), np.array(["ab", "ab"]))


def test_object_value() -> None:
    a = UniformArray((1, 2), 2)
    assert a[0] == (1, 2)
    out = a[...]
    assert out.shape == (2,)
    assert out[1] == (1, 2)


def test_to_numpy() -> None:
    a = UniformArray(3, 2, range(1, 3))
    assert_array_equal(a.to_numpy(), np.full((2, 2), 3))
    assert_array_equal(np.asarray(a), np.full((2, 2), 3))
    assert np.asarray(a, dtype="f4").dtype == np.float32
    with pytest.raises(ValueError, match="copy=False"):
        a.__array__(copy=False)


def test_repr() -> None:
    assert repr(UniformArray(7, 3, 4)) == "UniformArray(np.int64(7), 3, 4)"
    assert repr(UniformArray((1, 2), range(1, 3))) == "UniformArray((1, 2), range(1, 3))"
    assert repr(UniformArray(None)) == "UniformArray(None)"


def test_equality() -> None:
    assert UniformArray(7, 3, 4) == UniformArray(7, 3, 4)
    assert UniformArray(7, 3, 4) == UniformArray(7.0, (3, 4))
    assert UniformArray(7, 3, 4) != UniformArray(8, 3, 4)
    assert UniformArray(7, 3, 4) != UniformArray(7, 4, 3)
    assert UniformArray(7, 3) != UniformArray(7, range(1, 4))
    # empty arrays are equal whatever their value
    assert UniformArray(7, 0) == UniformArray(8, 0)
    assert UniformArray(7, 3) == FastUniformArray[7](3)
    assert UniformArray(7, 3) == MutableUniformArray(7, 3)
    assert UniformArray(7, 3) != np.full(3, 7).tolist()


def test_hash() -> None:
    assert hash(UniformArray(7, 3, 4)) == hash(UniformArray(7, 3, 4))
    assert hash(UniformArray(7, 0)) == hash(UniformArray(8, 0))
    assert len({UniformArray(1, 2), UniformArray(1, 2), UniformArray(2, 2)}) == 2
    with pytest.raises(TypeError):
        hash(MutableUniformArray(1, 2))


def test_copy() -> None:
    a = UniformArray(7, 3)
    assert copy.copy(a) is a
    assert copy.deepcopy(a) is a
    assert a.copy() is a


@pytest.mark.parametrize(
    "a",
    [
        UniformArray(3, 2, 3),
        UniformArray(2.5, range(-1, 2)),
        UniformArray(True, 4),
        UniformArray(0, 2, 0),
        UniformArray(-2),
        UniformArray(np.uint8(200), 12),
        UniformArray(np.int8(-100), 3, 2),
        UniformArray(np.float32(0.5), 4),
    ],
)
def test_reductions(a: AbstractUniformArray) -> None:
    dense = a.to_numpy()
    assert a.sum() == dense.sum()
    assert a.sum().dtype == dense.sum().dtype
    assert a.prod() == dense.prod()
    assert a.prod().dtype == dense.prod().dtype
    assert a.all() == dense.all()
    assert a.any() == dense.any()
    assert a.count_nonzero() == np.count_nonzero(dense)
    assert_array_equal(a.unique(), np.unique(dense))
    if a.size:
        assert a.min() == dense.min()
        assert a.max() == dense.max()
    else:
        with pytest.raises(ValueError):
            a.min()
        with pytest.raises(ValueError):
            a.max()


def test_prod() -> None:
    assert UniformArray(2, 2, 3).prod() == 64
    assert UniformArray(2.0, 0).prod() == 1.0
    assert UniformArray(1.5, 2).prod() == 2.25


def test_non_numeric_reductions() -> None:
    a = UniformArray("ab", 2, dtype=object)
    assert a.sum() == "abab"
    assert a.all()
    assert_array_equal(a.unique(), np.array(["ab"], dtype=object))


class TestFastUniformArray:
    def test_specialization(self) -> None:
        cls = FastUniformArray[7]
        assert issubclass(cls, FastUniformArray)
        assert FastUniformArray[7] is cls
        assert FastUniformArray[np.int64(7)] is cls
        assert FastUniformArray[8] is not cls
        # 7.0 and 7 have different data types
        assert FastUniformArray[7.0] is not cls
        assert FastUniformArray.specialize(7, "f8") is FastUniformArray[7.0]

    def test_read(self) -> None:
        a = FastUniformArray[7](3, 4)
        assert a.shape == (3, 4)
        assert a.size == 12
        assert a[1, 1] == 7
        assert a.value == 7
        assert a.dtype == np.int64
        assert_array_equal(a[...], np.full((3, 4), 7))
        assert type(a) is type(FastUniformArray[7](5))

    def test_nan_specialization(self) -> None:
        cls = FastUniformArray[float("nan")]
        assert FastUniformArray[np.nan] is cls
        assert FastUniformArray[np.float64("nan")] is cls
        assert np.isnan(cls(2)[1])
        f4 = FastUniformArray.specialize(np.nan, "f4")
        assert FastUniformArray.specialize(float("nan"), "f4") is f4
        assert f4 is not cls

    def test_value_is_not_stored_on_instances(self) -> None:
        a = FastUniformArray[7](3)
        assert "_value" not in vars(a)

    def test_unspecialized(self) -> None:
        with pytest.raises(TypeError, match="must be specialized"):
            FastUniformArray(3, 4)

    def test_read_only(self) -> None:
        a = FastUniformArray[7](3)
        with pytest.raises(ReadOnlyError):
            a[...] = 1

    def test_repr(self) -> None:
        assert repr(FastUniformArray[7](3)) == "FastUniformArray[np.int64(7)](np.int64(7), 3)"

    def test_pickle(self) -> None:
        a = FastUniformArray[7](3, range(1, 3))
        b = pickle.loads(pickle.dumps(a))
        assert type(b) is type(a)
        assert b == a
        assert b.inds == (3, range(1, 3))


class TestMutableUniformArray:
    def test_read(self) -> None:
        a = MutableUniformArray(1, 3)
        assert not a.read_only
        assert a[0] == 1
        assert a.dtype == np.int64

    @pytest.mark.parametrize(
        "selection",
        [Ellipsis, slice(None), (slice(None), slice(None)), (slice(0, 3), Ellipsis), ()],
    )
    def test_assign_total(self, selection: Any) -> None:
        a = MutableUniformArray(1, 3, 2)
        a[selection] = 5
        assert a.value == 5
        assert a[2, 1] == 5
        assert_array_equal(a[...], np.full((3, 2), 5))

    @pytest.mark.parametrize(
        "selection", [0, (0, 0), slice(1, None), (slice(None), 1), slice(None, None, 2)]
    )
    def test_assign_partial(self, selection: Any) -> None:
        a = MutableUniformArray(1, 3, 2)
        with pytest.raises(UnsupportedWriteError):
            a[selection] = 5
        assert a.value == 1

    def test_assign_negative_step(self) -> None:
        a = MutableUniformArray(1, 3)
        with pytest.raises(NegativeStepError):
            a[::-1] = 5
        assert a.value == 1

    def test_assign_offset_axes(self) -> None:
        a = MutableUniformArray(1, range(-1, 2))
        a[-1:] = 2
        assert a.value == 2
        with pytest.raises(UnsupportedWriteError):
            a[0:] = 3
        a[-1:2] = 4
        assert a.value == 4

    def test_assign_single_element(self) -> None:
        a = MutableUniformArray(1, 1, 1)
        a[0, 0] = 9
        assert a.value == 9

    def test_assign_out_of_bounds(self) -> None:
        a = MutableUniformArray(1, 3)
        with pytest.raises(BoundsCheckError):
            a[3] = 5

    def test_assign_empty(self) -> None:
        a = MutableUniformArray(1, 0)
        a[...] = 5
        assert a.value == 5

    def test_fill(self) -> None:
        a = MutableUniformArray(1.0, 2)
        a.fill(3)
        assert a.value == 3.0
        assert isinstance(a.value, np.float64)
        a.value = 4
        assert a[1] == 4.0

    def test_assign_longer_string(self) -> None:
        a = MutableUniformArray("ab", 3)
        a[...] = "abcd"
        assert a[0] == "abcd"
        assert np.asarray(a)[2] == "abcd"
        assert a.dtype == object

    def test_failed_conversion_leaves_value(self) -> None:
        a = MutableUniformArray(1.0, 2)
        with pytest.raises(ValueError):
            a[...] = "abc"
        assert a.value == 1.0

    def test_flat_assign(self) -> None:
        a = MutableUniformArray(1, 2, 2)
        a.flat[:] = 2
        assert a.value == 2
        with pytest.raises(UnsupportedWriteError):
            a.flat[0] = 3
        b = MutableUniformArray(1, 1, 1)
        b.flat[0] = 3
        assert b.value == 3

    def test_copy(self) -> None:
        a = MutableUniformArray(1, 2)
        b = copy.copy(a)
        assert b is not a
        b.fill(2)
        assert a.value == 1
        assert copy.deepcopy(a) == a
