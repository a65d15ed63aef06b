__all__ = [
    "AxisBoundsError",
    "BaseStructArrayError",
    "BoundsCheckError",
    "InvalidMeshError",
    "InvalidShapeError",
    "NegativeStepError",
    "ReadOnlyError",
    "UnsupportedWriteError",
]


class BaseStructArrayError(ValueError):
    """
    Base error which all structarrays value errors are sub-classed from.
    """

    _msg: str = "{}"

    def __init__(self, *args: object) -> None:
        """
        If a single argument is passed, treat it as a pre-formatted message.

        If multiple arguments are passed, they are used as arguments for the
        template string class variable.
        """
        if len(args) == 1:
            super().__init__(args[0])
        else:
            super().__init__(self._msg.format(*args))


class InvalidShapeError(BaseStructArrayError):
    """Raised when an axis specification cannot be used as an array shape."""

    _msg = "invalid argument {!r} of type {} for array shape"


class InvalidMeshError(BaseStructArrayError):
    """Raised when the step or origin of a mesh are inconsistent."""


class BoundsCheckError(IndexError):
    """Raised when an index is out of range."""

    def __init__(self, dim_len: int, index: object = None) -> None:
        if index is None:
            super().__init__(f"index out of bounds for dimension with length {dim_len}")
        else:
            super().__init__(f"index {index!r} out of bounds for dimension with length {dim_len}")


class AxisBoundsError(BoundsCheckError):
    """Raised when an axis number is negative."""

    def __init__(self, axis: int) -> None:
        IndexError.__init__(self, f"axis {axis} is out of bounds; axis numbers must be >= 0")


class ReadOnlyError(PermissionError):
    def __init__(self) -> None:
        super().__init__("object is read-only")


class UnsupportedWriteError(NotImplementedError):
    """Raised when a write to a uniform array does not cover every element."""

    def __init__(self) -> None:
        super().__init__(
            "only assignment to the whole array is supported for uniform arrays; "
            "there is no per-element storage"
        )


class NegativeStepError(IndexError):
    def __init__(self) -> None:
        super().__init__("only slices with step >= 1 are supported")
