from structarrays._version import version as __version__
from structarrays.core.array import (
    AbstractStructuredArray,
    AbstractUniformArray,
    FastUniformArray,
    MutableUniformArray,
    StructuredArray,
    UniformArray,
)
from structarrays.core.config import config
from structarrays.core.indexing import IndexStyle
from structarrays.core.mesh import CartesianMesh, CartesianMeshArray, cartesian_mesh_array
from structarrays.core.shape import normalize_shape
from structarrays.core.shape import shape_of as shape
from structarrays.creation import (
    create,
    full,
    full_like,
    materialize,
    ones,
    ones_like,
    structured,
    zeros,
    zeros_like,
)
from structarrays.errors import (
    BoundsCheckError,
    InvalidMeshError,
    InvalidShapeError,
    ReadOnlyError,
    UnsupportedWriteError,
)


def print_debug_info() -> None:
    """
    Print version info for use in bug reports.
    """
    import platform
    from importlib.metadata import PackageNotFoundError, version

    def print_packages(packages: list[str]) -> None:
        not_installed = []
        for package in packages:
            try:
                print(f"{package}: {version(package)}")
            except PackageNotFoundError:
                not_installed.append(package)
        if not_installed:
            print("\n**Not Installed:**")
            for package in not_installed:
                print(package)

    required = [
        "numpy",
        "donfig",
    ]
    optional = [
        "hypothesis",
        "pytest",
    ]

    print(f"platform: {platform.platform()}")
    print(f"python: {platform.python_version()}")
    print(f"structarrays: {__version__}\n")
    print("**Required dependencies:**")
    print_packages(required)
    print("\n**Optional dependencies:**")
    print_packages(optional)


__all__ = [
    "AbstractStructuredArray",
    "AbstractUniformArray",
    "BoundsCheckError",
    "CartesianMesh",
    "CartesianMeshArray",
    "FastUniformArray",
    "IndexStyle",
    "InvalidMeshError",
    "InvalidShapeError",
    "MutableUniformArray",
    "ReadOnlyError",
    "StructuredArray",
    "UniformArray",
    "UnsupportedWriteError",
    "__version__",
    "cartesian_mesh_array",
    "config",
    "create",
    "full",
    "full_like",
    "materialize",
    "normalize_shape",
    "ones",
    "ones_like",
    "print_debug_info",
    "shape",
    "structured",
    "zeros",
    "zeros_like",
]
