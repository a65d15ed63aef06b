"""
The config module is responsible for managing the configuration of structarrays and is
based on the Donfig python library.

Example:
    Linear indices are flattened in C (row-major) order by default. Arrays created after
    the following call flatten in Fortran (column-major) order instead:

    ```python
    from structarrays.core.config import config

    config.set({"array.order": "F"})
    ```

    The same value can be set with the environment variable ``STRUCTARRAYS_ARRAY__ORDER=F``.
    The double underscore ``__`` is used to indicate nested access.

Settings are read once, when an array is constructed; changing them later has no effect
on existing arrays.

For more information, see the Donfig documentation at https://github.com/pytroll/donfig.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from donfig import Config as DConfig

if TYPE_CHECKING:
    from donfig.config_obj import ConfigSet


class Config(DConfig):  # type: ignore[misc]
    """The Config will collect configuration from config files and environment variables

    Example environment variables:
    Grabs environment variables of the form "STRUCTARRAYS_FOO__BAR_BAZ=123" and
    turns these into config variables of the form ``{"foo": {"bar-baz": 123}}``
    It transforms the key and value in the following way:

    -  Lower-cases the key text
    -  Treats ``__`` (double-underscore) as nested access
    -  Calls ``ast.literal_eval`` on the value

    """

    def reset(self) -> None:
        self.clear()
        self.refresh()

    def fortran_order(self) -> ConfigSet:
        """
        Flatten linear indices in Fortran (column-major) order.
        """
        return self.set({"array.order": "F"})


# The default configuration for structarrays
config = Config(
    "structarrays",
    defaults=[
        {
            "array": {
                "order": "C",
                "wraparound": True,
                "empty_dtype": "float64",
            },
        }
    ],
)
