"""
Errors and warnings raised by the grid converter and the CLI.
"""


class GridError(ValueError):
    """Base class for every error raised by store_nav."""


class InvalidBoundsError(GridError):
    """Coordinate bounds are non-finite or degenerate."""


class GridTooLargeError(GridError):
    """Derived grid dimensions exceed MAX_GRID_SIZE."""


class InvalidPointError(GridError):
    """A coordinate transform received a non-finite value."""


class LayoutError(GridError):
    """A layout file could not be read."""


class LargeSpanWarning(UserWarning):
    """The coordinate span is large enough to produce an oversized grid."""
