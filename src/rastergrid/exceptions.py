"""Exceptions raised by rastergrid operations.

Every failure is local and surfaced to the caller. Nothing here retries or
coerces: a misaligned grid, a missing CRS or an irregular point set aborts
the current step.
"""


class RasterError(Exception):
    """Base class for all rastergrid errors."""


class InvalidGrid(RasterError, ValueError):
    """Extent, resolution and value shape do not describe a regular grid."""


class IrregularGrid(RasterError, ValueError):
    """Point coordinates do not sit on a consistent regular grid."""


class GridMismatch(RasterError, ValueError):
    """Two rasters were expected to share extent, resolution and CRS."""


class MissingCRS(RasterError):
    """An operation needs a coordinate reference system that was never set."""


class LookupTableError(RasterError, ValueError):
    """A lookup table could not be built from the supplied keys and values."""
