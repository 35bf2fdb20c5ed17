"""Cropping and trimming.

Both operations cut whole rows and columns out of an existing grid, so the
result keeps the source resolution, CRS and cell alignment.
"""
import logging
import math
from typing import Union

import numpy as np

from rastergrid.config import GRID_TOLERANCE
from rastergrid.crs import crs_equal
from rastergrid.exceptions import GridMismatch, RasterError
from rastergrid.geometry import Extent, GridSpec, _as_extent
from rastergrid.raster import Raster

logger = logging.getLogger(__name__)


def _subgrid(raster: Raster, row0: int, row1: int, col0: int, col1: int) -> Raster:
    """Raster made of rows [row0, row1) and columns [col0, col1)."""
    dx, dy = raster.resolution
    ext = raster.extent
    new_ext = Extent(ext.xmin + col0 * dx, ext.xmin + col1 * dx,
                     ext.ymax - row1 * dy, ext.ymax - row0 * dy)
    grid = GridSpec(new_ext, raster.resolution, raster.crs)
    return Raster(grid, raster.values[row0:row1, col0:col1])


def crop(raster: Raster, target: Union[Extent, Raster, GridSpec, tuple]) -> Raster:
    """Restrict ``raster`` to the part overlapping ``target``.

    ``target`` is an extent or anything carrying one (a Raster or GridSpec).
    Edges snap outward to the source grid lines so every overlapping cell is
    kept whole. When ``target`` has a CRS it must equal the raster's.
    """
    if isinstance(target, Raster):
        target = target.grid
    if isinstance(target, GridSpec):
        if target.crs is not None and raster.crs is not None and not crs_equal(target.crs, raster.crs):
            raise GridMismatch('cannot crop to an extent in a different CRS; reproject first')
        target = target.extent
    overlap = raster.extent.intersection(_as_extent(target))
    if overlap is None:
        raise RasterError(f'target extent {tuple(target)} does not overlap {tuple(raster.extent)}')

    dx, dy = raster.resolution
    ext = raster.extent
    tol = GRID_TOLERANCE
    col0 = math.floor((overlap.xmin - ext.xmin) / dx + tol)
    col1 = math.ceil((overlap.xmax - ext.xmin) / dx - tol)
    row0 = math.floor((ext.ymax - overlap.ymax) / dy + tol)
    row1 = math.ceil((ext.ymax - overlap.ymin) / dy - tol)
    col0, row0 = max(col0, 0), max(row0, 0)
    col1, row1 = min(col1, raster.ncols), min(row1, raster.nrows)
    col1, row1 = max(col1, col0 + 1), max(row1, row0 + 1)
    logger.debug('crop rows %d:%d cols %d:%d', row0, row1, col0, col1)
    return _subgrid(raster, row0, row1, col0, col1)


def trim(raster: Raster) -> Raster:
    """Drop outer rows and columns that hold only no-data."""
    valid = ~raster.nodata_mask
    if not valid.any():
        raise RasterError('raster holds only no-data cells; nothing to trim to')
    rows = np.flatnonzero(valid.any(axis=1))
    cols = np.flatnonzero(valid.any(axis=0))
    row0, row1 = int(rows[0]), int(rows[-1]) + 1
    col0, col1 = int(cols[0]), int(cols[-1]) + 1
    if (row0, row1, col0, col1) == (0, raster.nrows, 0, raster.ncols):
        return raster
    logger.debug('trim %s -> rows %d:%d cols %d:%d', raster.shape, row0, row1, col0, col1)
    return _subgrid(raster, row0, row1, col0, col1)
