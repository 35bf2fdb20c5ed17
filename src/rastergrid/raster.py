"""
raster.py

The raster grid model: an immutable ``GridSpec`` paired with a read-only
float64 array of cell values. No-data cells hold NaN.

Rasters are built in one of three ways:
- from explicit geometry parameters (`Raster.from_parameters`), then filled
  by bulk assignment (`with_values`) or substitution (`lookup.substitute`);
- from irregular (x, y, value) triples that lie on a regular grid
  (`Raster.from_xyz` / `Raster.from_frame`);
- by rasterizing vector features against a template (`rasterize.rasterize`).

Every transformation returns a new Raster; nothing is mutated in place.
"""
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple
import logging

import numpy as np
import pandas as pd

from rastergrid.config import GRID_TOLERANCE, NODATA
from rastergrid.exceptions import InvalidGrid, IrregularGrid
from rastergrid.geometry import Extent, GridSpec, _as_resolution, geo_to_pixel
from rastergrid.utils import min_spacing, on_lattice

logger = logging.getLogger(__name__)


def _frozen(values, shape) -> np.ndarray:
    arr = np.array(values, dtype=np.float64, copy=True)
    if arr.shape != tuple(shape):
        raise InvalidGrid(f'values have shape {arr.shape}, grid needs {tuple(shape)}')
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class Raster:
    grid: GridSpec
    values: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, 'values', _frozen(self.values, self.grid.shape))

    # ── construction ─────────────────────────────────────────────────────────

    @classmethod
    def from_parameters(cls, extent, resolution, crs: Any = None, fill: float = NODATA) -> 'Raster':
        """Empty (or constant) raster for an explicit extent, resolution and CRS."""
        grid = GridSpec(extent, resolution, crs)
        logger.debug('new raster %s', grid)
        return cls(grid, np.full(grid.shape, fill, dtype=np.float64))

    @classmethod
    def from_xyz(cls, x, y, values, crs: Any = None, resolution=None) -> 'Raster':
        """Build a raster from (x, y, value) triples lying on a regular grid.

        An explicit ``resolution`` (scalar or (dx, dy)) fixes the cell size.
        Otherwise it is the minimum spacing between distinct x (and y)
        values; when only one distinct value exists along an axis, cells are
        assumed square and the other axis' spacing is used, and a single
        point needs ``resolution``. Every coordinate must fall on a whole
        multiple of the cell size. The extent is the coordinate range
        padded by half a cell. Cells not covered by any triple are no-data.
        """
        xs = np.asarray(x, dtype=np.float64).ravel()
        ys = np.asarray(y, dtype=np.float64).ravel()
        vals = np.asarray(values, dtype=np.float64).ravel()
        if not (xs.size == ys.size == vals.size):
            raise IrregularGrid(f'x, y and values differ in length ({xs.size}, {ys.size}, {vals.size})')
        if xs.size == 0:
            raise IrregularGrid('no points supplied')
        if not (np.all(np.isfinite(xs)) and np.all(np.isfinite(ys))):
            raise IrregularGrid('coordinates must be finite')

        if resolution is not None:
            dx, dy = _as_resolution(resolution)
        else:
            dx, dy = min_spacing(xs), min_spacing(ys)
        if dx is None and dy is None:
            raise IrregularGrid('a single point does not define a resolution; pass resolution=')
        dx = dy if dx is None else dx
        dy = dx if dy is None else dy

        xmin, xmax = float(xs.min()), float(xs.max())
        ymin, ymax = float(ys.min()), float(ys.max())
        if not on_lattice(xs, xmin, dx, GRID_TOLERANCE * 1e3).all():
            raise IrregularGrid(f'x coordinates are not multiples of the cell width {dx}')
        if not on_lattice(ys, ymin, dy, GRID_TOLERANCE * 1e3).all():
            raise IrregularGrid(f'y coordinates are not multiples of the cell height {dy}')

        extent = Extent(xmin - dx / 2, xmax + dx / 2, ymin - dy / 2, ymax + dy / 2)
        grid = GridSpec(extent, (dx, dy), crs)
        cols = np.round((xs - xmin) / dx).astype(int)
        rows = np.round((ymax - ys) / dy).astype(int)
        flat = rows * grid.ncols + cols
        if np.unique(flat).size != flat.size:
            raise IrregularGrid('duplicate coordinates map to the same cell')

        out = np.full(grid.size, NODATA, dtype=np.float64)
        out[flat] = vals
        logger.debug('from_xyz: %d points -> %s', xs.size, grid)
        return cls(grid, out.reshape(grid.shape))

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, x: str = 'x', y: str = 'y', value: str = 'value',
                   crs: Any = None, resolution=None) -> 'Raster':
        """``from_xyz`` over three columns of a DataFrame."""
        return cls.from_xyz(frame[x].to_numpy(), frame[y].to_numpy(), frame[value].to_numpy(),
                            crs=crs, resolution=resolution)

    def with_values(self, values: Sequence[float]) -> 'Raster':
        """Same grid, cells replaced from a row-major sequence (or 2-D array)."""
        arr = np.asarray(values, dtype=np.float64)
        if arr.size != self.grid.size:
            raise InvalidGrid(f'{arr.size} values supplied for {self.grid.size} cells')
        return Raster(self.grid, arr.reshape(self.grid.shape))

    def with_crs(self, crs: Any) -> 'Raster':
        """Same cells, CRS set (or replaced). No reprojection happens."""
        return Raster(self.grid.with_crs(crs), self.values)

    # ── grid shortcuts ───────────────────────────────────────────────────────

    @property
    def crs(self):
        return self.grid.crs

    @property
    def extent(self) -> Extent:
        return self.grid.extent

    @property
    def resolution(self) -> Tuple[float, float]:
        return self.grid.resolution

    @property
    def origin(self) -> Tuple[float, float]:
        return self.grid.origin

    @property
    def transform(self):
        return self.grid.transform

    @property
    def shape(self) -> Tuple[int, int]:
        return self.grid.shape

    @property
    def nrows(self) -> int:
        return self.grid.nrows

    @property
    def ncols(self) -> int:
        return self.grid.ncols

    @property
    def cells(self) -> np.ndarray:
        """Row-major cell values, left-to-right then top-to-bottom."""
        return self.values.ravel()

    @property
    def nodata_mask(self) -> np.ndarray:
        return np.isnan(self.values)

    # ── queries ──────────────────────────────────────────────────────────────

    def sample(self, x, y):
        """Cell values at map coordinates; NaN for points outside the grid.

        Cells are half-open: a point on the left or top edge of a cell belongs
        to it, so x == xmin and y == ymax sample the first column and row,
        while x == xmax and y == ymin fall outside.
        """
        rows, cols = geo_to_pixel(self.transform, x, y)
        rows = np.atleast_1d(rows)
        cols = np.atleast_1d(cols)
        inside = (rows >= 0) & (rows < self.nrows) & (cols >= 0) & (cols < self.ncols)
        out = np.full(rows.shape, NODATA, dtype=np.float64)
        out[inside] = self.values[rows[inside], cols[inside]]
        if np.ndim(x) == 0 and np.ndim(y) == 0:
            return float(out[0])
        return out

    def to_xyz(self, dropna: bool = True) -> pd.DataFrame:
        """Flatten to a DataFrame of cell-centre ``x``, ``y`` and ``value``."""
        xs, ys = self.grid.cell_centers()
        frame = pd.DataFrame({'x': xs.ravel(), 'y': ys.ravel(), 'value': self.cells})
        if dropna:
            frame = frame.dropna(subset=['value']).reset_index(drop=True)
        return frame

    def equals(self, other: 'Raster') -> bool:
        """Same grid and same cells, treating no-data as equal to no-data."""
        return (isinstance(other, Raster)
                and self.grid.same_grid(other.grid)
                and np.array_equal(self.values, other.values, equal_nan=True))

    def __eq__(self, other):
        if not isinstance(other, Raster):
            return NotImplemented
        return self.equals(other)

    __hash__ = None

    def __repr__(self):
        valid = int(np.count_nonzero(~self.nodata_mask))
        return f'Raster({self.grid!r}, valid_cells={valid})'
