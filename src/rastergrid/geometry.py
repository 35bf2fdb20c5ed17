"""
geometry.py

Grid geometry: the extent of a raster, its descriptor (CRS + origin +
resolution + extent) and conversions between pixel (row, col) indices and
map coordinates using affine transforms.

Public objects:
- `Extent(xmin, xmax, ymin, ymax)`
- `GridSpec(extent, resolution, crs=None)`
- `pixel_to_geo(transform, rows, cols)` -> (xs, ys) of cell centres
- `geo_to_pixel(transform, X, Y)` -> (rows, cols) of the containing cells

"""
from dataclasses import dataclass, field
from typing import Any, NamedTuple, Optional, Tuple
import math

import numpy as np
from affine import Affine
from rasterio.crs import CRS
from rasterio.transform import from_origin

from rastergrid.config import GRID_TOLERANCE
from rastergrid.crs import crs_equal, crs_string, parse_crs
from rastergrid.exceptions import GridMismatch, InvalidGrid


class Extent(NamedTuple):
    """Bounding box in CRS units, ordered (xmin, xmax, ymin, ymax)."""
    xmin: float
    xmax: float
    ymin: float
    ymax: float

    @classmethod
    def from_bounds(cls, left, bottom, right, top) -> 'Extent':
        """Build from rasterio / shapely ordering (left, bottom, right, top)."""
        return cls(float(left), float(right), float(bottom), float(top))

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        return (self.xmin, self.ymin, self.xmax, self.ymax)

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    def intersection(self, other: 'Extent') -> Optional['Extent']:
        """Overlapping box, or ``None`` when the extents do not overlap."""
        xmin = max(self.xmin, other.xmin)
        xmax = min(self.xmax, other.xmax)
        ymin = max(self.ymin, other.ymin)
        ymax = min(self.ymax, other.ymax)
        if xmin >= xmax or ymin >= ymax:
            return None
        return Extent(xmin, xmax, ymin, ymax)


def _as_extent(value) -> Extent:
    if isinstance(value, Extent):
        return value
    vals = tuple(float(v) for v in value)
    if len(vals) != 4:
        raise InvalidGrid(f'extent needs 4 values (xmin, xmax, ymin, ymax), got {len(vals)}')
    return Extent(*vals)


def _as_resolution(value) -> Tuple[float, float]:
    if np.isscalar(value):
        res = (float(value), float(value))
    else:
        res = tuple(float(v) for v in value)
    if len(res) != 2:
        raise InvalidGrid(f'resolution needs (dx, dy), got {value!r}')
    if not all(r > 0 and math.isfinite(r) for r in res):
        raise InvalidGrid(f'resolution must be positive and finite, got {res}')
    return res


def _cell_count(span: float, step: float, axis: str) -> int:
    n = span / step
    nearest = round(n)
    if nearest < 1 or abs(n - nearest) > GRID_TOLERANCE * max(1.0, nearest):
        raise InvalidGrid(f'{axis} extent {span} is not a whole number of {step} cells')
    return int(nearest)


@dataclass(frozen=True, eq=False)
class GridSpec:
    """Immutable raster descriptor.

    The extent and resolution fully determine the number of columns and rows;
    construction fails with ``InvalidGrid`` when they do not divide evenly.
    The origin is the top-left corner, matching the rasterio transform.
    """
    extent: Extent
    resolution: Tuple[float, float]
    crs: Optional[CRS] = None
    ncols: int = field(init=False)
    nrows: int = field(init=False)

    def __post_init__(self):
        ext = _as_extent(self.extent)
        if ext.width <= 0 or ext.height <= 0:
            raise InvalidGrid(f'extent must have positive width and height, got {ext}')
        res = _as_resolution(self.resolution)
        object.__setattr__(self, 'extent', ext)
        object.__setattr__(self, 'resolution', res)
        object.__setattr__(self, 'crs', parse_crs(self.crs))
        object.__setattr__(self, 'ncols', _cell_count(ext.width, res[0], 'x'))
        object.__setattr__(self, 'nrows', _cell_count(ext.height, res[1], 'y'))

    @classmethod
    def from_transform(cls, transform: Affine, width: int, height: int, crs: Any = None) -> 'GridSpec':
        """Descriptor for a north-up rasterio transform and array size."""
        if transform.b != 0 or transform.d != 0:
            raise InvalidGrid('rotated or sheared transforms are not supported')
        if transform.e >= 0:
            raise InvalidGrid('only north-up rasters (negative y pixel size) are supported')
        dx, dy = transform.a, -transform.e
        xmin, ymax = transform.c, transform.f
        ext = Extent(xmin, xmin + width * dx, ymax - height * dy, ymax)
        return cls(ext, (dx, dy), crs)

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.nrows, self.ncols)

    @property
    def size(self) -> int:
        return self.nrows * self.ncols

    @property
    def origin(self) -> Tuple[float, float]:
        return (self.extent.xmin, self.extent.ymax)

    @property
    def transform(self) -> Affine:
        return from_origin(self.extent.xmin, self.extent.ymax, self.resolution[0], self.resolution[1])

    def with_crs(self, crs: Any) -> 'GridSpec':
        return GridSpec(self.extent, self.resolution, crs)

    def cell_centers(self) -> Tuple[np.ndarray, np.ndarray]:
        """(xs, ys) arrays of shape (nrows, ncols) holding cell-centre coordinates."""
        cols, rows = np.meshgrid(np.arange(self.ncols), np.arange(self.nrows))
        return pixel_to_geo(self.transform, rows, cols)

    def same_grid(self, other: 'GridSpec') -> bool:
        """True when extent, resolution and CRS all match."""
        tol_x = GRID_TOLERANCE * self.resolution[0]
        tol_y = GRID_TOLERANCE * self.resolution[1]
        if not np.allclose(self.resolution, other.resolution, rtol=0, atol=min(tol_x, tol_y)):
            return False
        a, b = self.extent, other.extent
        if abs(a.xmin - b.xmin) > tol_x or abs(a.xmax - b.xmax) > tol_x:
            return False
        if abs(a.ymin - b.ymin) > tol_y or abs(a.ymax - b.ymax) > tol_y:
            return False
        return crs_equal(self.crs, other.crs)

    def check_aligned(self, other: 'GridSpec') -> None:
        if not self.same_grid(other):
            raise GridMismatch(f'grids differ: {self!r} vs {other!r}')

    def __eq__(self, other):
        if not isinstance(other, GridSpec):
            return NotImplemented
        return self.same_grid(other)

    __hash__ = None

    def __repr__(self):
        return (f'GridSpec(extent={tuple(self.extent)}, resolution={self.resolution}, '
                f'crs={crs_string(self.crs)!r}, shape={self.shape})')


def pixel_to_geo(transform, rows, cols) -> Tuple[np.ndarray, np.ndarray]:
    """Convert raster pixel indices to the coordinates of the cell centres.

    Parameters:
    - transform: affine.Affine mapping (col, row) of the top-left pixel
      corner to map coordinates.
    - rows, cols: scalars or array-like of the same shape.

    Returns: (xs, ys) numpy arrays of the same shape as input, or floats for
    scalar input.
    """
    rows_a = np.asarray(rows, dtype=np.float64) + 0.5
    cols_a = np.asarray(cols, dtype=np.float64) + 0.5
    xs, ys = transform * (cols_a, rows_a)
    if rows_a.shape == () and cols_a.shape == ():
        return float(xs), float(ys)
    return np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)


def geo_to_pixel(transform, X, Y) -> Tuple[np.ndarray, np.ndarray]:
    """Convert map coordinates to the (rows, cols) of the containing cells.

    Indices are not clipped; callers decide what out-of-grid means.
    """
    inv = ~transform
    X_a = np.asarray(X, dtype=np.float64)
    Y_a = np.asarray(Y, dtype=np.float64)
    c, r = inv * (X_a, Y_a)
    rows = np.floor(np.asarray(r)).astype(int)
    cols = np.floor(np.asarray(c)).astype(int)
    if X_a.shape == () and Y_a.shape == ():
        return int(rows), int(cols)
    return rows, cols
