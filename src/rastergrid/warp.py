"""
warp.py

Reprojection and resampling. All projection maths and resampling kernels are
delegated to rasterio (GDAL); this module only decides the target grid and
maps the two supported policies onto rasterio's ``Resampling`` enum.

Policies:
- ``'nearest'``: each output cell takes the nearest input cell centre. Use it
  for categorical or identifier layers; discrete values are preserved.
- ``'bilinear'``: weighted interpolation of the four nearest input centres.
  Use it for continuous layers such as probabilities.

Output cells outside the source, or fed only by no-data cells, are no-data.
"""
import logging
from typing import Any, Optional, Union

import numpy as np
from rasterio.enums import Resampling
from rasterio.warp import calculate_default_transform
from rasterio.warp import reproject as _rio_reproject

from rastergrid.config import DEFAULT_RESAMPLING, NODATA, RESAMPLING_POLICIES
from rastergrid.crs import crs_string, parse_crs, require_crs
from rastergrid.geometry import GridSpec, _as_resolution
from rastergrid.raster import Raster

logger = logging.getLogger(__name__)


def resampling_policy(method: Union[str, Resampling]) -> Resampling:
    """Translate a policy name (or enum member) into rasterio's enum."""
    if isinstance(method, Resampling):
        if method not in RESAMPLING_POLICIES.values():
            raise ValueError(f'unsupported resampling {method.name}; use one of {sorted(RESAMPLING_POLICIES)}')
        return method
    try:
        return RESAMPLING_POLICIES[str(method).lower()]
    except KeyError:
        raise ValueError(f'unsupported resampling {method!r}; use one of {sorted(RESAMPLING_POLICIES)}') from None


def target_grid(raster: Raster, template: Optional[Union[Raster, GridSpec]] = None, crs: Any = None,
                resolution=None, extent=None) -> GridSpec:
    """Work out the output grid for ``reproject``.

    Priority: a template's grid; an explicit extent (with the given or the
    source resolution); otherwise the grid rasterio's
    ``calculate_default_transform`` proposes for the target CRS.
    """
    if template is not None:
        grid = template.grid if isinstance(template, Raster) else template
        require_crs(grid.crs, 'template')
        return grid

    src_crs = require_crs(raster.crs)
    dst_crs = parse_crs(crs) or src_crs
    if extent is not None:
        res = resolution if resolution is not None else raster.resolution
        return GridSpec(extent, res, dst_crs)

    res = _as_resolution(resolution) if resolution is not None else None
    if res is None and crs_string(dst_crs) == crs_string(src_crs):
        return raster.grid
    left, bottom, right, top = raster.extent.bounds
    transform, width, height = calculate_default_transform(
        src_crs, dst_crs, raster.ncols, raster.nrows,
        left=left, bottom=bottom, right=right, top=top,
        resolution=res)
    return GridSpec.from_transform(transform, width, height, dst_crs)


def reproject(raster: Raster, template: Optional[Union[Raster, GridSpec]] = None, crs: Any = None,
              resolution=None, extent=None, method: Union[str, Resampling] = DEFAULT_RESAMPLING) -> Raster:
    """Resample ``raster`` onto a new grid, possibly in a new CRS.

    Parameters:
    - template: Raster or GridSpec whose grid (CRS, extent, resolution) is
      reused as-is. Overrides ``crs``, ``resolution`` and ``extent``.
    - crs: target CRS; defaults to the source CRS.
    - resolution: target cell size, scalar or (dx, dy).
    - extent: target (xmin, xmax, ymin, ymax) in target CRS units.
    - method: ``'nearest'`` or ``'bilinear'``.

    Raises ``MissingCRS`` when the source (or template) has no CRS.
    """
    require_crs(raster.crs)
    resampling = resampling_policy(method)
    dst_grid = target_grid(raster, template=template, crs=crs, resolution=resolution, extent=extent)

    destination = np.full(dst_grid.shape, NODATA, dtype=np.float64)
    _rio_reproject(
        source=np.array(raster.values, dtype=np.float64),
        destination=destination,
        src_transform=raster.transform,
        src_crs=raster.crs,
        src_nodata=NODATA,
        dst_transform=dst_grid.transform,
        dst_crs=dst_grid.crs,
        dst_nodata=NODATA,
        resampling=resampling)
    logger.info('reprojected %s -> %s (%s)', raster.grid, dst_grid, resampling.name)
    return Raster(dst_grid, destination)
