"""
rasterization.py

Burn vector feature attributes into a grid defined by a template raster.
Coverage rules (cell centre for polygons, containing cell for points, the
Bresenham line for lines, every touched cell with ``all_touched=True``) and
overlap resolution (later features overwrite earlier ones) are rasterio's.
"""
import logging
from typing import Optional, Union

import geopandas as gpd
import numpy as np
from rasterio import features as rio_features

from rastergrid.config import NODATA
from rastergrid.crs import require_crs
from rastergrid.geometry import GridSpec
from rastergrid.raster import Raster

logger = logging.getLogger(__name__)


def rasterize(features: gpd.GeoDataFrame, template: Union[Raster, GridSpec], field: Optional[str] = None,
              all_touched: bool = False) -> Raster:
    """Rasterize ``features`` onto the grid of ``template``.

    Parameters:
    - features: GeoDataFrame with a CRS.
    - template: Raster or GridSpec giving the output grid; must have a CRS.
    - field: attribute column to burn. ``None`` burns the 1-based feature
      index instead.
    - all_touched: burn every cell a geometry touches, not only those whose
      centre it covers.

    Cells covered by no feature are no-data. Features with an empty geometry
    or a missing attribute value are skipped.
    """
    grid = template.grid if isinstance(template, Raster) else template
    dst_crs = require_crs(grid.crs, 'template')
    require_crs(features.crs, 'vector features')
    if field is not None and field not in features.columns:
        raise KeyError(f'attribute {field!r} not in features (have {list(features.columns)})')

    projected = features.to_crs(dst_crs)
    if field is None:
        burn = np.arange(1, len(projected) + 1, dtype=np.float64)
    else:
        burn = projected[field].to_numpy(dtype=np.float64, na_value=np.nan)

    shapes = [(geom, float(val)) for geom, val in zip(projected.geometry, burn)
              if geom is not None and not geom.is_empty and not np.isnan(val)]
    logger.info('rasterizing %d of %d features onto %s', len(shapes), len(projected), grid)
    if not shapes:
        return Raster(grid, np.full(grid.shape, NODATA, dtype=np.float64))

    out = rio_features.rasterize(
        shapes,
        out_shape=grid.shape,
        transform=grid.transform,
        fill=NODATA,
        all_touched=all_touched,
        dtype='float64')
    return Raster(grid, out)
