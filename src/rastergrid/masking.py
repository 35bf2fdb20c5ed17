"""Masking a raster against another raster or against vector features."""
import logging

import geopandas as gpd
import numpy as np
from rasterio.features import geometry_mask

from rastergrid.config import NODATA
from rastergrid.crs import require_crs
from rastergrid.raster import Raster

logger = logging.getLogger(__name__)


def mask(raster: Raster, mask_raster: Raster, inverse: bool = False, updatevalue: float = NODATA) -> Raster:
    """Set cells to ``updatevalue`` where ``mask_raster`` is no-data.

    With ``inverse=True`` the cells where the mask holds data are replaced
    instead. Both rasters must share extent, resolution and CRS, otherwise
    ``GridMismatch`` is raised.
    """
    raster.grid.check_aligned(mask_raster.grid)
    hit = mask_raster.nodata_mask
    if inverse:
        hit = ~hit
    out = np.where(hit, updatevalue, raster.values)
    return Raster(raster.grid, out)


def mask_with_vector(raster: Raster, features: gpd.GeoDataFrame, inverse: bool = False,
                     all_touched: bool = False, updatevalue: float = NODATA) -> Raster:
    """Set cells outside the union of ``features`` to ``updatevalue``.

    Features are reprojected to the raster's CRS first, so both need one
    (``MissingCRS`` otherwise). ``inverse=True`` blanks the inside instead.
    """
    dst_crs = require_crs(raster.crs)
    require_crs(features.crs, 'vector features')
    geoms = [g for g in features.to_crs(dst_crs).geometry if g is not None and not g.is_empty]
    if not geoms:
        outside = np.ones(raster.shape, dtype=bool)
    else:
        outside = geometry_mask(geoms, out_shape=raster.shape, transform=raster.transform,
                                all_touched=all_touched)
    hit = ~outside if inverse else outside
    logger.debug('mask_with_vector: %d of %d cells blanked', int(hit.sum()), hit.size)
    return Raster(raster.grid, np.where(hit, updatevalue, raster.values))
