"""File IO for rastergrid.

GeoTIFF reading and writing goes through rasterio, vector files through
geopandas and tabular files through pandas. Files are opened in ``with``
blocks so handles are released on success and on failure alike.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union
import logging

import geopandas as gpd
import numpy as np
import pandas as pd
import rasterio
from rasterio.errors import RasterioError

from rastergrid.config import GTIFF_PROFILE, INT_NODATA, NODATA, VECTOR_ENGINE
from rastergrid.exceptions import GridMismatch
from rastergrid.geometry import GridSpec
from rastergrid.raster import Raster
from rastergrid.utils import safe_log_exception as _safe_log_exception

logger = logging.getLogger(__name__)


def _band_to_float(arr: np.ndarray, nodata) -> np.ndarray:
    out = np.asarray(arr, dtype=np.float64)
    if nodata is not None and not np.isnan(nodata):
        out = np.where(out == nodata, NODATA, out)
    return out


def read_raster(path, band: int = 1) -> Raster:
    """Read one band of a raster file; its nodata value becomes NaN."""
    with rasterio.open(path) as src:
        grid = GridSpec.from_transform(src.transform, src.width, src.height, src.crs)
        arr = _band_to_float(src.read(band), src.nodata)
    logger.info('read %s band %d: %s', path, band, grid)
    return Raster(grid, arr)


def read_stack(path) -> Dict[str, Raster]:
    """Read every band of a raster file, keyed by band description.

    Bands without a description are keyed ``band_<n>`` (1-based).
    """
    out: Dict[str, Raster] = {}
    with rasterio.open(path) as src:
        grid = GridSpec.from_transform(src.transform, src.width, src.height, src.crs)
        for i in range(1, src.count + 1):
            name = src.descriptions[i - 1] or f'band_{i}'
            out[name] = Raster(grid, _band_to_float(src.read(i), src.nodatavals[i - 1]))
    logger.info('read %s: %d bands', path, len(out))
    return out


def write_raster(rasters: Union[Raster, Sequence[Raster], Dict[str, Raster]], path,
                 dtype: str = 'float64', names: Optional[Sequence[str]] = None,
                 overwrite: bool = True, nodata=None) -> Path:
    """Write one raster, or a stack of aligned rasters, to a GeoTIFF.

    Parameters:
    - rasters: a Raster, a sequence of Rasters, or a dict name -> Raster
      (names become band descriptions).
    - dtype: output band dtype. NaN is written as ``nodata``, which defaults
      to NaN for float dtypes, ``config.INT_NODATA`` for signed integer
      dtypes and the dtype maximum (e.g. 255 for uint8) for unsigned ones.
    - overwrite: when False, an existing file raises ``FileExistsError``.

    Every band must share the first band's grid (``GridMismatch``).
    """
    if isinstance(rasters, Raster):
        bands: List[Raster] = [rasters]
    elif isinstance(rasters, dict):
        names = list(rasters.keys()) if names is None else names
        bands = list(rasters.values())
    else:
        bands = list(rasters)
    if not bands:
        raise ValueError('nothing to write')
    if names is not None and len(names) != len(bands):
        raise ValueError(f'{len(names)} names for {len(bands)} bands')

    grid = bands[0].grid
    for b in bands[1:]:
        if not grid.same_grid(b.grid):
            raise GridMismatch('all bands of a stack must share one grid')

    path = Path(path)
    if path.exists() and not overwrite:
        raise FileExistsError(path)

    is_int = np.issubdtype(np.dtype(dtype), np.integer)
    if nodata is None:
        if np.issubdtype(np.dtype(dtype), np.unsignedinteger):
            nodata = np.iinfo(dtype).max
        else:
            nodata = INT_NODATA if is_int else NODATA

    profile = dict(GTIFF_PROFILE)
    profile.update(width=grid.ncols, height=grid.nrows, count=len(bands), dtype=dtype,
                   crs=grid.crs, transform=grid.transform, nodata=nodata)
    try:
        with rasterio.open(path, 'w', **profile) as dst:
            for i, band in enumerate(bands, start=1):
                arr = np.where(band.nodata_mask, nodata, band.values)
                if is_int:
                    arr = np.round(arr)
                dst.write(arr.astype(dtype), i)
                if names is not None:
                    dst.set_band_description(i, str(names[i - 1]))
    except RasterioError as e:
        _safe_log_exception('Failed writing raster', e, path=str(path))
        raise
    logger.info('wrote %s (%d band(s), %s)', path, len(bands), dtype)
    return path


def read_vector(path, engine: str = VECTOR_ENGINE, **kwargs) -> gpd.GeoDataFrame:
    """Read a shapefile-family vector file with its attribute table."""
    gdf = gpd.read_file(path, engine=engine, **kwargs)
    logger.info('read %s: %d features, crs=%s', path, len(gdf), gdf.crs)
    return gdf


def read_table(path, sep: str = ',', **kwargs) -> pd.DataFrame:
    """Read a character-separated table."""
    frame = pd.read_csv(path, sep=sep, **kwargs)
    logger.info('read %s: %d rows', path, len(frame))
    return frame
