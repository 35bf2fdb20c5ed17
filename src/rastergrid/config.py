# -*- coding: utf-8 -*-

"""
config.py

Central constants for rastergrid. Keeping sentinels, tolerances and file
profiles in one place keeps the grid model, the warping helpers and the
GeoTIFF writer consistent with each other.

Contents:
---------
1. NO-DATA:
   - ``NODATA`` is the in-memory sentinel (NaN); every Raster stores float64.
   - ``INT_NODATA`` is written into signed integer GeoTIFF bands where NaN
     cannot be represented; unsigned bands use the dtype maximum instead.

2. GRID_TOLERANCE:
   - Relative tolerance (fraction of a cell) used when checking that an
     extent divides evenly by a resolution, or that two grids line up.

3. RESAMPLING_POLICIES:
   - The two resampling policies exposed by ``warp.reproject``. Nearest is for
     categorical / identifier layers, bilinear for continuous layers.

4. GTIFF_PROFILE:
   - Default creation options for GeoTIFF output, and the geopandas engine
     used to read vector files.

5. LOGGING:
   - ``LOG_FORMAT`` and the third-party loggers quieted by
     ``configure_logging``.

Usage:
------
    from rastergrid.config import NODATA, configure_logging

    configure_logging('INFO')
"""
import logging

import numpy as np
from rasterio.enums import Resampling

# ───────────────────────────────────────────────────────────────────────────────
# 1) NO-DATA SENTINELS
# ───────────────────────────────────────────────────────────────────────────────
NODATA = np.nan
INT_NODATA = -9999

# ───────────────────────────────────────────────────────────────────────────────
# 2) GRID GEOMETRY
# ───────────────────────────────────────────────────────────────────────────────
GRID_TOLERANCE = 1e-6       # fraction of a cell

# ───────────────────────────────────────────────────────────────────────────────
# 3) RESAMPLING
# ───────────────────────────────────────────────────────────────────────────────
RESAMPLING_POLICIES = {
    'nearest': Resampling.nearest,      # categorical / identifier data
    'bilinear': Resampling.bilinear,    # continuous data (probabilities)
}
DEFAULT_RESAMPLING = 'nearest'

# ───────────────────────────────────────────────────────────────────────────────
# 4) FILE OUTPUT
# ───────────────────────────────────────────────────────────────────────────────
GTIFF_PROFILE = {
    'driver': 'GTiff',
    'compress': 'lzw',
    'tiled': False,
}
VECTOR_ENGINE = 'fiona'     # geopandas read_file engine

# ───────────────────────────────────────────────────────────────────────────────
# 5) LOGGING
# ───────────────────────────────────────────────────────────────────────────────
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'
QUIET_LOGGERS = {
    'fiona': logging.ERROR,
    'geopandas': logging.ERROR,
    'shapely': logging.ERROR,
    'rasterio': logging.WARNING,
    'matplotlib': logging.WARNING,
    'pyogrio': logging.WARNING,
}


def configure_logging(level='INFO', log_file=None):
    """Configure root logging for scripts and the console entry point.

    Library modules only ever call ``logging.getLogger(__name__)``; this is
    meant to be called once by an application.
    """
    handlers = [logging.StreamHandler()]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file))
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)
    for name, lvl in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(lvl)
