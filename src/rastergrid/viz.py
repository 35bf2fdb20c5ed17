"""
viz.py

The plot contract: a raster is handed to the renderer as a flat table of
(x, y, value) triples, optionally with a vector overlay drawn on top.
Rendering itself is matplotlib's (and geopandas' ``plot`` for overlays).

Keep these helpers free of state so they can be called from notebooks or
scripts alike.
"""
import logging
from typing import Optional

import geopandas as gpd
import matplotlib.pyplot as plt
import pandas as pd

from rastergrid.crs import crs_equal
from rastergrid.raster import Raster

logger = logging.getLogger(__name__)


def plot_xyz(frame: pd.DataFrame, overlay: Optional[gpd.GeoDataFrame] = None, ax=None,
             x: str = 'x', y: str = 'y', value: str = 'value', cmap: str = 'viridis',
             title: Optional[str] = None, colorbar: bool = True):
    """Render (x, y, value) triples as a cell grid; returns the axes."""
    if ax is None:
        _, ax = plt.subplots()
    grid = frame.pivot(index=y, columns=x, values=value)
    mesh = ax.pcolormesh(grid.columns.to_numpy(), grid.index.to_numpy(), grid.to_numpy(),
                         cmap=cmap, shading='nearest')
    if colorbar:
        ax.figure.colorbar(mesh, ax=ax, label=value)
    if overlay is not None:
        overlay.plot(ax=ax, facecolor='none', edgecolor='k', linewidth=0.8)
    ax.set_aspect('equal')
    if title:
        ax.set_title(title)
    return ax


def plot_raster(raster: Raster, overlay: Optional[gpd.GeoDataFrame] = None, ax=None, **kwargs):
    """Convenience wrapper: ``plot_xyz(raster.to_xyz(), ...)``.

    An overlay in another CRS is reprojected to the raster's first.
    """
    if overlay is not None and raster.crs is not None and overlay.crs is not None \
            and not crs_equal(overlay.crs, raster.crs):
        logger.debug('reprojecting overlay to %s for plotting', raster.crs)
        overlay = overlay.to_crs(raster.crs)
    return plot_xyz(raster.to_xyz(dropna=False), overlay=overlay, ax=ax, **kwargs)
