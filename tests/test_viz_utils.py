import logging

import geopandas as gpd
import numpy as np
import matplotlib.pyplot as plt
from shapely.geometry import box

from rastergrid.utils import min_spacing, on_lattice, safe_log_exception
from rastergrid.viz import plot_raster, plot_xyz


def test_plot_raster_with_overlay(unit_grid):
    r = unit_grid.with_values(np.arange(100, dtype=float))
    overlay = gpd.GeoDataFrame(geometry=[box(2, 2, 6, 6)], crs='EPSG:3857')
    ax = plot_raster(r, overlay=overlay, title='cells')
    assert ax.get_title() == 'cells'
    assert len(ax.collections) >= 2
    plt.close(ax.figure)


def test_plot_xyz_accepts_plain_triples(unit_grid):
    frame = unit_grid.with_values(np.ones(100)).to_xyz()
    fig, ax = plt.subplots()
    assert plot_xyz(frame, ax=ax, colorbar=False) is ax
    plt.close(fig)


def test_min_spacing_and_lattice():
    assert min_spacing([3.0, 1.0, 1.0, 5.0]) == 2.0
    assert min_spacing([1.0, 1.0]) is None
    assert on_lattice([0.0, 2.0, 3.0], 0.0, 1.0, 1e-9).all()
    assert on_lattice([0.0, 2.5], 0.0, 1.0, 1e-9).tolist() == [True, False]


def test_safe_log_exception_records_context(caplog):
    try:
        raise OSError('disk full')
    except OSError as e:
        with caplog.at_level(logging.ERROR, logger='rastergrid.utils'):
            safe_log_exception('Failed writing raster', e, path='out.tif')
    assert "Failed writing raster: disk full (path='out.tif')" in caplog.text
    assert caplog.records[0].exc_info is not None
