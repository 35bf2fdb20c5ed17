import numpy as np
import pytest
from affine import Affine

from rastergrid.crs import crs_equal, crs_string, parse_crs, require_crs
from rastergrid.exceptions import GridMismatch, InvalidGrid, MissingCRS
from rastergrid.geometry import Extent, GridSpec, geo_to_pixel, pixel_to_geo
from rastergrid.raster import Raster


@pytest.mark.parametrize('extent,res,expected', [
    ((0, 100, 0, 50), 10, (5, 10)),
    ((0, 100, 0, 50), (10, 5), (10, 10)),
    ((-180, 180, -90, 90), 0.5, (360, 720)),
    ((500000, 500030, 4000000, 4000020), 0.1, (200, 300)),
])
def test_dimensions_follow_extent_and_resolution(extent, res, expected):
    r = Raster.from_parameters(extent, res)
    assert r.shape == expected
    xmin, xmax, ymin, ymax = extent
    dx, dy = (res, res) if np.isscalar(res) else res
    assert r.ncols == round((xmax - xmin) / dx)
    assert r.nrows == round((ymax - ymin) / dy)
    assert len(r.cells) == r.ncols * r.nrows
    assert np.isnan(r.cells).all()


def test_uneven_extent_rejected():
    with pytest.raises(InvalidGrid):
        GridSpec((0, 105, 0, 50), 10)
    with pytest.raises(InvalidGrid):
        GridSpec((0, 100, 0, 50), 0)
    with pytest.raises(InvalidGrid):
        GridSpec((10, 0, 0, 50), 1)


def test_transform_origin_and_roundtrip():
    g = GridSpec((0, 100, 0, 50), 10, 'EPSG:32617')
    assert g.origin == (0.0, 50.0)
    assert g.transform == Affine(10.0, 0.0, 0.0, 0.0, -10.0, 50.0)
    back = GridSpec.from_transform(g.transform, g.ncols, g.nrows, g.crs)
    assert back == g
    assert crs_string(back.crs) == 'EPSG:32617'


def test_rotated_transform_rejected():
    with pytest.raises(InvalidGrid):
        GridSpec.from_transform(Affine(1, 0.2, 0, 0, -1, 10), 10, 10)


def test_same_grid_compares_crs_by_string():
    a = GridSpec((0, 10, 0, 10), 1, 'EPSG:4326')
    b = GridSpec((0, 10, 0, 10), 1, 4326)
    c = GridSpec((0, 10, 0, 10), 1, 'EPSG:3857')
    d = GridSpec((0, 10, 0, 10), 1)
    assert a.same_grid(b)
    assert not a.same_grid(c)
    assert not a.same_grid(d)
    with pytest.raises(GridMismatch):
        a.check_aligned(GridSpec((0, 10, 0, 10), 2, 'EPSG:4326'))


def test_extent_intersection():
    a = Extent(0, 10, 0, 10)
    assert a.intersection(Extent(5, 20, -5, 5)) == Extent(5, 10, 0, 5)
    assert a.intersection(Extent(20, 30, 0, 10)) is None
    assert Extent.from_bounds(0, 1, 2, 3) == Extent(0, 2, 1, 3)
    assert a.bounds == (0, 0, 10, 10)


def test_pixel_geo_conversion():
    t = GridSpec((0, 100, 0, 50), 10).transform
    assert pixel_to_geo(t, 0, 0) == (5.0, 45.0)
    xs, ys = pixel_to_geo(t, np.array([0, 4]), np.array([9, 0]))
    np.testing.assert_allclose(xs, [95.0, 5.0])
    np.testing.assert_allclose(ys, [45.0, 5.0])
    assert geo_to_pixel(t, 5.0, 45.0) == (0, 0)
    rows, cols = geo_to_pixel(t, np.array([99.0, 0.1]), np.array([1.0, 49.9]))
    assert rows.tolist() == [4, 0]
    assert cols.tolist() == [9, 0]


def test_cell_centers_shape():
    xs, ys = GridSpec((0, 3, 0, 2), 1).cell_centers()
    assert xs.shape == (2, 3)
    np.testing.assert_allclose(xs[0], [0.5, 1.5, 2.5])
    np.testing.assert_allclose(ys[:, 0], [1.5, 0.5])


def test_crs_helpers():
    assert parse_crs(None) is None
    assert parse_crs('') is None
    assert crs_equal('EPSG:4326', 4326)
    assert crs_equal(None, None)
    assert not crs_equal('EPSG:4326', 'EPSG:3857')
    assert not crs_equal('EPSG:4326', None)
    with pytest.raises(MissingCRS):
        require_crs(None)
