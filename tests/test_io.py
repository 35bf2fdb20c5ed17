import geopandas as gpd
import numpy as np
import pytest
import rasterio
from shapely.geometry import box

from rastergrid.crs import crs_string
from rastergrid.exceptions import GridMismatch
from rastergrid.io import read_raster, read_stack, read_table, read_vector, write_raster
from rastergrid.raster import Raster


def test_geotiff_roundtrip(tmp_path, utm_raster):
    cells = utm_raster.cells.copy()
    cells[3] = np.nan
    r = utm_raster.with_values(cells)
    path = write_raster(r, tmp_path / 'probs.tif')
    back = read_raster(path)
    assert back == r
    assert crs_string(back.crs) == 'EPSG:32617'
    with rasterio.open(path) as src:
        assert src.count == 1
        assert src.dtypes[0] == 'float64'


def test_integer_band_uses_sentinel(tmp_path, utm_raster):
    cells = utm_raster.cells.copy()
    cells[0] = np.nan
    r = utm_raster.with_values(cells)
    path = write_raster(r, tmp_path / 'ids.tif', dtype='int32')
    with rasterio.open(path) as src:
        assert src.nodata == -9999
        assert src.read(1)[0, 0] == -9999
    assert read_raster(path) == r


def test_unsigned_band_uses_dtype_maximum(tmp_path, utm_raster):
    cells = utm_raster.cells.copy()
    cells[5] = np.nan
    r = utm_raster.with_values(cells)
    path = write_raster(r, tmp_path / 'ids_u8.tif', dtype='uint8')
    with rasterio.open(path) as src:
        assert src.nodata == 255
        assert src.read(1)[1, 1] == 255
    assert read_raster(path) == r


def test_stack_roundtrip_with_names(tmp_path, utm_raster):
    layers = {'oak': utm_raster, 'pine': utm_raster.with_values(utm_raster.cells / 16.0)}
    path = write_raster(layers, tmp_path / 'stack.tif')
    back = read_stack(path)
    assert list(back) == ['oak', 'pine']
    assert back['pine'] == layers['pine']


def test_stack_without_names(tmp_path, utm_raster):
    path = write_raster([utm_raster, utm_raster], tmp_path / 'stack.tif')
    assert list(read_stack(path)) == ['band_1', 'band_2']


def test_stack_requires_aligned_bands(tmp_path, utm_raster):
    other = Raster.from_parameters(utm_raster.extent, 5.0, utm_raster.crs)
    with pytest.raises(GridMismatch):
        write_raster([utm_raster, other], tmp_path / 'bad.tif')


def test_overwrite_flag(tmp_path, utm_raster):
    path = tmp_path / 'r.tif'
    write_raster(utm_raster, path)
    write_raster(utm_raster.with_values(np.zeros(16)), path)
    assert (read_raster(path).cells == 0).all()
    with pytest.raises(FileExistsError):
        write_raster(utm_raster, path, overwrite=False)


def test_raster_without_crs_can_be_written(tmp_path):
    r = Raster.from_parameters((0, 2, 0, 2), 1, fill=1.0)
    back = read_raster(write_raster(r, tmp_path / 'nocrs.tif'))
    assert back.crs is None
    assert back == r


def test_read_vector_and_table(tmp_path):
    gdf = gpd.GeoDataFrame({'zone': [1, 2]}, geometry=[box(0, 0, 1, 1), box(1, 0, 2, 1)],
                           crs='EPSG:32617')
    gdf.to_file(tmp_path / 'zones.shp')
    back = read_vector(tmp_path / 'zones.shp')
    assert len(back) == 2
    assert back.crs.to_epsg() == 32617
    assert back['zone'].tolist() == [1, 2]

    (tmp_path / 'cells.txt').write_text('cell;x;y\n1;0.5;0.5\n2;1.5;0.5\n')
    frame = read_table(tmp_path / 'cells.txt', sep=';')
    assert frame.columns.tolist() == ['cell', 'x', 'y']
    assert len(frame) == 2
