import numpy as np
import pandas as pd
import pytest

from rastergrid.crs import crs_string
from rastergrid.io import read_stack
from rastergrid.raster import Raster
from rastergrid.workflow import (
    CELL_BAND, cell_raster, main, probability_rasters, run_workshop, trim_stack,
)


@pytest.fixture
def cells():
    # 3 x 2 block of 100 m cells; identifiers increase left-to-right, top-to-bottom
    return pd.DataFrame({
        'cell_id': [1, 2, 3, 4, 5, 6],
        'x': [500050.0, 500150.0, 500250.0, 500050.0, 500150.0, 500250.0],
        'y': [4000150.0, 4000150.0, 4000150.0, 4000050.0, 4000050.0, 4000050.0],
    })


@pytest.fixture
def probabilities():
    return pd.DataFrame({
        'cell_id': [1, 2, 4, 5, 1, 2, 3],
        'species': ['oak', 'oak', 'oak', 'oak', 'pine', 'pine', 'pine'],
        'probability': [0.1, 0.2, 0.4, 0.5, 0.9, 0.8, 0.7],
    })


def test_cell_raster_layout(cells):
    ids = cell_raster(cells, crs='EPSG:32617')
    assert ids.shape == (2, 3)
    assert ids.cells.tolist() == [1, 2, 3, 4, 5, 6]


def test_probability_rasters_per_species(cells, probabilities):
    ids = cell_raster(cells, crs='EPSG:32617')
    layers = probability_rasters(ids, probabilities)
    assert list(layers) == ['oak', 'pine']
    np.testing.assert_allclose(layers['oak'].cells, [0.1, 0.2, np.nan, 0.4, 0.5, np.nan])
    np.testing.assert_allclose(layers['pine'].cells, [0.9, 0.8, 0.7, np.nan, np.nan, np.nan])


def test_probability_rasters_single_layer(cells, probabilities):
    ids = cell_raster(cells)
    oak = probabilities[probabilities.species == 'oak']
    layers = probability_rasters(ids, oak, species=None)
    assert list(layers) == ['probability']


def test_trim_stack_keeps_union_of_data():
    grid = Raster.from_parameters((0, 4, 0, 1), 1)
    a = grid.with_values([1, np.nan, np.nan, np.nan])
    b = grid.with_values([np.nan, 2, np.nan, np.nan])
    out = trim_stack({'a': a, 'b': b})
    assert out['a'].shape == out['b'].shape == (1, 2)
    assert out['a'].grid == out['b'].grid


def test_run_workshop_writes_stack(tmp_path, cells, probabilities):
    out_path = tmp_path / 'species.tif'
    layers = run_workshop(cells, probabilities, out_path=out_path, crs='EPSG:32617',
                          include_cells=True)
    assert list(layers) == [CELL_BAND, 'oak', 'pine']
    back = read_stack(out_path)
    assert list(back) == [CELL_BAND, 'oak', 'pine']
    assert back['oak'] == layers['oak']


def test_run_workshop_reprojects(cells, probabilities):
    layers = run_workshop(cells, probabilities, crs='EPSG:32617', resolution=50.0,
                          include_cells=True)
    ids = layers[CELL_BAND]
    assert ids.resolution == pytest.approx((50.0, 50.0))
    assert set(np.unique(ids.cells[~np.isnan(ids.cells)])) <= {1.0, 2.0, 3.0, 4.0, 5.0, 6.0}
    assert layers['oak'].grid == ids.grid
    assert crs_string(ids.crs) == 'EPSG:32617'


def test_main_cli(tmp_path, cells, probabilities):
    cells.to_csv(tmp_path / 'cells.csv', index=False)
    probabilities.to_csv(tmp_path / 'probs.csv', index=False)
    out_path = tmp_path / 'out.tif'
    rc = main(['--cells', str(tmp_path / 'cells.csv'),
               '--probabilities', str(tmp_path / 'probs.csv'),
               '--out', str(out_path), '--crs', 'EPSG:32617', '--log-level', 'WARNING'])
    assert rc == 0
    back = read_stack(out_path)
    assert list(back) == ['oak', 'pine']
    assert back['pine'].sample(500250.0, 4000150.0) == pytest.approx(0.7)
