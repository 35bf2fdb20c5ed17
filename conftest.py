import matplotlib

# headless backend for any test that draws
matplotlib.use('Agg')

import numpy as np
import pytest

from rastergrid.raster import Raster

UTM = 'EPSG:32617'


@pytest.fixture
def utm_raster():
    """4 x 4 raster of values 1..16 on a 10 m UTM grid."""
    return Raster.from_parameters((500000.0, 500040.0, 4000000.0, 4000040.0), 10.0, UTM) \
        .with_values(np.arange(1, 17, dtype=float))


@pytest.fixture
def unit_grid():
    """10 x 10 empty raster on a 1 m grid anchored at the origin."""
    return Raster.from_parameters((0.0, 10.0, 0.0, 10.0), 1.0, 'EPSG:3857')
