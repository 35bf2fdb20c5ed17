"""rastergrid: an immutable raster grid model over rasterio and geopandas."""

from rastergrid.exceptions import (
    GridMismatch, InvalidGrid, IrregularGrid, LookupTableError, MissingCRS, RasterError,
)
from rastergrid.geometry import Extent, GridSpec
from rastergrid.raster import Raster
from rastergrid.lookup import LookupTable, substitute
from rastergrid.extent import crop, trim
from rastergrid.warp import reproject
from rastergrid.masking import mask, mask_with_vector
from rastergrid.rasterization import rasterize

__version__ = '0.1.0'

__all__ = [
    'Extent', 'GridSpec', 'Raster', 'LookupTable',
    'substitute', 'crop', 'trim', 'reproject', 'mask', 'mask_with_vector', 'rasterize',
    'RasterError', 'InvalidGrid', 'IrregularGrid', 'GridMismatch', 'MissingCRS', 'LookupTableError',
]
