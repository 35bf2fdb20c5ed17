"""
workflow.py

The workshop walkthrough as a reusable pipeline:

1. Build a cell-identifier raster from a table of cell centres.
2. Substitute per-species probabilities into copies of it (one layer per
   species) using typed lookup tables.
3. Optionally mask to a study-area polygon, reproject (nearest for the
   identifiers, bilinear for probabilities) and trim empty margins.
4. Write everything as one multi-band GeoTIFF.

Usage:
------
    rastergrid --cells cells.csv --probabilities probs.csv --crs EPSG:32617 \\
        --target-crs EPSG:4326 --out species.tif
"""
import argparse
import logging
from typing import Any, Dict, Optional, Sequence

import numpy as np
import pandas as pd

from rastergrid import config
from rastergrid.extent import crop, trim
from rastergrid.io import read_table, read_vector, write_raster
from rastergrid.lookup import LookupTable, substitute
from rastergrid.masking import mask_with_vector
from rastergrid.raster import Raster
from rastergrid.warp import reproject

logger = logging.getLogger(__name__)

CELL_BAND = 'cell_id'


def cell_raster(cells: pd.DataFrame, x: str = 'x', y: str = 'y', cell: str = 'cell_id',
                crs: Any = None) -> Raster:
    """Cell-identifier raster from a table of cell-centre coordinates."""
    return Raster.from_frame(cells, x=x, y=y, value=cell, crs=crs)


def probability_rasters(cells: Raster, probabilities: pd.DataFrame, key: str = 'cell_id',
                        species: Optional[str] = 'species', value: str = 'probability') -> Dict[str, Raster]:
    """One substituted layer per species.

    ``probabilities`` is a long table (key, species, value). With
    ``species=None`` the whole table is one layer named after ``value``.
    """
    if species is None:
        return {value: substitute(cells, LookupTable.from_frame(probabilities, key, value))}
    layers: Dict[str, Raster] = {}
    for name, group in probabilities.groupby(species, sort=True):
        layers[str(name)] = substitute(cells, LookupTable.from_frame(group, key, value))
        logger.debug('layer %s: %d lookup rows', name, len(group))
    return layers


def trim_stack(layers: Dict[str, Raster]) -> Dict[str, Raster]:
    """Trim aligned layers to the smallest extent holding data in any of them."""
    first = next(iter(layers.values()))
    valid = np.zeros(first.shape, dtype=bool)
    for layer in layers.values():
        valid |= ~layer.nodata_mask
    coverage = Raster(first.grid, np.where(valid, 1.0, config.NODATA))
    bounds = trim(coverage)
    return {name: crop(layer, bounds) for name, layer in layers.items()}


def run_workshop(cells: pd.DataFrame, probabilities: pd.DataFrame, out_path=None, crs: Any = None,
                 target_crs: Any = None, resolution=None, study_area=None, do_trim: bool = True,
                 include_cells: bool = False, x: str = 'x', y: str = 'y', cell: str = 'cell_id',
                 key: Optional[str] = None, species: Optional[str] = 'species',
                 value: str = 'probability', dtype: str = 'float64') -> Dict[str, Raster]:
    """Run the whole walkthrough; returns the final layers (and writes them if ``out_path``)."""
    ids = cell_raster(cells, x=x, y=y, cell=cell, crs=crs)
    logger.info('cell raster: %s', ids)
    layers = probability_rasters(ids, probabilities, key=key or cell, species=species, value=value)
    if include_cells:
        layers = {CELL_BAND: ids, **layers}

    if study_area is not None:
        layers = {name: mask_with_vector(layer, study_area) for name, layer in layers.items()}

    if target_crs is not None or resolution is not None:
        # identifiers fix the output grid; every layer is resampled onto it
        template = reproject(ids, crs=target_crs, resolution=resolution, method='nearest')
        layers = {name: reproject(layer, template=template,
                                  method='nearest' if name == CELL_BAND else 'bilinear')
                  for name, layer in layers.items()}

    if do_trim:
        layers = trim_stack(layers)

    if out_path is not None:
        write_raster(layers, out_path, dtype=dtype)
    return layers


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog='rastergrid',
                                description='Build species probability rasters from cell tables.')
    p.add_argument('--cells', required=True, help='CSV of cell centres and identifiers')
    p.add_argument('--probabilities', required=True, help='CSV of (cell, species, probability) rows')
    p.add_argument('--out', required=True, help='output GeoTIFF path')
    p.add_argument('--sep', default=',', help='field separator of both tables')
    p.add_argument('--x', default='x')
    p.add_argument('--y', default='y')
    p.add_argument('--cell', default='cell_id', help='identifier column of the cell table')
    p.add_argument('--key', default=None, help='identifier column of the probability table (default: --cell)')
    p.add_argument('--species', default='species', help="species column; 'none' for a single layer")
    p.add_argument('--value', default='probability')
    p.add_argument('--crs', default=None, help='CRS of the cell coordinates, e.g. EPSG:32617')
    p.add_argument('--target-crs', default=None)
    p.add_argument('--resolution', type=float, default=None)
    p.add_argument('--study-area', default=None, help='vector file used to mask the layers')
    p.add_argument('--include-cells', action='store_true', help='write the identifier raster as band 1')
    p.add_argument('--no-trim', action='store_true')
    p.add_argument('--dtype', default='float64')
    p.add_argument('--log-level', default='INFO')
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config.configure_logging(args.log_level)
    cells = read_table(args.cells, sep=args.sep)
    probabilities = read_table(args.probabilities, sep=args.sep)
    study_area = read_vector(args.study_area) if args.study_area else None
    species = None if args.species.lower() == 'none' else args.species
    layers = run_workshop(cells, probabilities, out_path=args.out, crs=args.crs,
                          target_crs=args.target_crs, resolution=args.resolution,
                          study_area=study_area, do_trim=not args.no_trim,
                          include_cells=args.include_cells, x=args.x, y=args.y, cell=args.cell,
                          key=args.key, species=species, value=args.value, dtype=args.dtype)
    logger.info('done: %d layer(s) -> %s', len(layers), args.out)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
