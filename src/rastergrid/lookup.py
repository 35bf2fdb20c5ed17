"""Typed cell-value lookup tables and raster substitution.

A ``LookupTable`` maps a declared key type (usually an integer cell
identifier) to a declared value type (usually a float probability). Keys and
values are coerced once, at construction, so substitution never has to guess.
"""

from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterator, Optional
import logging

import numpy as np
import pandas as pd

from rastergrid.exceptions import LookupTableError
from rastergrid.raster import Raster

logger = logging.getLogger(__name__)


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


class LookupTable(Mapping):
    """Immutable mapping from ``key_type`` keys to ``value_type`` values.

    Missing values (``None`` or NaN) are kept and mean "no-data" when the
    table is used for substitution.
    """

    def __init__(self, mapping, key_type: Callable = int, value_type: Callable = float):
        self.key_type = key_type
        self.value_type = value_type
        items = mapping.items() if isinstance(mapping, Mapping) else mapping
        data: Dict[Any, Optional[Any]] = {}
        for k, v in items:
            if _is_missing(k):
                raise LookupTableError('lookup keys may not be missing')
            try:
                key = key_type(k)
            except (TypeError, ValueError) as e:
                raise LookupTableError(f'key {k!r} is not a valid {getattr(key_type, "__name__", key_type)}') from e
            if isinstance(k, float) and key_type is int and not float(k).is_integer():
                raise LookupTableError(f'key {k!r} is not integral')
            if key in data:
                raise LookupTableError(f'duplicate key {key!r}')
            if _is_missing(v):
                data[key] = None
                continue
            try:
                data[key] = value_type(v)
            except (TypeError, ValueError) as e:
                raise LookupTableError(f'value {v!r} for key {key!r} is not a valid '
                                       f'{getattr(value_type, "__name__", value_type)}') from e
        self._data = data

    @classmethod
    def identity(cls, keys, key_type: Callable = int) -> 'LookupTable':
        """Table mapping every key to itself."""
        return cls({k: k for k in keys}, key_type=key_type, value_type=float)

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, key: str, value: str,
                   key_type: Callable = int, value_type: Callable = float) -> 'LookupTable':
        """Build from two columns of a DataFrame."""
        for col in (key, value):
            if col not in frame.columns:
                raise LookupTableError(f'column {col!r} not in table (have {list(frame.columns)})')
        return cls(zip(frame[key].tolist(), frame[value].tolist()), key_type=key_type, value_type=value_type)

    @classmethod
    def from_csv(cls, path, key: str, value: str, key_type: Callable = int,
                 value_type: Callable = float, **read_csv_kwargs) -> 'LookupTable':
        """Build from two columns of a character-separated file."""
        frame = pd.read_csv(path, **read_csv_kwargs)
        logger.info('lookup table %s: %d rows', path, len(frame))
        return cls.from_frame(frame, key, value, key_type=key_type, value_type=value_type)

    def __getitem__(self, key):
        return self._data[key]

    def __iter__(self) -> Iterator:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self):
        return f'LookupTable(n={len(self)}, key_type={self.key_type.__name__}, value_type={self.value_type.__name__})'

    def as_float_dict(self) -> Dict[Any, float]:
        """Values as floats with NaN standing for no-data."""
        return {k: (np.nan if v is None else float(v)) for k, v in self._data.items()}


def substitute(raster: Raster, table: LookupTable) -> Raster:
    """Replace every cell value with its looked-up value.

    Cells whose current value has no key in ``table`` (and cells that were
    already no-data) become no-data. Grid geometry is unchanged.
    """
    cells = pd.Series(raster.cells)
    replaced = cells.map(table.as_float_dict()).to_numpy(dtype=np.float64)
    unmatched = int(np.count_nonzero(cells.notna().to_numpy() & np.isnan(replaced)))
    if unmatched:
        logger.debug('substitute: %d cells had no usable lookup value', unmatched)
    return raster.with_values(replaced)
