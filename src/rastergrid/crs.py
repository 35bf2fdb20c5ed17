"""
crs.py

Coordinate reference system handling. CRS values are accepted as EPSG codes
(``4326``, ``'EPSG:4326'``), PROJ strings, WKT or existing CRS objects and
are parsed by rasterio. Two CRS values are equal only when their normalised
strings match exactly; no semantic equivalence check is attempted.
"""
import logging
from typing import Any, Optional

from rasterio.crs import CRS

from rastergrid.exceptions import MissingCRS

logger = logging.getLogger(__name__)


def parse_crs(value: Any) -> Optional[CRS]:
    """Return a rasterio ``CRS`` for ``value``, or ``None`` when unset."""
    if value is None:
        return None
    if isinstance(value, CRS):
        # an empty CRS (no WKT) counts as unset
        return value if value else None
    if isinstance(value, str) and not value.strip():
        return None
    # geopandas / pyproj CRS objects expose to_wkt()
    if hasattr(value, 'to_wkt') and not isinstance(value, str):
        return CRS.from_wkt(value.to_wkt())
    return CRS.from_user_input(value)


def crs_string(crs: Any) -> Optional[str]:
    """Normalised string form used for comparison and display."""
    parsed = parse_crs(crs)
    if parsed is None:
        return None
    return parsed.to_string()


def crs_equal(a: Any, b: Any) -> bool:
    """True when both CRS normalise to the same string (or both are unset)."""
    return crs_string(a) == crs_string(b)


def require_crs(crs: Any, what: str = 'raster') -> CRS:
    """Return the parsed CRS or raise ``MissingCRS``."""
    parsed = parse_crs(crs)
    if parsed is None:
        raise MissingCRS(f'{what} has no coordinate reference system; set one first')
    return parsed
