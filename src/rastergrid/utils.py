"""
utils.py

Small helpers shared across rastergrid modules. This file contains a
logging helper for failures and a couple of numeric checks used when inferring
or validating regular grids. Keep implementations small and testable.

The public helpers added here:
- `safe_log_exception(msg, exc, **ctx)` : logs a failure with context
- `min_spacing(values)` : smallest gap between distinct sorted values
- `on_lattice(values, origin, step, tol)` : True where values sit on a lattice
"""

from typing import Any, Optional
import logging
import numpy as np

logger = logging.getLogger(__name__)


def safe_log_exception(msg: str, exc: Exception, **ctx: Any) -> None:
	"""Log an exception with its traceback and any keyword context.

	The caller is expected to re-raise.
	"""
	if ctx:
		ctx_s = ', '.join(f"{k}={v!r}" for k, v in sorted(ctx.items()))
		logger.exception('%s: %s (%s)', msg, exc, ctx_s)
	else:
		logger.exception('%s: %s', msg, exc)


def min_spacing(values) -> Optional[float]:
	"""Return the smallest positive gap between distinct values.

	Returns ``None`` when fewer than two distinct values are present.
	"""
	uniq = np.unique(np.asarray(values, dtype=np.float64))
	if uniq.size < 2:
		return None
	return float(np.min(np.diff(uniq)))


def on_lattice(values, origin: float, step: float, tol: float) -> np.ndarray:
	"""Boolean array, True where ``(values - origin) / step`` is integral."""
	k = (np.asarray(values, dtype=np.float64) - origin) / step
	return np.abs(k - np.round(k)) <= tol
