"""
utils.py

Logging helpers shared by the readers and the command line entry point.

- `safe_log_exception(msg, exc, **ctx)` : logs an exception with context
- `configure_logging(verbose=False)` : console logging for the CLI
"""

from typing import Any
import sys
import logging

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'


def safe_log_exception(msg: str, exc: Exception, **ctx: Any) -> None:
	"""Log an exception robustly.

	Attempts to call `logger.exception`. If logging fails for any reason,
	falls back to writing a compact message to `sys.stderr`. Callers re-raise
	afterwards; this never swallows the original error.
	"""
	try:
		if ctx:
			ctx_s = ' | '.join(f"{k}={v!r}" for k, v in ctx.items())
			logger.exception('%s | %s | %s', msg, exc, ctx_s)
		else:
			logger.exception('%s | %s', msg, exc)
	except Exception:
		sys.stderr.write(f'LOGGING FAILURE: {msg} {exc}\n')


def configure_logging(verbose: bool = False) -> None:
	"""Console logging for command line use."""
	logging.basicConfig(
		level=logging.DEBUG if verbose else logging.INFO,
		format=LOG_FORMAT,
		stream=sys.stderr,
	)
	# rasterio logs every GDAL environment change at debug level
	logging.getLogger('rasterio').setLevel(logging.WARNING)
