"""
Decoding of JSON-stat datasets into labelled timeseries
and an algebra of transforms for comparing them
"""

import importlib.metadata

from loguru import logger

__version__ = importlib.metadata.version("jsonstat-series")

# Opt in with `logger.enable("jsonstat_series")`
logger.disable(__name__)
