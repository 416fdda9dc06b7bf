"""Cadence: schedule-compliance aggregation for habit goals."""

from loguru import logger

__version__ = "0.1.0"

# Library code stays silent until an application calls configure_loguru().
logger.disable("cadence")
