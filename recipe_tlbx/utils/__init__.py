"""Utilities: plotting style and logging setup."""

from .logging_config import setup_logging
from .plotting_config import DEFAULT_PLOT_CFG, PlottingConfig


__all__ = ["DEFAULT_PLOT_CFG", "PlottingConfig", "setup_logging"]
