"""Quantitative finance toolbox: time periods, discounting, in-memory quotes, portfolio positions and strategies."""

__version__ = "0.13.0"