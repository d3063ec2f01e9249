"""Prometheus exporter for S.M.A.R.T. devices."""

from .version import __version__

__all__ = ["__version__"]
