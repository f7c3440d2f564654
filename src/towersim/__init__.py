"""Cooling-tower sensor simulation and multi-domain signal analysis."""

__version__ = "0.1.0"
