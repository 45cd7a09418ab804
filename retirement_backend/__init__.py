"""Retirement projection backend: projection engine plus the dashboard API."""

__version__ = "0.1.0"
