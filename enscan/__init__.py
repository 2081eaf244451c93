"""Collect public enterprise information from business-registry sites."""

__version__ = "1.0.0"