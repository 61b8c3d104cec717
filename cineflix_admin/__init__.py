"""Cineflix admin console: catalog and episode management for the delivery bot."""

__version__ = "0.1.0"
