"""Command-line interface module for IIO XML Context.

This module provides the iio-xml-info tool for printing and checking XML
context descriptions.
"""

from .main import main

__all__ = ["main"]
