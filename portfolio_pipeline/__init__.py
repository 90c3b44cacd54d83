"""Build pipeline for a multilingual painting portfolio."""

__version__ = "0.1.0"
