"""Function-map analysis and in-page learning plugin generation."""

__version__ = "0.1.0"
