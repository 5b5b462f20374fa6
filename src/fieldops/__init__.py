"""Live location and visit aggregation backend for the field-sales operations console."""

__version__ = "0.1.0"
