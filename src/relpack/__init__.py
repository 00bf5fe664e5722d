"""relpack — release assembly with build-time plugins."""

__version__ = "0.3.0"
