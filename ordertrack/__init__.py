"""ordertrack: service order lifecycle and report analytics."""

__version__ = "0.1.0"
