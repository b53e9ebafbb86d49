"""Attack-surface graph visualisation output and data-source system management."""

__version__ = "0.1.0"