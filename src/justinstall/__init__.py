"""justinstall: resolve an install request into one artifact and install it."""

__version__ = "0.4.0"
