"""Save web articles as e-reader documents and deliver them by email."""

__version__ = "0.1.0"
