"""Customer registration and sales recording for small businesses."""

__version__ = "0.1.0"
