"""Stack trace enhancement: attaches repository source context to error frames."""

__version__ = "0.1.0"
