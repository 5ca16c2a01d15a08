"""Release publishing for mod projects."""

__version__ = "0.4.0"
