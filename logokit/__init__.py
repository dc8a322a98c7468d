"""logokit - add svgl logos to your project."""

__app_name__ = "logokit"
__version__ = "0.1.0"
