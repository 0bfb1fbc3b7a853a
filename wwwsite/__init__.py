"""A localized project website server with team pages, redirects and cached release data."""

__version__ = "0.1.0"
__all__ = ["__version__"]