"""WebMarcas trademark registration checkout and contract pipeline."""

__version__ = "1.0.0"
