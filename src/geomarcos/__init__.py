"""geomarcos – survey marker extraction and coordinate maintenance."""

from ._version import __version__

__all__ = [
    "__version__",
    "config",
    "correction",
    "extraction",
    "geodesy",
    "store",
    "utils",
    "validation",
]
