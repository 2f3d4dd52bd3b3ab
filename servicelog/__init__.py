"""servicelog - category-driven maintenance logbook."""

__version__ = "0.1.0"
