"""Standard catalog — seed data and loader."""

from .loader import catalog_summary, load_catalog

__all__ = ["catalog_summary", "load_catalog"]
