"""
Database Layer.
"""

from .catalog import CatalogReader, MssqlCatalogReader, db_exists

__all__ = ["CatalogReader", "MssqlCatalogReader", "db_exists"]
