"""
Model package exports.

Import all SQLAlchemy models here so metadata registration works without
extra imports.
"""

from db.models.stock_price import StockPrice

__all__ = [
    "StockPrice",
]
