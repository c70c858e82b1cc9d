"""
app/validators package marker.
"""

from app.validators.price_row_validator import PriceRowValidator, parse_calendar_date

__all__ = [
    "PriceRowValidator",
    "parse_calendar_date",
]
