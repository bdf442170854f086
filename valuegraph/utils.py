# valuegraph/utils.py
"""Shared utilities: logging setup, text collation and display formatting."""
import os
import math
import logging
import unicodedata
from datetime import date, datetime
from dotenv import load_dotenv

load_dotenv()

def get_logger(name=__name__):
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, level, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("valuegraph")


def collation_key(value):
    """Sort key approximating a locale-aware string comparison.

    Accents and case are ignored for the primary order; on ties lowercase
    sorts before uppercase.
    """
    text = "" if value is None else str(value)
    decomposed = unicodedata.normalize("NFKD", text)
    primary = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    return (primary, text.swapcase())


def format_currency(value):
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "-"
    amount = round(float(value))
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,}"


def format_date(value):
    if not value:
        return "-"
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    if isinstance(value, datetime):
        value = value.date()
    if not isinstance(value, date):
        return str(value)
    return f"{value.strftime('%b')} {value.day}, {value.year}"
