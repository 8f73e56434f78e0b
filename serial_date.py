"""Spreadsheet date-serial codec.

Spreadsheets store dates as a count of days since 1899-12-30, with the
fractional part holding the time of day. Everything here is computed on
naive timestamps interpreted as UTC, so a serial always lands on the same
calendar day whatever the viewer's local timezone is.
"""

import logging
from datetime import date, datetime

import pandas as pd

logger = logging.getLogger(__name__)

EPOCH = pd.Timestamp(1899, 12, 30)
MS_PER_DAY = 24 * 60 * 60 * 1000
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def decode(serial: float) -> str | None:
    """Render a serial as ``YYYY-MM-DD HH:MM:SS``, or ``None`` if it has no calendar date."""
    try:
        millis = round(float(serial) * MS_PER_DAY)
        moment = EPOCH + pd.Timedelta(milliseconds=millis)
    except (OverflowError, ValueError, TypeError):
        logger.debug("Cannot decode %r as a date serial", serial)
        return None
    return moment.strftime(DATE_FORMAT)


def encode_timestamp(moment) -> float:
    ts = pd.Timestamp(moment)
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return (ts - EPOCH) / pd.Timedelta(days=1)


def encode(text) -> float | None:
    """Convert a calendar date string to a serial, or ``None`` if unparseable."""
    if isinstance(text, (datetime, date, pd.Timestamp)):
        return encode_timestamp(text)
    if not isinstance(text, str) or not text.strip():
        return None
    try:
        ts = pd.Timestamp(text.strip())
    except (ValueError, TypeError, OverflowError):
        logger.debug("Cannot parse %r as a date", text)
        return None
    if ts is pd.NaT:
        return None
    return encode_timestamp(ts)
