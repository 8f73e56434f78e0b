import logging
import os
from datetime import date, datetime

import numpy as np
import pandas as pd

import serial_date
from dataset import Dataset

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".csv", ".xlsx", ".xls", ".parquet")


class UnsupportedFileType(ValueError):
    pass


class MissingEngineError(RuntimeError):
    pass


def normalize_cell(value):
    """Turn a pandas cell into a plain Python scalar or ``None``."""
    if value is None:
        return None
    if isinstance(value, (pd.Timestamp, datetime, date, np.datetime64)):
        if pd.isna(value):
            return None
        return serial_date.encode_timestamp(value)
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and np.isnan(value):
        return None
    if value is pd.NA or value is pd.NaT:
        return None
    return value


class FileTypeHandler:
    def __init__(self, path: str):
        self.path = path
        _, ext = os.path.splitext(path)
        self.ext = ext.lower()

        if self.ext not in SUPPORTED_EXTENSIONS:
            raise UnsupportedFileType(
                "Unsupported file type (use .csv, .xlsx, .xls, or .parquet)"
            )

    def load(self) -> Dataset:
        if not os.path.exists(self.path) or os.path.getsize(self.path) == 0:
            logger.debug("%s is missing or empty", self.path)
            return Dataset((), ())

        if self.ext == ".csv":
            try:
                df = pd.read_csv(self.path, header=None, dtype=object, keep_default_na=False)
            except pd.errors.EmptyDataError:
                return Dataset((), ())
            df = df.apply(lambda col: col.map(_parse_csv_cell))
        elif self.ext == ".parquet":
            self._ensure_parquet_engine()
            df = pd.read_parquet(self.path)
            df = pd.concat([pd.DataFrame([list(df.columns)], columns=df.columns), df], ignore_index=True)
        elif self.ext == ".xls":
            self._ensure_xls_engine()
            df = pd.read_excel(self.path, sheet_name=0, header=None, engine="xlrd")
        else:
            self._ensure_excel_engine()
            df = pd.read_excel(self.path, sheet_name=0, header=None, engine="openpyxl")

        rows = [[normalize_cell(v) for v in row] for row in df.itertuples(index=False, name=None)]
        logger.debug("Loaded %d rows from %s", max(0, len(rows) - 1), self.path)
        return Dataset.from_rows(rows)

    def _ensure_parquet_engine(self):
        try:
            import pyarrow  # noqa: F401

            return
        except ImportError:
            pass
        raise MissingEngineError(
            "Parquet support requires pyarrow. Install via: pip install pyarrow"
        )

    def _ensure_excel_engine(self):
        try:
            import openpyxl  # noqa: F401

            return
        except ImportError:
            pass
        raise MissingEngineError(
            "XLSX support requires openpyxl. Install via: pip install openpyxl"
        )

    def _ensure_xls_engine(self):
        try:
            import xlrd  # noqa: F401

            return
        except ImportError:
            pass
        raise MissingEngineError(
            "XLS support requires xlrd. Install via: pip install xlrd"
        )


def _parse_csv_cell(text):
    # csv cells arrive as text; numbers are restored so they classify and sort as numbers
    if text is None or text == "":
        return None
    stripped = text.strip()
    if "_" in stripped:
        return text
    try:
        number = int(stripped)
    except ValueError:
        try:
            number = float(stripped)
        except ValueError:
            return text
        if not np.isfinite(number):
            return text
    return number
