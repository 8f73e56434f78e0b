import math

import numpy as np
import pandas as pd


def is_empty_cell(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def to_number(value) -> float | None:
    """Parse a cell as a finite float.

    Booleans are never numbers, even though Python treats them as ints.
    Returns ``None`` for anything that does not parse.
    """
    if isinstance(value, (bool, np.bool_)):
        return None
    if is_empty_cell(value):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        number = float(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if stripped == "" or "_" in stripped:
            return None
        try:
            number = float(stripped)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def cell_text(value) -> str:
    if is_empty_cell(value):
        return ""
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if isinstance(value, (float, np.floating)) and math.isfinite(value):
        if float(value).is_integer():
            return str(int(value))
        return str(float(value))
    return str(value)
