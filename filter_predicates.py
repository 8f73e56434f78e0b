"""Column filter criteria and the predicate that applies them to a row.

Evaluation never raises. A cell that cannot be compared simply does not
match, and an operator nobody recognises lets every row through.
"""

from dataclasses import dataclass

import serial_date
from cell_coercion import cell_text, is_empty_cell, to_number
from column_classifier import ColumnType

CONTAINS = "contains"
NOT_CONTAINS = "not-contains"
EQUALS = "equals"
NOT_EQUALS = "not-equals"
STARTS_WITH = "starts-with"
ENDS_WITH = "ends-with"
GREATER_THAN = "greater-than"
LESS_THAN = "less-than"
AFTER = "after"
BEFORE = "before"
IN = "in"
EMPTY = "empty"
NOT_EMPTY = "not-empty"

NULLARY_OPERATORS = frozenset({EMPTY, NOT_EMPTY})

OPERATORS_BY_TYPE = {
    ColumnType.TEXT: (
        CONTAINS,
        NOT_CONTAINS,
        EQUALS,
        NOT_EQUALS,
        STARTS_WITH,
        ENDS_WITH,
        EMPTY,
        NOT_EMPTY,
    ),
    ColumnType.NUMBER: (EQUALS, NOT_EQUALS, GREATER_THAN, LESS_THAN, EMPTY, NOT_EMPTY),
    ColumnType.DATE_SERIAL: (EQUALS, NOT_EQUALS, AFTER, BEFORE, EMPTY, NOT_EMPTY),
    ColumnType.CATEGORY: (IN,),
}


def normalize_operator(name) -> str:
    if not isinstance(name, str):
        return ""
    return "-".join(name.strip().lower().replace("_", " ").split())


def default_operator(column_type: ColumnType) -> str:
    return OPERATORS_BY_TYPE[column_type][0]


@dataclass(frozen=True)
class FilterCriterion:
    operator: str
    operand: object = None

    def __post_init__(self):
        object.__setattr__(self, "operator", normalize_operator(self.operator))
        if isinstance(self.operand, list):
            object.__setattr__(self, "operand", tuple(self.operand))

    @property
    def is_nullary(self) -> bool:
        return self.operator in NULLARY_OPERATORS

    @property
    def is_active(self) -> bool:
        if self.is_nullary:
            return True
        operand = self.operand
        if operand is None:
            return False
        if isinstance(operand, (tuple, set, frozenset)):
            return len(operand) > 0
        return cell_text(operand) != ""


def _operand_list(operand) -> set[str]:
    if isinstance(operand, (tuple, list, set, frozenset)):
        return {cell_text(v).lower() for v in operand}
    return {cell_text(operand).lower()}


def _operand_number(operand, column_type: ColumnType) -> float | None:
    if column_type is ColumnType.DATE_SERIAL and isinstance(operand, str):
        encoded = serial_date.encode(operand)
        if encoded is not None:
            return encoded
    return to_number(operand)


def _compare_numbers(cell_num, operand_num, op) -> bool:
    if cell_num is None or operand_num is None:
        return False
    return op(cell_num, operand_num)


def matches(row, column_index: int, criterion: FilterCriterion, column_type=ColumnType.TEXT) -> bool:
    """Decide whether ``row`` satisfies ``criterion`` on one column."""
    value = row[column_index] if 0 <= column_index < len(row) else None
    empty = is_empty_cell(value)
    operator = criterion.operator

    if operator == EMPTY:
        return empty
    if operator == NOT_EMPTY:
        return not empty
    if not criterion.is_active:
        return True
    if empty:
        return False

    text = cell_text(value).lower()
    operand = criterion.operand

    if operator == IN:
        return text in _operand_list(operand)

    numeric = column_type in (ColumnType.NUMBER, ColumnType.DATE_SERIAL)
    if operator in (EQUALS, NOT_EQUALS) and numeric:
        cell_num = to_number(value)
        operand_num = _operand_number(operand, column_type)
        if operator == EQUALS:
            return _compare_numbers(cell_num, operand_num, lambda a, b: a == b)
        return _compare_numbers(cell_num, operand_num, lambda a, b: a != b)
    if operator in (GREATER_THAN, AFTER):
        return _compare_numbers(
            to_number(value), _operand_number(operand, column_type), lambda a, b: a > b
        )
    if operator in (LESS_THAN, BEFORE):
        return _compare_numbers(
            to_number(value), _operand_number(operand, column_type), lambda a, b: a < b
        )

    needle = cell_text(operand).lower()
    if operator == CONTAINS:
        return needle in text
    if operator == NOT_CONTAINS:
        return needle not in text
    if operator == EQUALS:
        return text == needle
    if operator == NOT_EQUALS:
        return text != needle
    if operator == STARTS_WITH:
        return text.startswith(needle)
    if operator == ENDS_WITH:
        return text.endswith(needle)

    # unrecognised operators never hide data
    return True
