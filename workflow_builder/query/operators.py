""" Compile a single condition into a predicate clause of the query grammar. """
from typing import Any, Dict, List, Optional

# Sentinel understood by the data store as "today"
CURRENT_DATE = "CURRENT_DATE()"

_COMPARISONS = {
    "not_equals": "!=",
    "greater_than": ">",
    "less_than": "<",
    "greater_equal": ">=",
    "less_equal": "<=",
    "date_before": "<",
}

_PATTERNS = {
    "contains": "like",
    "not_contains": "not like",
}


def _date_bounds(condition) -> Optional[List[str]]:
    date_from = getattr(condition, "date_from", None)
    date_to = getattr(condition, "date_to", None)
    if date_from and date_to:
        return [date_from, date_to]
    return None


def compile_operator(field: str, operator: str, value: Any, condition=None) -> Dict[str, Any]:
    """
    Build the clause for one field/operator/value triple.

    Unknown operators fall back to a plain equality clause; nothing here raises.
    """
    if operator == "equals":
        if field == "gender" and isinstance(value, str):
            return {field: value.upper()}
        return {field: value}

    if operator == "greater_than" and field == "gender" and isinstance(value, str):
        # gender is a select field, a comparison makes no sense for it
        return {field: value.upper()}

    if operator in _COMPARISONS:
        return {field: {_COMPARISONS[operator]: value}}

    if operator in _PATTERNS:
        return {field: {_PATTERNS[operator]: f"%{value}%"}}

    if operator == "date_after":
        return {field: {">": CURRENT_DATE if value == "today" else value}}

    if operator == "date_between":
        bounds = _date_bounds(condition)
        return {field: {"between": bounds}} if bounds else {field: value}

    if operator == "date_not_between":
        bounds = _date_bounds(condition)
        return {field: {"not between": bounds}} if bounds else {field: {"!=": value}}

    if operator == "is_empty":
        return {field: None}
    if operator == "is_not_empty":
        return {field: {"!=": None}}

    return {field: value}


def is_anniversary(condition) -> bool:
    return (
        getattr(condition, "date_type", None) == "anniversary"
        and condition.operator == "equals"
        and condition.value == "anniversary"
    )


def compile_clauses(field: str, condition) -> List[Dict[str, Any]]:
    """
    Clauses contributed by one condition.

    An anniversary condition matches on day and month separately, so it
    yields two clauses for the same field; everything else yields one.
    """
    if is_anniversary(condition):
        return [
            {field: {"current_day": True}},
            {field: {"current_month": True}},
        ]
    return [compile_operator(field, condition.operator, condition.value, condition)]
