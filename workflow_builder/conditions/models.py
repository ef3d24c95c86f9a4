""" Condition models: one user-authored predicate per entry. """

from typing import Annotated, Any, Dict, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator

OPERATORS = (
    "equals",
    "not_equals",
    "greater_than",
    "less_than",
    "greater_equal",
    "less_equal",
    "contains",
    "not_contains",
    "date_before",
    "date_after",
    "date_between",
    "date_not_between",
    "is_empty",
    "is_not_empty",
)

# Operators that take no value
EMPTY_OPERATORS = ("is_empty", "is_not_empty")

Value = Union[int, float, str]


class BaseCondition(BaseModel):
    """
    Fields shared by every condition variant.

    `operator` stays a plain string: the UI decides which operators a field
    type offers, and the compiler has to cope with whatever arrives.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    data_source: Optional[str] = None
    collection: Optional[str] = None
    field: str
    operator: str
    value: Optional[Value] = None
    logical_operator: Optional[Literal["AND", "OR"]] = None  # OR is stored but compiled as AND


class TextCondition(BaseCondition):
    field_type: Literal["text"] = "text"


class NumberCondition(BaseCondition):
    field_type: Literal["number"] = "number"


class SelectCondition(BaseCondition):
    field_type: Literal["select"] = "select"
    select_options: List[str] = Field(default_factory=list)


class DateCondition(BaseCondition):
    field_type: Literal["date"] = "date"
    date_type: Optional[Literal["today", "specific", "relative", "range", "anniversary"]] = None
    period_number: Optional[int] = None
    period_unit: Optional[Literal["days", "weeks", "months", "years"]] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None

    @model_validator(mode="after")
    def _check_date_shape(self) -> "DateCondition":
        if self.date_type == "relative" and (self.period_number is None or self.period_unit is None):
            raise ValueError("relative dates require period_number and period_unit")
        if self.date_type == "range" and not (self.date_from and self.date_to):
            raise ValueError("range dates require date_from and date_to")
        return self


Condition = Annotated[
    Union[TextCondition, NumberCondition, SelectCondition, DateCondition],
    Field(discriminator="field_type"),
]

_CONDITION = TypeAdapter(Condition)
_CONDITION_LIST = TypeAdapter(List[Condition])


def parse_condition(raw: Dict[str, Any]) -> BaseCondition:
    """Build the condition variant matching raw['field_type']."""
    try:
        return _CONDITION.validate_python(raw)
    except ValidationError as e:
        raise ValueError(f"Condition validation error: {e}")


def parse_conditions(raw: Sequence[Any]) -> List[BaseCondition]:
    try:
        return _CONDITION_LIST.validate_python(list(raw))
    except ValidationError as e:
        raise ValueError(f"Condition validation error: {e}")
