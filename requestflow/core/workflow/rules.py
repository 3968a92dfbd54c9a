"""Skip predicates for approval steps.

A predicate is evaluated against a request's attributes. When a step's
``skip_when`` predicate is true the step is bypassed during routing.

Predicates are plain data so routing tables can be loaded from YAML::

    skip_when:
      not:
        any:
          - {field: travel_type, operator: in, value: [Overseas, Home Leave Passage]}
          - {field: estimated_cost, operator: gt, value: 1000}
"""

from enum import Enum
from typing import Any, Dict, Optional, Union
from dataclasses import dataclass, field


class RuleOperator(str, Enum):
    """Operators for attribute comparisons."""

    EQUALS = "eq"
    NOT_EQUALS = "ne"
    GREATER_THAN = "gt"
    GREATER_THAN_OR_EQUAL = "gte"
    LESS_THAN = "lt"
    LESS_THAN_OR_EQUAL = "lte"
    IN = "in"
    NOT_IN = "not_in"
    EXISTS = "exists"
    NOT_EXISTS = "not_exists"


NUMERIC_OPERATORS = frozenset([
    RuleOperator.GREATER_THAN,
    RuleOperator.GREATER_THAN_OR_EQUAL,
    RuleOperator.LESS_THAN,
    RuleOperator.LESS_THAN_OR_EQUAL,
])


@dataclass(frozen=True)
class Condition:
    """Compare one request attribute against a value."""

    field: str
    operator: RuleOperator
    value: Any = None

    def evaluate(self, attributes: Dict[str, Any]) -> bool:
        return compare_values(attributes.get(self.field), self.operator, self.value)

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "operator": self.operator.value, "value": _freeze_out(self.value)}


@dataclass(frozen=True)
class AnyOf:
    """True when at least one child predicate is true."""

    predicates: tuple = field(default_factory=tuple)

    def evaluate(self, attributes: Dict[str, Any]) -> bool:
        return any(p.evaluate(attributes) for p in self.predicates)

    def to_dict(self) -> Dict[str, Any]:
        return {"any": [p.to_dict() for p in self.predicates]}


@dataclass(frozen=True)
class AllOf:
    """True when every child predicate is true."""

    predicates: tuple = field(default_factory=tuple)

    def evaluate(self, attributes: Dict[str, Any]) -> bool:
        return all(p.evaluate(attributes) for p in self.predicates)

    def to_dict(self) -> Dict[str, Any]:
        return {"all": [p.to_dict() for p in self.predicates]}


@dataclass(frozen=True)
class Not:
    """Negates a child predicate."""

    predicate: Any

    def evaluate(self, attributes: Dict[str, Any]) -> bool:
        return not self.predicate.evaluate(attributes)

    def to_dict(self) -> Dict[str, Any]:
        return {"not": self.predicate.to_dict()}


Predicate = Union[Condition, AnyOf, AllOf, Not]


def _to_number(value: Any) -> Optional[float]:
    """Coerce ints, floats and numeric strings. Anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _freeze(value: Any) -> Any:
    # Lists become tuples so frozen dataclasses stay hashable
    if isinstance(value, list):
        return tuple(value)
    return value


def _freeze_out(value: Any) -> Any:
    if isinstance(value, tuple):
        return list(value)
    return value


def compare_values(actual: Any, operator: RuleOperator, expected: Any) -> bool:
    """Compare an attribute value using the specified operator.

    Ordering operators compare numerically; a missing or non-numeric
    attribute never satisfies them.
    """
    if operator == RuleOperator.EXISTS:
        return actual is not None
    if operator == RuleOperator.NOT_EXISTS:
        return actual is None

    if operator in NUMERIC_OPERATORS:
        left = _to_number(actual)
        right = _to_number(expected)
        if left is None or right is None:
            return False
        if operator == RuleOperator.GREATER_THAN:
            return left > right
        if operator == RuleOperator.GREATER_THAN_OR_EQUAL:
            return left >= right
        if operator == RuleOperator.LESS_THAN:
            return left < right
        return left <= right

    if operator == RuleOperator.EQUALS:
        return actual == expected
    if operator == RuleOperator.NOT_EQUALS:
        return actual != expected
    if operator == RuleOperator.IN:
        return actual in (expected or ())
    if operator == RuleOperator.NOT_IN:
        return actual not in (expected or ())

    raise ValueError(f"Unknown operator: {operator}")


def predicate_from_dict(data: Dict[str, Any]) -> Predicate:
    """Build a predicate tree from its dictionary form.

    Raises:
        ValueError: If the dictionary has no recognised shape
    """
    if not isinstance(data, dict):
        raise ValueError(f"Predicate must be a mapping, got {type(data).__name__}")

    if "any" in data:
        return AnyOf(tuple(predicate_from_dict(p) for p in data["any"]))
    if "all" in data:
        return AllOf(tuple(predicate_from_dict(p) for p in data["all"]))
    if "not" in data:
        return Not(predicate_from_dict(data["not"]))
    if "field" in data:
        return Condition(
            field=data["field"],
            operator=RuleOperator(data.get("operator", "eq")),
            value=_freeze(data.get("value")),
        )

    raise ValueError(f"Unrecognised predicate: {data}")


def condition(field_name: str, operator: str, value: Any = None) -> Condition:
    """Shorthand used by the built-in routing table."""
    return Condition(field_name, RuleOperator(operator), _freeze(value))


def skip_unless(*predicates: Predicate) -> Not:
    """Skip a step unless any of the predicates holds."""
    return Not(AnyOf(tuple(predicates)))

