"""
Host selector data models for the Policy Service.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field

from shared.errors import ValidationError


class InvalidSelector(ValidationError):
    """A host selector could not be built from the given input."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details, code="INVALID_SELECTOR")


class UnknownOperator(ValidationError):
    """An operator symbol outside the supported set."""

    def __init__(self, symbol: str):
        super().__init__(
            f"Unknown operator '{symbol}'",
            details={"operator": symbol},
            code="UNKNOWN_OPERATOR"
        )


class SelectorOperator(Enum):
    """Host selector operators.

    Declaration order is the ordering used when sorting selectors.
    """
    EQUALS = "="
    NOT_EQUALS = "!="
    IN = "in"
    NOT_IN = "notin"

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def order(self) -> int:
        return _OPERATOR_ORDER[self]

    @property
    def takes_list(self) -> bool:
        return self in (SelectorOperator.IN, SelectorOperator.NOT_IN)

    @classmethod
    def from_symbol(cls, symbol: str) -> "SelectorOperator":
        for op in cls:
            if op.value == symbol:
                return op
        raise UnknownOperator(symbol)


_OPERATOR_ORDER = {op: index for index, op in enumerate(SelectorOperator)}

Operand = Union[str, Tuple[str, ...]]


def dedupe(values: Iterable[str]) -> Tuple[str, ...]:
    """Drop repeated values, keeping the first occurrence of each."""
    return tuple(dict.fromkeys(values))


@dataclass(frozen=True)
class HostSelector:
    """A ``label <operator> operand`` constraint on a host label.

    EQUALS and NOT_EQUALS take a single string. IN and NOT_IN take a tuple of
    distinct strings in first-seen order; any other iterable of strings is
    normalized to that form.
    """
    label: str
    operator: SelectorOperator
    operand: Operand

    def __post_init__(self):
        if not isinstance(self.operator, SelectorOperator):
            object.__setattr__(self, "operator", SelectorOperator.from_symbol(self.operator))

        if self.operator.takes_list:
            if isinstance(self.operand, str) or not isinstance(self.operand, Iterable):
                raise InvalidSelector(
                    f"Operator '{self.operator.symbol}' requires a list operand",
                    details={"label": self.label, "operand": repr(self.operand)}
                )
            members = list(self.operand)
            if not all(isinstance(m, str) for m in members):
                raise InvalidSelector(
                    "List operand members must be strings",
                    details={"label": self.label, "operand": repr(self.operand)}
                )
            object.__setattr__(self, "operand", dedupe(members))
        elif not isinstance(self.operand, str):
            raise InvalidSelector(
                f"Operator '{self.operator.symbol}' requires a string operand",
                details={"label": self.label, "operand": repr(self.operand)}
            )

    def matches(self, value: Optional[str]) -> bool:
        """Check whether a label value satisfies this selector.

        ``None`` stands for a host that lacks the label; it never equals an
        operand and is never a member of one.
        """
        if self.operator == SelectorOperator.EQUALS:
            return value == self.operand
        elif self.operator == SelectorOperator.NOT_EQUALS:
            return value != self.operand
        elif self.operator == SelectorOperator.IN:
            return value in self.operand
        elif self.operator == SelectorOperator.NOT_IN:
            return value not in self.operand
        raise UnknownOperator(str(self.operator))

    def operand_string(self) -> str:
        if self.operator.takes_list:
            return "(" + ", ".join(self.operand) + ")"
        return self.operand

    def to_pretty_string(self) -> str:
        """Human-readable form, e.g. ``"site = foo"`` or ``"role in (a, b)"``."""
        return f"{self.label} {self.operator.symbol} {self.operand_string()}"

    def to_dict(self) -> Dict[str, Any]:
        operand = list(self.operand) if self.operator.takes_list else self.operand
        return {"label": self.label, "operator": self.operator.symbol, "operand": operand}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HostSelector":
        try:
            return cls(
                label=data["label"],
                operator=SelectorOperator.from_symbol(data["operator"]),
                operand=data["operand"],
            )
        except KeyError as e:
            raise InvalidSelector(f"Missing selector field {e}", details={"data": data}) from e


class SelectorModel(BaseModel):
    """Serialized host selector."""
    label: str = Field(..., description="Host label name")
    operator: str = Field(..., description="Operator symbol: =, !=, in or notin")
    operand: Union[str, List[str]] = Field(..., description="Value or list of values")


class SelectorParseRequest(BaseModel):
    """Request model for parsing a selector expression."""
    text: str = Field(..., description="Selector expression, e.g. 'site in (a, b)'")


class SelectorParseResponse(BaseModel):
    """Response model for a parsed selector."""
    selector: SelectorModel
    pretty: str


class SelectorMatchRequest(BaseModel):
    """Request model for matching a label value."""
    selector: SelectorModel
    value: Optional[str] = Field(None, description="Label value; null when the host lacks the label")


class SelectorMatchResponse(BaseModel):
    """Response model for a match check."""
    matches: bool


class SelectorEquivalenceRequest(BaseModel):
    """Request model for comparing two sets of selector expressions."""
    first: List[str] = Field(default_factory=list)
    second: List[str] = Field(default_factory=list)


class SelectorEquivalenceResponse(BaseModel):
    """Response model for a logical equivalence check."""
    logically_equal: bool
