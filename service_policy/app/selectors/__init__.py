"""
Host selector package.

Host selectors constrain which hosts a job may be deployed to, based on host
labels, using expressions like ``site = ash`` or ``role notin (db, cache)``.

Modules of interest:
- models: Operators, the HostSelector value object and API models.
- parser: Textual expression parsing.
- equivalence: Logical equivalence of selectors and selector collections.
"""

from .models import HostSelector, SelectorOperator, InvalidSelector, UnknownOperator
from .parser import parse, parse_many
from .equivalence import is_logically_equal, are_logically_equal

__all__ = [
    "HostSelector",
    "SelectorOperator",
    "InvalidSelector",
    "UnknownOperator",
    "parse",
    "parse_many",
    "is_logically_equal",
    "are_logically_equal",
]
