"""
Logical equivalence of host selectors.

Structural equality (``==``) compares label, operator and operand. Logical
equivalence is weaker: ``foo = a`` and ``foo in (a)`` express the same
constraint and are treated as equivalent.

``foo != a`` and ``foo notin (a)`` are NOT treated as equivalent even though
they match the same values. Callers relying on that pairing must compare the
selectors themselves.
"""

from typing import Collection, Tuple

from .models import HostSelector, SelectorOperator


def selector_sort_key(selector: HostSelector) -> Tuple[str, int]:
    return selector.label, selector.operator.order


def _is_in_and_equals_with_same_value(a: HostSelector, b: HostSelector) -> bool:
    return (
        a.operator == SelectorOperator.IN
        and b.operator == SelectorOperator.EQUALS
        and len(a.operand) == 1
        and a.operand[0] == b.operand
    )


def is_logically_equal(a: HostSelector, b: HostSelector) -> bool:
    """Check whether two selectors express the same constraint."""
    if a == b:
        return True

    if a.label != b.label:
        return False

    return _is_in_and_equals_with_same_value(a, b) or _is_in_and_equals_with_same_value(b, a)


def are_logically_equal(a: Collection[HostSelector], b: Collection[HostSelector]) -> bool:
    """Check whether two collections of selectors are logically equal.

    Both collections are sorted by label and operator and compared pairwise.
    This can give false negatives, so False only means the collections could
    not be shown to be equivalent.
    """
    if len(a) != len(b):
        return False

    first = sorted(a, key=selector_sort_key)
    second = sorted(b, key=selector_sort_key)

    return all(is_logically_equal(x, y) for x, y in zip(first, second))
