"""
Parsing of textual host selector expressions.
"""

import re
from typing import Iterable, List, Optional

from shared.logging import get_logger
from .models import HostSelector, InvalidSelector, SelectorOperator, dedupe

LABEL_PATTERN = r"[A-Za-z0-9._-]+"
OPERAND_PATTERN = r"[A-Za-z0-9._-]+|\([A-Za-z0-9.\s,_-]*\)"
SELECTOR_PATTERN = re.compile(
    rf"({LABEL_PATTERN})\s*(!=|=|in|notin)\s*({OPERAND_PATTERN})"
)
_LIST_NOISE = re.compile(r"[()\s]")

logger = get_logger("policy.selector_parser")


def _split_list_operand(value: str) -> List[str]:
    return _LIST_NOISE.sub("", value).split(",")


def parse(text: str) -> Optional[HostSelector]:
    """Parse a selector such as ``"site = foo"`` or ``"role notin (a, b)"``.

    Returns None when the text is not a selector expression. List operands
    are de-duplicated keeping first-seen order.
    """
    m = SELECTOR_PATTERN.fullmatch(text)
    if m is None:
        return None

    label, symbol, value = m.group(1), m.group(2), m.group(3)
    operator = SelectorOperator.from_symbol(symbol)

    if operator.takes_list:
        return HostSelector(label, operator, dedupe(_split_list_operand(value)))
    return HostSelector(label, operator, value)


def parse_many(texts: Iterable[str]) -> List[HostSelector]:
    """Parse several expressions, failing on the first one that is not a selector."""
    selectors = []
    for text in texts:
        selector = parse(text)
        if selector is None:
            logger.debug("Rejected host selector expression", text=text)
            raise InvalidSelector(f"Invalid host selector '{text}'", details={"text": text})
        selectors.append(selector)
    return selectors
