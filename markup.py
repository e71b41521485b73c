#!/usr/bin/env python3
"""
Generic queries over a parsed BeautifulSoup markup tree

Conditions are plain callables taking a node and returning bool. Passing several
conditions to find_all/find_first means all of them must hold. Nothing in here
knows about forecasts.
"""

from enum import Enum
from typing import Callable, List, Optional

from bs4.element import NavigableString, PageElement, PreformattedString, Tag

ATTRIBUTE_CLASS = 'class'
ATTRIBUTE_ID = 'id'

Condition = Callable[[PageElement], bool]


class WalkSignal(Enum):
    """What a walk visitor wants to happen next"""
    CONTINUE = 'continue'
    STOP = 'stop'


Visitor = Callable[[PageElement], Optional[WalkSignal]]


def walk(root: PageElement, visitor: Visitor) -> bool:
    """Visit root and its descendants in document (pre-order) order.

    The visitor returns WalkSignal.STOP to end the walk early, anything else
    continues. Exceptions raised by the visitor propagate to the caller.

    Returns True if the walk was stopped early.
    """
    stack = [root]
    while stack:
        node = stack.pop()
        if visitor(node) is WalkSignal.STOP:
            return True
        if isinstance(node, Tag):
            stack.extend(reversed(node.contents))
    return False


def meets_conditions(node: PageElement, *conditions: Condition) -> bool:
    return all(condition(node) for condition in conditions)


def find_all(root: PageElement, *conditions: Condition) -> List[PageElement]:
    """Collect every node under root (root included) that meets all conditions"""
    found = []

    def collect(node):
        if meets_conditions(node, *conditions):
            found.append(node)

    walk(root, collect)
    return found


def find_first(root: PageElement, *conditions: Condition) -> Optional[PageElement]:
    """Return the first node under root (root included) that meets all conditions"""
    found = []

    def stop_on_match(node):
        if meets_conditions(node, *conditions):
            found.append(node)
            return WalkSignal.STOP
        return WalkSignal.CONTINUE

    walk(root, stop_on_match)
    return found[0] if found else None


def attribute_value(node: PageElement, key: str) -> Optional[str]:
    """Raw attribute text, or None for missing attributes and non-element nodes.

    BeautifulSoup splits multi-valued attributes such as class into lists; they
    are joined back so matching sees the text as written in the document.
    """
    if not isinstance(node, Tag):
        return None
    value = node.attrs.get(key)
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return ' '.join(value)
    return value


def attribute_equals(key: str, value: str) -> Condition:
    return lambda node: attribute_value(node, key) == value


def attribute_contains(key: str, value: str) -> Condition:
    def condition(node):
        actual = attribute_value(node, key)
        return actual is not None and value in actual
    return condition


def has_attribute(key: str) -> Condition:
    return lambda node: isinstance(node, Tag) and key in node.attrs


def class_equals(value: str) -> Condition:
    return attribute_equals(ATTRIBUTE_CLASS, value)


def class_contains(*values: str) -> Condition:
    """Class attribute contains every one of values as a substring"""
    conditions = [attribute_contains(ATTRIBUTE_CLASS, v) for v in values]
    return lambda node: meets_conditions(node, *conditions)


def id_equals(value: str) -> Condition:
    return attribute_equals(ATTRIBUTE_ID, value)


def is_text(node: PageElement) -> bool:
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def element_children(node: PageElement) -> List[Tag]:
    """Element children of node, skipping text and comments"""
    if not isinstance(node, Tag):
        return []
    return [child for child in node.children if isinstance(child, Tag)]


def text_content(node: PageElement) -> str:
    """Concatenation of every text node under node (comments excluded)"""
    return ''.join(str(n) for n in find_all(node, is_text))
