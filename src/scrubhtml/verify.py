"""Structural comparison of two parsed fragments."""

from __future__ import annotations

from typing import Any

from .constants import DEFAULT_MAX_DEPTH


def is_equivalent_structure(tree_a: Any, tree_b: Any, *, max_depth: int = DEFAULT_MAX_DEPTH) -> bool:
    """Return True if both trees have the same element skeleton.

    Only element names and nesting are compared (case-insensitively);
    attributes, text and comments are ignored. Trees nested deeper than
    `max_depth` are reported as not equivalent.
    """
    stack = [(tree_a, tree_b, 0)]
    while stack:
        a, b, depth = stack.pop()
        children_a = a.element_children()
        children_b = b.element_children()
        if len(children_a) != len(children_b):
            return False
        if not children_a:
            continue
        if depth >= max_depth:
            return False
        for child_a, child_b in zip(children_a, children_b):
            if child_a.name.lower() != child_b.name.lower():
                return False
            stack.append((child_a, child_b, depth + 1))
    return True
