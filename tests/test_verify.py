from __future__ import annotations

import unittest

from scrubhtml.node import ElementNode, TextNode, document_fragment
from scrubhtml.parser import parse_fragment
from scrubhtml.verify import is_equivalent_structure


def _chain(depth: int):
    root = document_fragment()
    node = root
    for _ in range(depth):
        child = ElementNode("div")
        node.append_child(child)
        node = child
    return root


class TestStructuralVerifier(unittest.TestCase):
    def test_attributes_and_text_are_ignored(self) -> None:
        a = parse_fragment("<p><b>x</b> tail</p>")
        b = parse_fragment('<P class="y"><B title="t">other</B></P>')
        assert is_equivalent_structure(a, b)

    def test_comments_are_ignored(self) -> None:
        assert is_equivalent_structure(parse_fragment("<p>a<!-- c --></p>"), parse_fragment("<p>a</p>"))

    def test_different_counts(self) -> None:
        assert not is_equivalent_structure(parse_fragment("<p></p><p></p>"), parse_fragment("<p></p>"))

    def test_different_names(self) -> None:
        assert not is_equivalent_structure(parse_fragment("<p><b></b></p>"), parse_fragment("<p><i></i></p>"))

    def test_different_nesting(self) -> None:
        assert not is_equivalent_structure(parse_fragment("<p></p>"), parse_fragment("<p><b></b></p>"))
        assert not is_equivalent_structure(parse_fragment("<p><i><b></b></i></p>"), parse_fragment("<p><i></i></p>"))

    def test_case_insensitive_names(self) -> None:
        a = document_fragment([ElementNode("DIV")])
        b = document_fragment([ElementNode("div")])
        assert is_equivalent_structure(a, b)

    def test_empty_trees(self) -> None:
        assert is_equivalent_structure(document_fragment(), document_fragment([TextNode("x")]))

    def test_depth_bound(self) -> None:
        assert is_equivalent_structure(_chain(5), _chain(5), max_depth=5)
        assert not is_equivalent_structure(_chain(6), _chain(6), max_depth=5)

    def test_deep_trees_do_not_exhaust_the_stack(self) -> None:
        assert is_equivalent_structure(_chain(3000), _chain(3000), max_depth=5000)


if __name__ == "__main__":
    unittest.main()
