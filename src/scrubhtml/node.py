"""Small DOM used between parsing, sanitizing and serializing.

Node names follow the serializer's conventions: element nodes carry their
lowercase tag name, and the special names "#text", "#comment" and
"#document-fragment" mark the other node kinds.
"""

from __future__ import annotations

from collections.abc import Iterator


class SimpleDomNode:
    """A DOM-like node.

    - name: tag name for elements, or "#text" / "#comment" / "#document-fragment"
    - attrs: ordered dict of attributes (elements only)
    - children: list of child nodes
    - parent: parent node, or None for the root
    - namespace: None for HTML, "svg" or "math" for foreign elements
    - data: text for text and comment nodes
    """

    __slots__ = ("attrs", "children", "data", "name", "namespace", "parent")

    def __init__(self, name, attrs=None, data=None, namespace=None):
        # Empty names are a bug in the caller (converter or test), fail loudly.
        if not name:
            msg = "Empty name passed to SimpleDomNode constructor"
            raise ValueError(msg)
        self.name = name
        self.namespace = namespace
        self.attrs = dict(attrs) if attrs else {}
        self.data = data
        self.children = []
        self.parent = None

    @property
    def is_element(self):
        return not self.name.startswith("#")

    @property
    def is_foreign(self):
        return self.namespace not in (None, "html")

    def append_child(self, child):
        if child is self:
            msg = f"Adding {child.name} as child of itself would create circular reference"
            raise ValueError(msg)
        if child.parent is not None:
            child.parent.remove_child(child)
        child.parent = self
        self.children.append(child)

    def remove_child(self, child):
        if child not in self.children:
            return
        self.children.remove(child)
        child.parent = None

    def replace_children(self, children):
        for child in list(self.children):
            child.parent = None
        self.children = []
        for child in children:
            self.append_child(child)

    def element_children(self):
        return [child for child in self.children if child.is_element]

    def iter_elements(self, name=None) -> Iterator[SimpleDomNode]:
        """Yield descendant elements in document order, optionally filtered by name."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            if not node.is_element:
                continue
            if name is None or node.name == name:
                yield node
            stack.extend(reversed(node.children))

    def to_text(self, separator="", strip=False):
        """Concatenate descendant text nodes."""
        parts = []
        stack = [self]
        while stack:
            node = stack.pop()
            if node.name == "#text":
                if node.data:
                    parts.append(node.data.strip() if strip else node.data)
                continue
            stack.extend(reversed(node.children))
        return separator.join(part for part in parts if part or not strip)

    def __repr__(self):
        if self.name in {"#text", "#comment"}:
            return f"{type(self).__name__}({self.name}={(self.data or '')[:30]!r})"
        return f"{type(self).__name__}(<{self.name}>, children={len(self.children)})"


class ElementNode(SimpleDomNode):
    __slots__ = ()

    def __init__(self, name, attrs=None, namespace=None):
        if namespace == "html":
            namespace = None
        super().__init__(name, attrs=attrs, namespace=namespace)


class TextNode(SimpleDomNode):
    __slots__ = ()

    def __init__(self, data):
        super().__init__("#text", data=data)


class CommentNode(SimpleDomNode):
    __slots__ = ()

    def __init__(self, data):
        super().__init__("#comment", data=data)


def document_fragment(children=()) -> SimpleDomNode:
    root = SimpleDomNode("#document-fragment")
    for child in children:
        root.append_child(child)
    return root
