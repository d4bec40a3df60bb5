"""Element flags, attribute value classes and per-call policy modes.

The element/attribute tables in `scrubhtml.constants` are expressed in terms
of these enums. Numeric values follow the classic html4 schema so tables
written against it read the same.
"""

from __future__ import annotations

from enum import Enum, IntFlag


class EFlags(IntFlag):
    NONE = 0
    OPTIONAL_ENDTAG = 1
    EMPTY = 2
    CDATA = 4
    RCDATA = 8
    UNSAFE = 16
    FOLDABLE = 32


class AType(Enum):
    """Semantic category of an attribute value.

    Decides how the value is validated or rewritten before it is emitted.
    """

    NONE = 0
    URI = 1
    SCRIPT = 2
    STYLE = 3
    ID = 4
    IDREF = 5
    IDREFS = 6
    GLOBAL_NAME = 7
    LOCAL_NAME = 8
    CLASSES = 9
    FRAME_TARGET = 10
    URI_FRAGMENT = 11
    HTML = 12
    NMTOKENS = 13


class _StrEnum(str, Enum):
    """Backport of enum.StrEnum (Python 3.11+)."""


class PolicyMode(_StrEnum):
    ALLOW_CSS = "allow_css"
    STRIP_CSS = "strip_css"


class ChangeKind(_StrEnum):
    REMOVED = "removed"
    CHANGED = "changed"


# Value classes whose content is a whitespace-separated token list.
TOKEN_LIST_TYPES = frozenset({AType.NMTOKENS, AType.CLASSES, AType.IDREFS})

# Value classes holding exactly one token.
SINGLE_TOKEN_TYPES = frozenset({AType.ID, AType.IDREF, AType.GLOBAL_NAME, AType.LOCAL_NAME})
