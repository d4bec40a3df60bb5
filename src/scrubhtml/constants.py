"""Allow-list tables.

This module defines the baseline element and attribute tables and the CSS
allow-lists. Tables are plain dicts and frozensets here; `scrubhtml.schema`
validates them and wraps them in read-only views.

Element keys are lowercase tag names mapped to `EFlags`. Attribute keys are
"<tag>::<attribute>" or "*::<attribute>" mapped to an `AType`. A tag that is
not listed is treated as UNSAFE, an attribute that is not listed is dropped.

Usage:
    from scrubhtml.constants import ELEMENTS, ATTRIBS

References:
    - https://html.spec.whatwg.org/multipage/syntax.html#void-elements
    - https://html.spec.whatwg.org/multipage/parsing.html#serialising-html-fragments
"""

from __future__ import annotations

from .flags import AType, EFlags

_OPT = EFlags.OPTIONAL_ENDTAG
_EMPTY = EFlags.EMPTY
_UNSAFE = EFlags.UNSAFE

ELEMENTS: dict[str, EFlags] = {
    "a": EFlags.NONE,
    "abbr": EFlags.NONE,
    "acronym": EFlags.NONE,
    "address": EFlags.NONE,
    "applet": _UNSAFE,
    "area": _EMPTY,
    "article": EFlags.NONE,
    "aside": EFlags.NONE,
    "audio": _UNSAFE,
    "b": EFlags.NONE,
    "base": _EMPTY | _UNSAFE,
    "basefont": _EMPTY | _UNSAFE,
    "bdi": EFlags.NONE,
    "bdo": EFlags.NONE,
    "big": EFlags.NONE,
    "blockquote": EFlags.NONE,
    "body": _OPT | EFlags.FOLDABLE,
    "br": _EMPTY,
    "button": EFlags.NONE,
    "canvas": EFlags.NONE,
    "caption": EFlags.NONE,
    "center": EFlags.NONE,
    "cite": EFlags.NONE,
    "code": EFlags.NONE,
    "col": _EMPTY,
    "colgroup": _OPT,
    "dd": _OPT,
    "del": EFlags.NONE,
    "details": EFlags.NONE,
    "dfn": EFlags.NONE,
    "dialog": _UNSAFE,
    "dir": EFlags.NONE,
    "div": EFlags.NONE,
    "dl": EFlags.NONE,
    "dt": _OPT,
    "em": EFlags.NONE,
    "embed": _EMPTY | _UNSAFE,
    "fieldset": EFlags.NONE,
    "figcaption": EFlags.NONE,
    "figure": EFlags.NONE,
    "font": EFlags.NONE,
    "footer": EFlags.NONE,
    "form": _UNSAFE,
    "frame": _UNSAFE,
    "frameset": _UNSAFE,
    "h1": EFlags.NONE,
    "h2": EFlags.NONE,
    "h3": EFlags.NONE,
    "h4": EFlags.NONE,
    "h5": EFlags.NONE,
    "h6": EFlags.NONE,
    "head": _OPT | EFlags.FOLDABLE,
    "header": EFlags.NONE,
    "hgroup": EFlags.NONE,
    "hr": _EMPTY,
    "html": _OPT | EFlags.FOLDABLE,
    "i": EFlags.NONE,
    "iframe": _UNSAFE,
    "img": _EMPTY,
    "input": _EMPTY,
    "ins": EFlags.NONE,
    "kbd": EFlags.NONE,
    "label": EFlags.NONE,
    "legend": EFlags.NONE,
    "li": _OPT,
    "link": _EMPTY | _UNSAFE,
    "main": EFlags.NONE,
    "map": EFlags.NONE,
    "mark": EFlags.NONE,
    "menu": EFlags.NONE,
    "meta": _EMPTY | _UNSAFE,
    "meter": EFlags.NONE,
    "nav": EFlags.NONE,
    "nobr": EFlags.NONE,
    "noembed": _UNSAFE,
    "noframes": _UNSAFE,
    "noscript": _UNSAFE,
    "object": _UNSAFE,
    "ol": EFlags.NONE,
    "optgroup": EFlags.NONE,
    "option": _OPT,
    "output": EFlags.NONE,
    "p": _OPT,
    "param": _EMPTY | _UNSAFE,
    "plaintext": EFlags.CDATA | _UNSAFE,
    "pre": EFlags.NONE,
    "progress": EFlags.NONE,
    "q": EFlags.NONE,
    "rp": EFlags.NONE,
    "rt": EFlags.NONE,
    "ruby": EFlags.NONE,
    "s": EFlags.NONE,
    "samp": EFlags.NONE,
    "script": EFlags.CDATA | _UNSAFE,
    "section": EFlags.NONE,
    "select": EFlags.NONE,
    "small": EFlags.NONE,
    "source": _EMPTY | _UNSAFE,
    "span": EFlags.NONE,
    "strike": EFlags.NONE,
    "strong": EFlags.NONE,
    # Toggled per call by PolicyMode, see ElementSchema.for_mode().
    "style": EFlags.CDATA | _UNSAFE,
    "sub": EFlags.NONE,
    "summary": EFlags.NONE,
    "sup": EFlags.NONE,
    "table": EFlags.NONE,
    "tbody": _OPT,
    "td": _OPT,
    "template": _UNSAFE,
    "textarea": EFlags.RCDATA,
    "tfoot": _OPT,
    "th": _OPT,
    "thead": _OPT,
    "time": EFlags.NONE,
    "title": EFlags.RCDATA | _UNSAFE,
    "tr": _OPT,
    "track": _EMPTY | _UNSAFE,
    "tt": EFlags.NONE,
    "u": EFlags.NONE,
    "ul": EFlags.NONE,
    "var": EFlags.NONE,
    "video": _UNSAFE,
    "wbr": _EMPTY,
    "xmp": EFlags.CDATA | _UNSAFE,
}

_EVENT_HANDLERS = [
    "onblur",
    "onchange",
    "onclick",
    "ondblclick",
    "onerror",
    "onfocus",
    "onkeydown",
    "onkeypress",
    "onkeyup",
    "onload",
    "onmousedown",
    "onmousemove",
    "onmouseout",
    "onmouseover",
    "onmouseup",
    "onreset",
    "onscroll",
    "onselect",
    "onsubmit",
    "onunload",
]

ATTRIBS: dict[str, AType] = {
    # Global attributes
    "*::class": AType.CLASSES,
    "*::dir": AType.NONE,
    "*::hidden": AType.NONE,
    "*::id": AType.ID,
    "*::lang": AType.NONE,
    # Toggled per call by PolicyMode, see ElementSchema.for_mode().
    "*::style": AType.STYLE,
    "*::tabindex": AType.NONE,
    "*::title": AType.NONE,
    # Links
    "a::coords": AType.NONE,
    "a::href": AType.URI,
    "a::hreflang": AType.NONE,
    "a::name": AType.GLOBAL_NAME,
    "a::shape": AType.NONE,
    "a::target": AType.FRAME_TARGET,
    "a::type": AType.NONE,
    "area::alt": AType.NONE,
    "area::coords": AType.NONE,
    "area::href": AType.URI,
    "area::nohref": AType.NONE,
    "area::shape": AType.NONE,
    "area::target": AType.FRAME_TARGET,
    "map::name": AType.GLOBAL_NAME,
    # Images
    "img::align": AType.NONE,
    "img::alt": AType.NONE,
    "img::border": AType.NONE,
    "img::height": AType.NONE,
    "img::hspace": AType.NONE,
    "img::ismap": AType.NONE,
    "img::name": AType.GLOBAL_NAME,
    "img::src": AType.URI,
    "img::usemap": AType.URI_FRAGMENT,
    "img::vspace": AType.NONE,
    "img::width": AType.NONE,
    "canvas::height": AType.NONE,
    "canvas::width": AType.NONE,
    # Text
    "blockquote::cite": AType.URI,
    "q::cite": AType.URI,
    "del::cite": AType.URI,
    "del::datetime": AType.NONE,
    "ins::cite": AType.URI,
    "ins::datetime": AType.NONE,
    "time::datetime": AType.NONE,
    "font::color": AType.NONE,
    "font::face": AType.NONE,
    "font::size": AType.NONE,
    "bdo::dir": AType.NONE,
    "details::open": AType.NONE,
    "p::align": AType.NONE,
    "div::align": AType.NONE,
    "h1::align": AType.NONE,
    "h2::align": AType.NONE,
    "h3::align": AType.NONE,
    "h4::align": AType.NONE,
    "h5::align": AType.NONE,
    "h6::align": AType.NONE,
    "hr::align": AType.NONE,
    "hr::noshade": AType.NONE,
    "hr::size": AType.NONE,
    "hr::width": AType.NONE,
    "pre::width": AType.NONE,
    "meter::high": AType.NONE,
    "meter::low": AType.NONE,
    "meter::max": AType.NONE,
    "meter::min": AType.NONE,
    "meter::optimum": AType.NONE,
    "meter::value": AType.NONE,
    "progress::max": AType.NONE,
    "progress::value": AType.NONE,
    # Lists
    "ol::compact": AType.NONE,
    "ol::reversed": AType.NONE,
    "ol::start": AType.NONE,
    "ol::type": AType.NONE,
    "ul::compact": AType.NONE,
    "ul::type": AType.NONE,
    "li::type": AType.NONE,
    "li::value": AType.NONE,
    "dl::compact": AType.NONE,
    # Tables
    "table::align": AType.NONE,
    "table::bgcolor": AType.NONE,
    "table::border": AType.NONE,
    "table::cellpadding": AType.NONE,
    "table::cellspacing": AType.NONE,
    "table::frame": AType.NONE,
    "table::rules": AType.NONE,
    "table::summary": AType.NONE,
    "table::width": AType.NONE,
    "caption::align": AType.NONE,
    "col::align": AType.NONE,
    "col::span": AType.NONE,
    "col::valign": AType.NONE,
    "col::width": AType.NONE,
    "colgroup::align": AType.NONE,
    "colgroup::span": AType.NONE,
    "colgroup::valign": AType.NONE,
    "colgroup::width": AType.NONE,
    "tbody::align": AType.NONE,
    "tbody::valign": AType.NONE,
    "tfoot::align": AType.NONE,
    "tfoot::valign": AType.NONE,
    "thead::align": AType.NONE,
    "thead::valign": AType.NONE,
    "tr::align": AType.NONE,
    "tr::bgcolor": AType.NONE,
    "tr::valign": AType.NONE,
    "td::abbr": AType.NONE,
    "td::align": AType.NONE,
    "td::axis": AType.NONE,
    "td::bgcolor": AType.NONE,
    "td::colspan": AType.NONE,
    "td::headers": AType.IDREFS,
    "td::height": AType.NONE,
    "td::nowrap": AType.NONE,
    "td::rowspan": AType.NONE,
    "td::scope": AType.NONE,
    "td::valign": AType.NONE,
    "td::width": AType.NONE,
    "th::abbr": AType.NONE,
    "th::align": AType.NONE,
    "th::axis": AType.NONE,
    "th::bgcolor": AType.NONE,
    "th::colspan": AType.NONE,
    "th::headers": AType.IDREFS,
    "th::height": AType.NONE,
    "th::nowrap": AType.NONE,
    "th::rowspan": AType.NONE,
    "th::scope": AType.NONE,
    "th::valign": AType.NONE,
    "th::width": AType.NONE,
    # Form controls (forms themselves are UNSAFE)
    "button::disabled": AType.NONE,
    "button::name": AType.LOCAL_NAME,
    "button::type": AType.NONE,
    "button::value": AType.NONE,
    "fieldset::disabled": AType.NONE,
    "input::accept": AType.NONE,
    "input::alt": AType.NONE,
    "input::checked": AType.NONE,
    "input::disabled": AType.NONE,
    "input::maxlength": AType.NONE,
    "input::name": AType.LOCAL_NAME,
    "input::placeholder": AType.NONE,
    "input::readonly": AType.NONE,
    "input::size": AType.NONE,
    "input::src": AType.URI,
    "input::type": AType.NONE,
    "input::value": AType.NONE,
    "label::for": AType.IDREF,
    "legend::align": AType.NONE,
    "optgroup::disabled": AType.NONE,
    "optgroup::label": AType.NONE,
    "option::disabled": AType.NONE,
    "option::label": AType.NONE,
    "option::selected": AType.NONE,
    "option::value": AType.NONE,
    "output::for": AType.IDREFS,
    "output::name": AType.LOCAL_NAME,
    "select::disabled": AType.NONE,
    "select::multiple": AType.NONE,
    "select::name": AType.LOCAL_NAME,
    "select::size": AType.NONE,
    "textarea::cols": AType.NONE,
    "textarea::disabled": AType.NONE,
    "textarea::name": AType.LOCAL_NAME,
    "textarea::placeholder": AType.NONE,
    "textarea::readonly": AType.NONE,
    "textarea::rows": AType.NONE,
    # Never emitted, listed so removals carry a precise reason
    "*::srcdoc": AType.HTML,
    **{f"*::{name}": AType.SCRIPT for name in _EVENT_HANDLERS},
}

# Serialized without an end tag.
VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "basefont",
        "bgsound",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "keygen",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Text content of these is serialized verbatim (no entity escaping).
RAWTEXT_ELEMENTS = frozenset({"iframe", "noembed", "noframes", "plaintext", "script", "style", "xmp"})

DEFAULT_TRUSTED_ATTRIBUTE_PREFIXES = ("data-",)

# Walk/verify recursion bound. Deeper content is rejected.
DEFAULT_MAX_DEPTH = 256


# ----------------------------
# CSS allow-lists
# ----------------------------

ALLOWED_CSS_PROPERTIES = frozenset(
    {
        "azimuth",
        "background",
        "background-attachment",
        "background-color",
        "background-image",
        "background-position",
        "background-repeat",
        "border",
        "border-bottom",
        "border-bottom-color",
        "border-bottom-style",
        "border-bottom-width",
        "border-collapse",
        "border-color",
        "border-left",
        "border-left-color",
        "border-left-style",
        "border-left-width",
        "border-radius",
        "border-right",
        "border-right-color",
        "border-right-style",
        "border-right-width",
        "border-spacing",
        "border-style",
        "border-top",
        "border-top-color",
        "border-top-style",
        "border-top-width",
        "border-width",
        "caption-side",
        "clear",
        "color",
        "cursor",
        "direction",
        "display",
        "elevation",
        "empty-cells",
        "float",
        "font",
        "font-family",
        "font-size",
        "font-style",
        "font-variant",
        "font-weight",
        "height",
        "letter-spacing",
        "line-height",
        "list-style",
        "list-style-image",
        "list-style-position",
        "list-style-type",
        "margin",
        "margin-bottom",
        "margin-left",
        "margin-right",
        "margin-top",
        "max-height",
        "max-width",
        "min-height",
        "min-width",
        "opacity",
        "outline",
        "outline-color",
        "outline-style",
        "outline-width",
        "overflow",
        "overflow-x",
        "overflow-y",
        "padding",
        "padding-bottom",
        "padding-left",
        "padding-right",
        "padding-top",
        "pause",
        "pause-after",
        "pause-before",
        "pitch",
        "pitch-range",
        "richness",
        "speak",
        "speak-header",
        "speak-numeral",
        "speak-punctuation",
        "speech-rate",
        "stress",
        "table-layout",
        "text-align",
        "text-decoration",
        "text-indent",
        "text-overflow",
        "text-transform",
        "unicode-bidi",
        "vertical-align",
        "visibility",
        "voice-family",
        "volume",
        "white-space",
        "width",
        "word-spacing",
        "word-wrap",
        # SVG presentation properties
        "fill",
        "fill-opacity",
        "fill-rule",
        "stroke",
        "stroke-linecap",
        "stroke-linejoin",
        "stroke-opacity",
        "stroke-width",
    }
)

ALLOWED_CSS_FUNCTIONS = frozenset(
    {
        "calc",
        "hsl",
        "hsla",
        "linear-gradient",
        "radial-gradient",
        "repeating-linear-gradient",
        "repeating-radial-gradient",
        "rgb",
        "rgba",
        "url",
    }
)

ALLOWED_PSEUDO_CLASSES = frozenset(
    {
        "active",
        "checked",
        "disabled",
        "empty",
        "enabled",
        "first-child",
        "first-of-type",
        "focus",
        "hover",
        "last-child",
        "last-of-type",
        "link",
        "only-child",
        "only-of-type",
    }
)

ALLOWED_PSEUDO_FUNCTIONS = frozenset({"not", "nth-child", "nth-last-child", "nth-last-of-type", "nth-of-type"})

ALLOWED_PSEUDO_ELEMENTS = frozenset({"first-letter", "first-line"})

# Literal tokens allowed in a selector outside attribute brackets.
ALLOWED_SELECTOR_LITERALS = frozenset({"*", ".", ">", "+", "~", "|"})

# Literal tokens allowed inside an attribute selector.
ALLOWED_ATTRIBUTE_SELECTOR_LITERALS = frozenset({"=", "~=", "|=", "^=", "$=", "*=", "|"})
