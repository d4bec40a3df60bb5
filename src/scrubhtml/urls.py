"""URI and token collaborators for the attribute sanitizer.

`UrlRule` is the default URI rewriter: an instance is callable as
`rule(value) -> str | None`, returning the value to emit or None to drop the
attribute. Any callable with that signature can be used instead.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Collection
from dataclasses import dataclass, field
from urllib.parse import urlsplit

UriRewriter = Callable[[str], "str | None"]
TokenPolicy = Callable[[str], "str | None"]

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):")
# Browsers ignore these inside URLs, so "java\tscript:" is still javascript:.
_IGNORED_URL_CHARS_RE = re.compile(r"[\x00-\x20\x7f]")
_NETWORK_SCHEMES = frozenset({"ftp", "http", "https", "ws", "wss"})


@dataclass(frozen=True, slots=True)
class UrlRule:
    """Rule for URL-valued attributes (a[href], img[src], CSS url(), ...).

    This is intentionally rendering-oriented.

    - Keeping a URL can still cause network requests when the output is
        rendered (notably for <img src> and CSS backgrounds).
    """

    # Allow relative URLs (including /path, ./path, ../path, ?query).
    allow_relative: bool = True

    # Allow same-document fragments (#foo). Typically safe.
    allow_fragment: bool = True

    # Allow protocol-relative URLs (//example.com). Default False because they
    # are surprising and effectively network URLs.
    allow_protocol_relative: bool = False

    # Allow absolute URLs with these schemes (lowercase), e.g. {"https"}.
    # If empty, all absolute URLs with a scheme are disallowed.
    allowed_schemes: Collection[str] = field(default_factory=lambda: {"http", "https", "mailto"})

    # If provided, network URLs are allowed only if the parsed host is in
    # this allowlist.
    allowed_hosts: Collection[str] | None = None

    def __post_init__(self) -> None:
        # Accept lists/tuples from user code, normalize for internal use.
        object.__setattr__(self, "allowed_schemes", frozenset(s.lower() for s in self.allowed_schemes))
        if self.allowed_hosts is not None:
            object.__setattr__(self, "allowed_hosts", frozenset(h.lower() for h in self.allowed_hosts))

    def __call__(self, value: str) -> str | None:
        value = value.strip(" \t\n\f\r")
        compact = _IGNORED_URL_CHARS_RE.sub("", value).replace("\\", "/")

        if compact.startswith("#"):
            return value if self.allow_fragment else None

        if compact.startswith("//"):
            if not self.allow_protocol_relative:
                return None
            return value if self._host_allowed(compact, None) else None

        match = _SCHEME_RE.match(compact)
        if match is None:
            return value if self.allow_relative else None

        scheme = match.group(1).lower()
        if scheme not in self.allowed_schemes:
            return None
        return value if self._host_allowed(compact, scheme) else None

    def _host_allowed(self, url: str, scheme: str | None) -> bool:
        if self.allowed_hosts is None:
            return True
        try:
            host = urlsplit(url).hostname
        except ValueError:
            return False
        if host is None:
            # mailto: and friends have no host to check.
            return scheme is not None and scheme not in _NETWORK_SCHEMES
        return host in self.allowed_hosts


DEFAULT_URL_RULE: UrlRule = UrlRule()


def keep_token(token: str) -> str | None:
    """Default NMTOKEN policy: accept every token unchanged."""
    return token


def call_collaborator(func: Callable[[str], str | None], value: str) -> str | None:
    """Run a caller-supplied rewriter/policy; a failure counts as rejection."""
    try:
        result = func(value)
    except Exception:
        logger.warning("Collaborator %r failed on %r, rejecting value", func, value[:80], exc_info=True)
        return None
    if result is not None and not isinstance(result, str):
        logger.warning("Collaborator %r returned %r, rejecting value", func, type(result).__name__)
        return None
    return result
