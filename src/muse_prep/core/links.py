"""Turn bare http(s) URLs into Muse links showing only the domain."""
from __future__ import annotations

import re
from typing import Optional

_RE_BARE_URL = re.compile(
    r"""
    (?<!\[)                 # not already inside [[...]]
    (
        (https?://)         # scheme
        (\w[\w\-.]+\.\w+)   # domain
        (:\d+)?             # port
        (/                  # path, not ending with punctuation
            [^\[<>\s]*
            [\w/]
        )?
    )
    (?!\])
    """,
    re.VERBOSE,
)


def linkify(text: Optional[str]) -> Optional[str]:
    """
    Rewrite bare URLs as ``[[url][domain]]``.

    The full URL stays as the link target, so nothing is lost; the label is
    just the host. URLs already wrapped in brackets are left alone, and a
    trailing dot or parenthesis is not swallowed into the link.

    >>> linkify("see http://example.org/a/b.html.")
    'see [[http://example.org/a/b.html][example.org]].'
    """
    if text is None:
        return None
    return _RE_BARE_URL.sub(r"[[\1][\3]]", text)
