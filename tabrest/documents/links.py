"""RFC 8288 ``Link`` header parsing."""

from __future__ import annotations

import re
from collections.abc import Iterable

_LINK = re.compile(r"<(?P<url>[^>]*)>(?P<params>[^<]*)")
_REL = re.compile(r"""\brel\s*=\s*(?:"(?P<quoted>[^"]*)"|(?P<bare>[^\s;,]+))""", re.IGNORECASE)


def parse_link_header(values: str | Iterable[str]) -> dict[str, str]:
    """Map each link relation to its target URL.

    A link with ``rel="next last"`` is registered under both relations. When a
    relation appears more than once the first occurrence wins.

    Args:
        values: One header value or every value of repeated Link headers
    """
    if isinstance(values, str):
        values = [values]

    links: dict[str, str] = {}
    for value in values:
        for match in _LINK.finditer(value):
            rel = _REL.search(match.group("params"))
            if rel is None:
                continue
            relations = (rel.group("quoted") or rel.group("bare") or "").split()
            for relation in relations:
                links.setdefault(relation.lower(), match.group("url").strip())
    return links
