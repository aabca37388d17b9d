from __future__ import annotations

import re
from urllib.parse import quote

_URL_SCHEME = re.compile(r"^(https|http|ftp)://")

# Characters left alone by JavaScript's encodeURIComponent.
_COMPONENT_SAFE = "-_.!~*'()"


def is_url_scheme(value: str) -> bool:
    return bool(_URL_SCHEME.match(value))


def encode_component(value: str) -> str:
    """Percent-encode a single path segment (``group/project`` -> ``group%2Fproject``)."""
    return quote(value, safe=_COMPONENT_SAFE)


def url_join(*parts: str) -> str:
    """Join URL segments with exactly one slash between them.

    The scheme separator is preserved, empty segments are dropped and a
    segment starting with ``?`` stays attached to the previous one.

        url_join("https://gitlab.com/", "/api/v4") == "https://gitlab.com/api/v4"
    """
    segments = [p for p in parts if p]
    if not segments:
        return ""

    out: list[str] = []
    last = len(segments) - 1
    for i, seg in enumerate(segments):
        if i > 0:
            seg = seg.lstrip("/")
        if i < last:
            seg = seg[:-1] if seg.endswith("://") else seg.rstrip("/")
        if seg or i == 0:
            out.append(seg)

    joined = "/".join(out)
    joined = re.sub(r"/(\?|&|#)", r"\1", joined)
    return joined
