"""Response header helpers for serving stored PDFs."""

from __future__ import annotations

import unicodedata
from typing import Literal
from urllib.parse import quote

DispositionType = Literal["inline", "attachment"]

_UNSAFE_ASCII = {'"', "\\", ";", ":"}


def _strip_control_chars(value: str) -> str:
    return "".join(ch for ch in value if unicodedata.category(ch)[0] != "C").strip()


def content_disposition(
    filename: str | None,
    *,
    disposition: DispositionType = "attachment",
    default: str = "partitura.pdf",
) -> str:
    """Build a ``Content-Disposition`` value for ``filename``.

    Non-ASCII names get an ASCII ``filename`` fallback plus an RFC 5987
    ``filename*`` parameter so browsers keep the original spelling.
    """
    candidate = _strip_control_chars(filename or "") or default

    ascii_name = "".join(
        ch if 32 <= ord(ch) < 127 and ch not in _UNSAFE_ASCII else "_" for ch in candidate
    )
    ascii_name = ascii_name.strip("_ ")[:255] or default

    if ascii_name == candidate:
        return f'{disposition}; filename="{ascii_name}"'
    return f"{disposition}; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(candidate, safe='')}"


__all__ = ["DispositionType", "content_disposition"]
