"""Lenient, totally ordered version wrapper around semantic_version."""

from __future__ import annotations

import functools
from typing import Optional

import semantic_version

from .errors import VersionParsing


def lenient_parse(raw: str) -> Optional[semantic_version.Version]:
    """Best-effort semver parse of a tag.

    Accepts a leading ``v``/``V`` and partial versions ("0.2" -> 0.2.0).
    Returns None for tags such as "latest" or "stable".
    """
    text = raw.strip()
    if text[:1] in ("v", "V"):
        text = text[1:]
    if not text:
        return None
    try:
        return semantic_version.Version.coerce(text)
    except ValueError:
        return None


@functools.total_ordering
class Version:
    """A tag string plus its structured parse.

    Ordering: unparseable tags sort below parseable ones, parseable tags
    compare by semver precedence and remaining ties fall back to the raw
    string, so the order is total and deterministic. Equality is over the
    raw string only.
    """

    __slots__ = ("string", "parsed")

    def __init__(self, string: str):
        if not isinstance(string, str) or not string.strip():
            raise VersionParsing(str(string))
        self.string = string
        self.parsed = lenient_parse(string)

    def __str__(self) -> str:
        return self.string

    def __repr__(self) -> str:
        return f"Version({self.string!r})"

    def __hash__(self) -> int:
        return hash(self.string)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.string == other.string

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        if self.parsed is None or other.parsed is None:
            if (self.parsed is None) != (other.parsed is None):
                return self.parsed is None
            return self.string < other.string
        if self.parsed < other.parsed:
            return True
        if other.parsed < self.parsed:
            return False
        return self.string < other.string
