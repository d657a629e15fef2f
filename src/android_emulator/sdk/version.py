"""Version strings as printed by sdkmanager.

sdkmanager prints versions like ``29.0.2``, ``30.0.0 rc4`` or ``1``. A version
is a tuple of numeric dot segments plus an optional free-text qualifier. A
final release (no qualifier) sorts after every pre-release with the same
numeric segments, and segments compare numerically (``1.2.0 < 1.10.0``).

Parsing never fails: text that cannot be read as numbers becomes part of the
qualifier, so malformed versions still order deterministically (lowest).
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

_NUMERIC_SEGMENT = re.compile(r"[0-9]+")


def _strip_trailing_zeros(segments: Tuple[int, ...]) -> Tuple[int, ...]:
    end = len(segments)
    while end > 0 and segments[end - 1] == 0:
        end -= 1
    return segments[:end]


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    raw: str
    segments: Tuple[int, ...] = ()
    qualifier: Optional[str] = None
    _key: Tuple[Any, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # Unparsable versions (no numeric segment) rank below every parsed one.
        # Trailing zero segments are irrelevant once the shorter side is zero padded.
        key = (
            1 if self.segments else 0,
            _strip_trailing_zeros(self.segments),
            self.qualifier is None,
            (self.qualifier or "").lower(),
        )
        object.__setattr__(self, "_key", key)

    @classmethod
    def parse(cls, raw: Any) -> "Version":
        text = "" if raw is None else str(raw).strip()
        if not text:
            return cls(raw="", qualifier="")

        parts = text.split(None, 1)
        head = parts[0]
        tail = parts[1].strip() if len(parts) > 1 else ""

        segments: list[int] = []
        leftover: list[str] = []
        pieces = head.split(".")
        for idx, piece in enumerate(pieces):
            if _NUMERIC_SEGMENT.fullmatch(piece):
                segments.append(int(piece))
            else:
                leftover = pieces[idx:]
                break

        if not segments:
            return cls(raw=text, segments=(), qualifier=text)

        qualifier_parts = []
        if leftover:
            qualifier_parts.append(".".join(leftover))
        if tail:
            qualifier_parts.append(tail)
        qualifier = " ".join(qualifier_parts) or None
        return cls(raw=text, segments=tuple(segments), qualifier=qualifier)

    @property
    def is_preview(self) -> bool:
        return self.qualifier is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key == other._key

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key < other._key

    def __hash__(self) -> int:
        return hash(self._key)

    def __str__(self) -> str:
        return self.raw


def parse_version(raw: Any) -> Version:
    if isinstance(raw, Version):
        return raw
    return Version.parse(raw)


def compare(a: Any, b: Any) -> int:
    """Return -1, 0 or 1 as `a` is less than, equal to or greater than `b`.

    Accepts `Version` instances or raw strings.
    """

    va = parse_version(a)
    vb = parse_version(b)
    if va == vb:
        return 0
    return -1 if va < vb else 1
