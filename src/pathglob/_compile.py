"""Glob pattern compilation.

A glob string is split on ``/`` into portions.  Portions without a glob
metacharacter are coalesced into ``literal`` segments; every other
portion is translated into an equivalent :mod:`re` source string and
stored as a ``pattern`` segment.  The result is a :class:`SegmentChain`.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, NamedTuple

from .exceptions import PatternCompileError

logger = logging.getLogger(__name__)

LITERAL = "literal"
PATTERN = "pattern"

GLOBSTAR = "**"

_MAGIC_RE = re.compile(r"[*?[]")

# Regex source for a globstar: any run of characters, slashes included.
_GLOBSTAR_RE = ".*"
# Globstar followed by more segments: zero or more whole directory portions.
_GLOBSTAR_DIRS_RE = "(?:.*/)?"

# Members of a glob class that are operators inside a regex set.
_CLASS_ESCAPES = frozenset("\\[&~|")


def has_magic(s: str) -> bool:
    """Return True if *s* contains ``*``, ``?`` or ``[``."""
    return _MAGIC_RE.search(s) is not None


def join_path(*pieces: str) -> str:
    """Join the non-empty *pieces* with ``/``.

    >>> join_path("", "config", "", "init.lua")
    'config/init.lua'
    """
    return "/".join(p for p in pieces if p)


class Segment(NamedTuple):
    """One compiled unit of a :class:`SegmentChain`.

    *next* is the index of the following segment in the owning chain,
    or ``None`` for the last segment.
    """

    kind: str
    value: str
    is_globstar: bool = False
    next: int | None = None


class SegmentChain:
    """Immutable, index-linked sequence of :class:`Segment` records."""

    __slots__ = ("_segments", "source")

    def __init__(self, segments, source: str = ""):
        self._segments: tuple[Segment, ...] = tuple(segments)
        self.source = source

    def __repr__(self) -> str:
        return f"SegmentChain({self.source!r}, {len(self._segments)} segments)"

    def __len__(self) -> int:
        return len(self._segments)

    def __getitem__(self, index: int) -> Segment:
        return self._segments[index]

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)

    @property
    def head(self) -> Segment | None:
        """The first segment, or ``None`` for an empty chain."""
        return self._segments[0] if self._segments else None

    def follow(self, segment: Segment) -> Segment | None:
        """Return the segment after *segment*, or ``None`` at the end."""
        if segment.next is None:
            return None
        return self._segments[segment.next]

    def tail_regex(self, index: int) -> str:
        """Return regex source for the chain from *index* to its end.

        Literal values are escaped, segments are joined with ``/`` except
        after a globstar.  The result is not anchored; use it with
        :func:`re.fullmatch`.
        """
        pieces: list[str] = []
        seg: Segment | None = self._segments[index]
        while seg is not None:
            nxt = self.follow(seg)
            if seg.kind == LITERAL:
                pieces.append(re.escape(seg.value))
            elif seg.is_globstar and nxt is not None:
                pieces.append(_GLOBSTAR_DIRS_RE)
            else:
                pieces.append(seg.value)
            if nxt is not None and not seg.is_globstar:
                pieces.append("/")
            seg = nxt
        return "".join(pieces)


def _translate_class(portion: str, start: int, pieces: list[str]) -> int:
    """Translate the ``[`` class opening at *start*; return the index past its ``]``."""
    length = len(portion)
    i = start + 1
    # A class never matches the separator, ranges included
    pieces.append("(?!/)[")
    if i < length and portion[i] in "!^":
        pieces.append("^")
        i += 1
    # A leading ']' is a member, not the terminator
    if i < length and portion[i] == "]":
        pieces.append("\\]")
        i += 1
    while i < length:
        c = portion[i]
        if c == "]":
            pieces.append("]")
            return i + 1
        pieces.append("\\" + c if c in _CLASS_ESCAPES else c)
        i += 1
    raise PatternCompileError("unterminated character class", portion, start)


def translate_portion(portion: str) -> str:
    """Translate one glob path *portion* into :mod:`re` source.

    ``*`` becomes ``[^/]*``, ``?`` becomes ``[^/]``, ``[...]`` classes
    (with ``!`` or ``^`` negation) are carried over and everything else is
    matched literally.  A portion that is exactly ``**`` matches any
    sequence of characters, including ``/``.

    Raises:
        PatternCompileError: On an embedded ``**``, an unterminated class,
            or a class :mod:`re` rejects (e.g. ``[z-a]``).
    """
    if portion == GLOBSTAR:
        return _GLOBSTAR_RE

    pieces: list[str] = []
    length = len(portion)
    i = 0
    while i < length:
        c = portion[i]
        if c == "*":
            if i + 1 < length and portion[i + 1] == "*":
                raise PatternCompileError(
                    "globstar must be alone in a path portion", portion, i
                )
            pieces.append("[^/]*")
            i += 1
        elif c == "?":
            pieces.append("[^/]")
            i += 1
        elif c == "[":
            i = _translate_class(portion, i, pieces)
        else:
            pieces.append(re.escape(c))
            i += 1

    pattern = "".join(pieces)
    try:
        re.compile(pattern).match("")
    except re.error as exc:
        raise PatternCompileError(f"invalid pattern ({exc.msg})", portion) from exc
    return pattern


def compile(pattern: str) -> SegmentChain:
    """Compile a glob *pattern* into a :class:`SegmentChain`.

    Empty portions (leading, trailing or doubled slashes) are skipped.

    Raises:
        PatternCompileError: If any portion fails to translate, or the
            pattern has no portions at all.
    """
    segments: list[Segment] = []
    offset = 0
    for portion in pattern.split("/"):
        start = offset
        offset += len(portion) + 1
        if not portion:
            continue
        if has_magic(portion):
            try:
                value = translate_portion(portion)
            except PatternCompileError as exc:
                position = None if exc.position is None else start + exc.position
                raise PatternCompileError(exc.reason, pattern, position) from None
            segments.append(Segment(PATTERN, value, portion == GLOBSTAR))
        elif segments and segments[-1].kind == LITERAL:
            prev = segments[-1]
            segments[-1] = prev._replace(value=join_path(prev.value, portion))
        else:
            segments.append(Segment(LITERAL, portion))

    if not segments:
        raise PatternCompileError("pattern has no path portions", pattern)

    last = len(segments) - 1
    chain = SegmentChain(
        (seg._replace(next=i + 1 if i < last else None) for i, seg in enumerate(segments)),
        pattern,
    )
    logger.debug("compiled %r into %d segments: %r", pattern, len(chain), list(chain))
    return chain
