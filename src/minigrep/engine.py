
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Tuple


GROUP_SEPARATOR = "--"


@dataclass(frozen=True)
class Line:
    index: int
    content: str


@dataclass(frozen=True)
class Config:
    query: str
    case_insensitive: bool = False
    show_line_numbers: bool = False
    before: int = 0
    after: int = 0
    word: bool = False

    def __post_init__(self) -> None:
        if self.before < 0:
            raise ValueError(f"before context must be >= 0 (got {self.before})")
        if self.after < 0:
            raise ValueError(f"after context must be >= 0 (got {self.after})")


@dataclass(frozen=True)
class EmittedLine:
    line: Line
    is_match: bool


def _fold(s: str) -> str:
    # casefold() is context free and locale independent: final and medial
    # sigma both become "σ", so query and line fold the same way.
    return s.casefold()


def _is_word_char(c: str) -> bool:
    return c.isalnum() or c == "_"


def _has_word_occurrence(hay: str, needle: str) -> bool:
    if not needle:
        return True
    start = hay.find(needle)
    while start != -1:
        end = start + len(needle)
        left_ok = start == 0 or not _is_word_char(hay[start - 1])
        right_ok = end == len(hay) or not _is_word_char(hay[end])
        if left_ok and right_ok:
            return True
        start = hay.find(needle, start + 1)
    return False


def matches(line: Line, query: str, case_insensitive: bool, *, word: bool = False) -> bool:
    hay = line.content
    needle = query
    if case_insensitive:
        hay = _fold(hay)
        needle = _fold(needle)
    if word:
        return _has_word_occurrence(hay, needle)
    return needle in hay


def merge_runs(intervals: Iterable[Tuple[int, int]]) -> List[Tuple[int, int]]:
    """
    Union inclusive (start, end) intervals. Overlapping and adjacent
    intervals collapse into one run; the result is sorted by start.
    """
    ordered = sorted(intervals)
    if not ordered:
        return []
    merged = [ordered[0]]
    for s, e in ordered[1:]:
        ps, pe = merged[-1]
        if s <= pe + 1:
            merged[-1] = (ps, max(pe, e))
        else:
            merged.append((s, e))
    return merged


def assemble(lines: Sequence[Line], config: Config) -> List[EmittedLine]:
    """
    Return the lines to print for `config`: every match plus its before/after
    context, in index order, each line at most once.

    Context windows are clipped to the input and merged before emission, so
    overlapping windows of neighbouring matches never repeat a line.
    """
    if not lines:
        return []

    hits: Set[int] = {
        ln.index
        for ln in lines
        if matches(ln, config.query, config.case_insensitive, word=config.word)
    }
    if not hits:
        return []

    first = lines[0].index
    last = lines[-1].index
    runs = merge_runs(
        (max(first, m - config.before), min(last, m + config.after)) for m in hits
    )

    by_index = {ln.index: ln for ln in lines}
    out: List[EmittedLine] = []
    for start, end in runs:
        for i in range(start, end + 1):
            ln = by_index.get(i)
            if ln is None:
                continue
            out.append(EmittedLine(line=ln, is_match=i in hits))
    return out


def group_runs(emitted: Sequence[EmittedLine]) -> List[List[EmittedLine]]:
    # Consecutive indices belong to the same merged run.
    groups: List[List[EmittedLine]] = []
    prev: Optional[int] = None
    for e in emitted:
        if prev is None or e.line.index != prev + 1:
            groups.append([])
        groups[-1].append(e)
        prev = e.line.index
    return groups


def read_lines(path: Path) -> List[Line]:
    """
    Read `path` as UTF-8 (bad bytes replaced) into 1-based Line records.

    Lines split on "\\n" only; a trailing "\\r" is stripped so CRLF files read
    the same as LF files. OSError (including FileNotFoundError) propagates.
    """
    out: List[Line] = []
    with Path(path).open("r", encoding="utf-8", errors="replace", newline="\n") as f:
        for i, raw in enumerate(f, 1):
            text = raw[:-1] if raw.endswith("\n") else raw
            if text.endswith("\r"):
                text = text[:-1]
            out.append(Line(index=i, content=text))
    return out


def format_line(emitted: EmittedLine, show_line_numbers: bool) -> str:
    if show_line_numbers:
        return f"{emitted.line.index}:{emitted.line.content}"
    return emitted.line.content


def render(
    emitted: Sequence[EmittedLine],
    show_line_numbers: bool,
    *,
    separator: Optional[str] = None,
) -> List[str]:
    """
    Turn assembled lines into output text lines. When `separator` is given it
    is placed between merged runs that are not adjacent in the file.
    """
    if separator is None:
        return [format_line(e, show_line_numbers) for e in emitted]
    out: List[str] = []
    for n, group in enumerate(group_runs(emitted)):
        if n:
            out.append(separator)
        out.extend(format_line(e, show_line_numbers) for e in group)
    return out


def to_json(emitted: Sequence[EmittedLine]) -> str:
    return json.dumps(
        [{"line": e.line.index, "text": e.line.content, "match": e.is_match} for e in emitted],
        indent=2,
    )
