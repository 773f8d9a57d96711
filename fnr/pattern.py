"""Pattern compilation, match location and replacement templates."""

import bisect
import re
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple, Union

from .errors import PatternCompileError, TemplateError
from .models import Match, Span

_NAME_RE = re.compile(r"[A-Za-z0-9_]+")
_ESCAPE_RE = re.compile(r"\\.", re.DOTALL)


class RegexMatcher:
    """Matching capability backed by the ``re`` module.

    Anything providing ``group_count``, ``group_index`` and ``find_at`` can
    stand in for it; the rest of the pipeline only sees spans.
    """

    def __init__(self, regex: "re.Pattern[str]"):
        self.regex = regex

    @property
    def group_count(self) -> int:
        return self.regex.groups

    @property
    def group_index(self) -> Dict[str, int]:
        return dict(self.regex.groupindex)

    def find_at(self, text: str, pos: int) -> Optional[Tuple[Span, ...]]:
        """Return the spans of the leftmost match starting at or after ``pos``."""
        found = self.regex.search(text, pos)
        if found is None:
            return None
        return tuple(
            None if found.start(index) < 0 else found.span(index)
            for index in range(self.regex.groups + 1)
        )


@dataclass(frozen=True)
class Pattern:
    """A compiled FIND expression. Immutable, safe to share between threads."""

    source: str
    literal: bool
    case_sensitive: bool
    word: bool
    matcher: RegexMatcher

    @property
    def group_count(self) -> int:
        return self.matcher.group_count


def is_smart_case_sensitive(find: str) -> bool:
    """Smart case: sensitive only when FIND has an uppercase letter outside escapes."""
    stripped = _ESCAPE_RE.sub("", find)
    return any(char.isupper() for char in stripped)


def compile_pattern(
    find: str,
    literal: bool = False,
    case_sensitive: bool = True,
    word: bool = False,
) -> Pattern:
    if not find:
        raise PatternCompileError("FIND must not be empty")

    expression = re.escape(find) if literal else find
    if word:
        expression = rf"\b(?:{expression})\b"

    flags = re.MULTILINE
    if not case_sensitive:
        flags |= re.IGNORECASE

    try:
        regex = re.compile(expression, flags)
    except re.error as exc:
        raise PatternCompileError(f"Failed to parse pattern '{find}': {exc}") from exc

    return Pattern(
        source=find,
        literal=literal,
        case_sensitive=case_sensitive,
        word=word,
        matcher=RegexMatcher(regex),
    )


@dataclass(frozen=True)
class ReplacementTemplate:
    """REPLACE split into literal text and resolved group indices."""

    source: str
    parts: Tuple[Union[str, int], ...]

    @property
    def max_group(self) -> int:
        indices = [part for part in self.parts if isinstance(part, int)]
        return max(indices) if indices else 0


def _resolve_reference(ref: str, pattern: Pattern, template: str) -> int:
    if ref.isdigit():
        index = int(ref)
        if index > pattern.group_count:
            raise TemplateError(
                f"Replacement '{template}' references group ${index} "
                f"but the pattern has {pattern.group_count} group(s)"
            )
        return index

    group_index = pattern.matcher.group_index
    if ref in group_index:
        return group_index[ref]

    message = f"Replacement '{template}' references unknown group '{ref}'"
    digits = re.match(r"\d+", ref)
    if digits and int(digits.group()) <= pattern.group_count:
        message += f" (use ${{{digits.group()}}} to follow a group with text)"
    raise TemplateError(message)


def compile_template(template: str, pattern: Pattern) -> ReplacementTemplate:
    """Parse ``$N``, ``$name``, ``${N}``, ``${name}`` and ``$$`` in REPLACE.

    Every reference must resolve against the pattern's groups, so a bad
    template fails before any file is read.
    """
    parts = []
    buffer = []
    i = 0
    length = len(template)

    while i < length:
        char = template[i]
        if char != "$":
            buffer.append(char)
            i += 1
            continue

        if template.startswith("$$", i):
            buffer.append("$")
            i += 2
            continue

        if template.startswith("${", i):
            close = template.find("}", i + 2)
            name = template[i + 2 : close] if close != -1 else ""
            if not _NAME_RE.fullmatch(name):
                buffer.append("$")
                i += 1
                continue
            ref = name
            i = close + 1
        else:
            found = _NAME_RE.match(template, i + 1)
            if not found:
                buffer.append("$")
                i += 1
                continue
            ref = found.group()
            i = found.end()

        if buffer:
            parts.append("".join(buffer))
            buffer = []
        parts.append(_resolve_reference(ref, pattern, template))

    if buffer:
        parts.append("".join(buffer))

    return ReplacementTemplate(source=template, parts=tuple(parts))


def render(template: ReplacementTemplate, match: Match, content: str) -> str:
    """Substitute captures of ``match`` into ``template``."""
    pieces = []
    for part in template.parts:
        if isinstance(part, str):
            pieces.append(part)
            continue
        if part >= len(match.groups):
            raise TemplateError(
                f"Replacement '{template.source}' references group ${part} "
                f"but the match has {len(match.groups) - 1} group(s)"
            )
        pieces.append(match.group_text(content, part))
    return "".join(pieces)


class LineIndex:
    """Maps text offsets to 1-based line numbers."""

    def __init__(self, text: str):
        self.text = text
        self.starts = [0]
        pos = text.find("\n")
        while pos != -1:
            self.starts.append(pos + 1)
            pos = text.find("\n", pos + 1)

    @property
    def line_count(self) -> int:
        if self.text and self.text.endswith("\n"):
            return len(self.starts) - 1
        return len(self.starts)

    def line_of(self, offset: int) -> int:
        """Line holding ``offset``; end of text belongs to the last line."""
        return min(bisect.bisect_right(self.starts, offset), self.line_count)

    def span_of(self, start: int, end: int) -> Tuple[int, int]:
        """Lines touched by ``[start, end)``; an empty span sits on one line."""
        first = self.line_of(start)
        last = self.line_of(end - 1) if end > start else first
        return first, last

    def line_start(self, line: int) -> int:
        return self.starts[line - 1]

    def line_end(self, line: int) -> int:
        """Offset just past the newline ending ``line`` (or end of text)."""
        if line < len(self.starts):
            return self.starts[line]
        return len(self.text)

    def line_text(self, line: int) -> str:
        return strip_eol(self.text[self.line_start(line) : self.line_end(line)])


def strip_eol(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n"):
        return line[:-1]
    return line


def find_matches(pattern: Pattern, text: str, path: str = "") -> Iterator[Match]:
    """Yield non-overlapping matches left to right.

    The search resumes at the end of each match; an empty match advances
    one position so the scan always terminates.
    """
    lines = LineIndex(text)
    pos = 0
    length = len(text)

    while pos <= length:
        spans = pattern.matcher.find_at(text, pos)
        if spans is None:
            return
        start, end = spans[0]
        line_start, line_end = lines.span_of(start, end)
        yield Match(
            path=path,
            start=start,
            end=end,
            line_start=line_start,
            line_end=line_end,
            groups=spans,
        )
        pos = end if end > start else end + 1
