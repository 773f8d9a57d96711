"""Rendering of match hunks, per-file skips and run totals."""

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterable, List, Optional, Tuple

from rich.text import Text

from .models import Edit, FileChangeSet, FileResult, WriteStatus
from .pattern import LineIndex
from .planner import splice

REMOVED_STYLE = "red"
ADDED_STYLE = "green"
HEADER_STYLE = "underline"


class PrintMode(Enum):
    SILENT = auto()
    COMPACT = auto()
    FULL = auto()


@dataclass
class Hunk:
    """Original lines ``first..last`` and what they become."""

    first_line: int
    last_line: int
    before: List[str]
    after: List[str]

    @property
    def num_lines(self) -> int:
        return self.last_line - self.first_line + 1


def _split_lines(text: str) -> List[str]:
    if not text:
        return []
    parts = text.split("\n")
    if text.endswith("\n"):
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


def build_hunks(change_set: FileChangeSet, edits: Iterable[Edit], lines: Optional[LineIndex] = None) -> List[Hunk]:
    """Group edits that share lines and render each group once.

    A group whose rewritten lines no longer end in a newline swallows the
    following line, since that line is joined onto it in the output.
    """
    original = change_set.original
    lines = lines or LineIndex(original)
    edits = list(edits)
    hunks = []
    index = 0

    while index < len(edits):
        first = edits[index].match.line_start
        last = edits[index].match.line_end
        members = [edits[index]]
        index += 1
        while True:
            while index < len(edits) and edits[index].match.line_start <= last:
                last = max(last, edits[index].match.line_end)
                members.append(edits[index])
                index += 1
            region_start = lines.line_start(first)
            region_end = lines.line_end(last)
            after_text = splice(original, members, region_start, region_end)
            if after_text and not after_text.endswith("\n") and region_end < len(original):
                last = lines.line_of(region_end)
                continue
            break
        hunks.append(
            Hunk(
                first_line=first,
                last_line=last,
                before=[lines.line_text(number) for number in range(first, last + 1)],
                after=_split_lines(after_text),
            )
        )
    return hunks


class MatchPrinter:
    """Builds the report for one file as a list of styled lines.

    Rendering is side-effect free so workers can prepare output while the
    main thread prints it in candidate order.
    """

    def __init__(self, mode: PrintMode = PrintMode.FULL, before: int = 0, after: int = 0):
        self.mode = mode
        self.before = before
        self.after = after

    def header(self, path: str, num_lines: int) -> List[Text]:
        if self.mode is not PrintMode.FULL:
            return []
        return [Text.assemble((path, HEADER_STYLE), f": {num_lines} matching lines")]

    def file_report(self, change_set: FileChangeSet, edits: Optional[List[Edit]] = None) -> List[Text]:
        """Header plus every hunk for ``edits`` (all edits by default)."""
        if self.mode is PrintMode.SILENT:
            return []
        edits = change_set.edits if edits is None else edits
        if not edits:
            return []

        lines = LineIndex(change_set.original)
        hunks = build_hunks(change_set, edits, lines)
        output = self.header(change_set.path, sum(hunk.num_lines for hunk in hunks))
        last_printed = None
        for index, hunk in enumerate(hunks):
            next_first = hunks[index + 1].first_line if index + 1 < len(hunks) else None
            rendered, last_printed = self._hunk(change_set.path, hunk, lines, last_printed, next_first)
            output.extend(rendered)
        return output

    def edit_report(self, change_set: FileChangeSet, edit: Edit) -> List[Text]:
        """The hunk for a single match, as shown before a prompt."""
        if self.mode is PrintMode.SILENT:
            return []
        lines = LineIndex(change_set.original)
        hunk = build_hunks(change_set, [edit], lines)[0]
        return self._hunk(change_set.path, hunk, lines, None, None)[0]

    def _hunk(
        self,
        path: str,
        hunk: Hunk,
        lines: LineIndex,
        last_printed: Optional[int],
        next_first: Optional[int],
    ) -> Tuple[List[Text], int]:
        output = []
        context_start = max(1, hunk.first_line - self.before)
        if last_printed is not None:
            if context_start > last_printed + 1 and self.mode is PrintMode.FULL:
                output.append(Text("  ---"))
            context_start = max(context_start, last_printed + 1)

        for number in range(context_start, hunk.first_line):
            output.append(self._context(path, number, lines.line_text(number)))

        for offset, line in enumerate(hunk.before):
            output.append(self._changed(path, hunk.first_line + offset, line, "-", REMOVED_STYLE))
        for offset, line in enumerate(hunk.after):
            output.append(self._changed(path, hunk.first_line + offset, line, "+", ADDED_STYLE))

        context_end = min(hunk.last_line + self.after, lines.line_count)
        if next_first is not None:
            context_end = min(context_end, next_first - 1)
        for number in range(hunk.last_line + 1, context_end + 1):
            output.append(self._context(path, number, lines.line_text(number)))
        return output, max(context_end, hunk.last_line)

    def _changed(self, path: str, number: int, line: str, marker: str, style: str) -> Text:
        if self.mode is PrintMode.COMPACT:
            return Text(f"{path}:{number}{marker}{line}", style=style)
        return Text(f"{marker}{number}: {line}", style=style)

    def _context(self, path: str, number: int, line: str) -> Text:
        if self.mode is PrintMode.COMPACT:
            return Text(f"{path}:{number}:{line}")
        return Text(f" {number}: {line}")


class Statistics:
    """Run counters shared by scan workers."""

    def __init__(self):
        self._lock = threading.Lock()
        self.wall_time = 0.0
        self.search_time = 0.0
        self.files_total = 0
        self.files_searched = 0
        self.files_ignored = 0
        self.files_with_matches = 0
        self.files_with_replacements = 0
        self.num_matches = 0
        self.num_replacements = 0

    def visit_file(self, searched: bool) -> None:
        with self._lock:
            self.files_total += 1
            if searched:
                self.files_searched += 1
            else:
                self.files_ignored += 1

    def add_matches(self, count: int) -> None:
        if count <= 0:
            return
        with self._lock:
            self.files_with_matches += 1
            self.num_matches += count

    def add_replacements(self, count: int) -> None:
        if count <= 0:
            return
        with self._lock:
            self.files_with_replacements += 1
            self.num_replacements += count

    def add_wall_time(self, seconds: float) -> None:
        with self._lock:
            self.wall_time += seconds

    @contextmanager
    def search_timer(self):
        started_at = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - started_at
            with self._lock:
                self.search_time += elapsed

    def __str__(self) -> str:
        return "\n".join(
            [
                f"wall time               {self.wall_time:.6f} s",
                f"search time             {self.search_time:.6f} s",
                f"num matches             {self.num_matches}",
                f"num replacements        {self.num_replacements}",
                f"total files             {self.files_total}",
                f"  ... ignored           {self.files_ignored}",
                f"  ... searched          {self.files_searched}",
                f"  ... with matches      {self.files_with_matches}",
                f"  ... with replacements {self.files_with_replacements}",
            ]
        )


@dataclass
class Summary:
    """Countable totals for a finished run."""

    files_scanned: int = 0
    files_with_matches: int = 0
    files_changed: int = 0
    matches_found: int = 0
    matches_accepted: int = 0
    matches_replaced: int = 0
    skipped: List[Tuple[str, str]] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)

    @property
    def made_no_progress(self) -> bool:
        """Nothing could be scanned because every candidate was unreadable."""
        return self.files_scanned == 0 and any(reason.startswith("unreadable") for _, reason in self.skipped)


def summarize(results: Iterable[FileResult]) -> Summary:
    summary = Summary()
    for result in results:
        if result.skipped:
            summary.skipped.append((result.path, result.skipped))
            continue
        summary.files_scanned += 1
        if result.num_matches:
            summary.files_with_matches += 1
        summary.matches_found += result.num_matches
        summary.matches_accepted += result.num_accepted
        if result.write is None:
            continue
        if result.write.status is WriteStatus.WRITTEN:
            summary.files_changed += 1
            summary.matches_replaced += result.write.replaced
        elif result.write.status is WriteStatus.FAILED:
            summary.failed.append((result.path, result.write.error))
    return summary


def render_footer(summary: Summary, writes_enabled: bool) -> List[Text]:
    output = []
    for path, reason in summary.skipped:
        output.append(Text(f"{path}: skipped: {reason}", style="yellow"))
    for path, error in summary.failed:
        output.append(Text(f"{path}: write failed ({error})", style="bold red"))
    output.append(Text(f"All done. Replaced {summary.matches_replaced} of {summary.matches_found} matches"))
    if not writes_enabled:
        output.append(Text("Use -W, --write to modify files in place.", style="dim"))
    return output
