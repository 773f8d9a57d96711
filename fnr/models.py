from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Tuple

Span = Optional[Tuple[int, int]]


class Decision(Enum):
    """Review outcome for one edit."""

    PENDING = auto()
    ACCEPTED = auto()
    REJECTED = auto()


@dataclass(frozen=True)
class Match:
    """One located occurrence of the pattern.

    Offsets index the decoded file text. ``groups[0]`` is the whole match;
    a group that did not participate has a ``None`` span.
    """

    path: str
    start: int
    end: int
    line_start: int
    line_end: int
    groups: Tuple[Span, ...] = ()

    def group_text(self, content: str, index: int) -> str:
        span = self.groups[index] if index < len(self.groups) else None
        if span is None:
            return ""
        return content[span[0] : span[1]]


@dataclass
class Edit:
    """A match with its computed replacement and review decision."""

    match: Match
    replacement: str
    decision: Decision = Decision.PENDING

    @property
    def accepted(self) -> bool:
        return self.decision is Decision.ACCEPTED

    @property
    def delta(self) -> int:
        return len(self.replacement) - (self.match.end - self.match.start)


@dataclass(frozen=True)
class Fingerprint:
    """On-disk identity of a file captured at scan time."""

    size: int
    mtime_ns: int
    digest: str


@dataclass
class FileChangeSet:
    """All edits planned for one file plus the content they were found in."""

    path: str
    original: str
    fingerprint: Fingerprint
    edits: List[Edit] = field(default_factory=list)

    @property
    def accepted_edits(self) -> List[Edit]:
        return [edit for edit in self.edits if edit.accepted]

    def accept_all(self) -> None:
        for edit in self.edits:
            edit.decision = Decision.ACCEPTED

    def reject_pending(self) -> None:
        for edit in self.edits:
            if edit.decision is Decision.PENDING:
                edit.decision = Decision.REJECTED


class WriteStatus(Enum):
    """What the writer did with a file."""

    UNCHANGED = "unchanged"
    DRY_RUN = "dry run"
    WRITTEN = "written"
    FAILED = "write failed"


@dataclass
class WriteResult:
    path: str
    status: WriteStatus
    replaced: int = 0
    error: str = ""


@dataclass
class FileResult:
    """Everything the reporter needs to know about one candidate path."""

    path: str
    change_set: Optional[FileChangeSet] = None
    write: Optional[WriteResult] = None
    skipped: str = ""
    report: list = field(default_factory=list)
    matches: int = 0
    accepted: int = 0

    @property
    def num_matches(self) -> int:
        return len(self.change_set.edits) if self.change_set else self.matches

    @property
    def num_accepted(self) -> int:
        return len(self.change_set.accepted_edits) if self.change_set else self.accepted

    def release(self) -> None:
        """Keep the counts, drop the file content and its edits."""
        if self.change_set is None:
            return
        self.matches = self.num_matches
        self.accepted = self.num_accepted
        self.change_set = None
