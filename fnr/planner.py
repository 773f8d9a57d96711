"""Composing final file content from decided edits."""

from typing import Iterable, Optional

from .errors import ConflictError
from .models import Edit, FileChangeSet


def splice(original: str, edits: Iterable[Edit], start: int = 0, end: Optional[int] = None) -> str:
    """Rebuild ``original[start:end]`` with every given edit substituted.

    Offsets always refer to ``original``; nothing is ever looked up in the
    output, so replacements of any length compose correctly.
    """
    if end is None:
        end = len(original)

    pieces = []
    cursor = start
    for edit in edits:
        match = edit.match
        if match.start < cursor or match.end < match.start:
            raise ConflictError(
                f"{match.path}: edit at {match.start}-{match.end} overlaps or precedes offset {cursor}"
            )
        if match.end > end:
            raise ConflictError(f"{match.path}: edit at {match.start}-{match.end} runs past offset {end}")
        pieces.append(original[cursor : match.start])
        pieces.append(edit.replacement)
        cursor = match.end
    pieces.append(original[cursor:end])
    return "".join(pieces)


def plan(change_set: FileChangeSet) -> str:
    """Final content for a file: accepted edits applied, everything else verbatim."""
    return splice(change_set.original, change_set.accepted_edits)
