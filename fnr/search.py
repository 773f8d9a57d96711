import logging
import os

from .errors import FileReadError
from .models import Edit, FileChangeSet
from .pattern import Pattern, ReplacementTemplate, find_matches, render
from .writer import fingerprint_of

logger = logging.getLogger(__name__)

BINARY_MARKER = b"\x00"


def decode_text(path: str, data: bytes) -> str:
    """Decode file bytes as UTF-8, refusing anything that looks binary."""
    if BINARY_MARKER in data:
        raise FileReadError(path, "binary")
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FileReadError(path, "binary") from exc


def read_text(path: str):
    """Read ``path`` and return ``(text, fingerprint)``."""
    try:
        with open(path, "rb") as file_obj:
            stat = os.fstat(file_obj.fileno())
            data = file_obj.read()
    except OSError as exc:
        raise FileReadError(path, f"unreadable ({exc.strerror or exc})") from exc
    return decode_text(path, data), fingerprint_of(data, stat)


def scan_file(path: str, pattern: Pattern, template: ReplacementTemplate) -> FileChangeSet:
    """Find every match in one file and compute its replacement.

    All edits start out pending; the caller decides them.
    """
    text, fingerprint = read_text(path)
    change_set = FileChangeSet(path=path, original=text, fingerprint=fingerprint)
    for match in find_matches(pattern, text, path):
        change_set.edits.append(Edit(match=match, replacement=render(template, match, text)))
    logger.debug("%s: %d match(es)", path, len(change_set.edits))
    return change_set
