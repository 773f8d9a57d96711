"""Candidate file selection: walking roots, ignore files and path filters."""

import logging
import os
import re
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, TextIO, Tuple

import pathspec

logger = logging.getLogger(__name__)

IGNORE_FILE = ".gitignore"
VCS_DIR = ".git"

IgnoreRules = List[Tuple[str, pathspec.PathSpec]]


class PathMatcher:
    """Include/exclude filtering on the path string.

    Patterns are plain substrings. When an include list is given it alone
    decides; excludes are only consulted without one.
    """

    def __init__(self, include: Optional[Sequence[str]] = None, exclude: Sequence[str] = ()):
        self.included = self._compile(include) if include else None
        self.excluded = self._compile(exclude) if exclude else None

    @staticmethod
    def _compile(patterns: Iterable[str]) -> "re.Pattern[str]":
        return re.compile("|".join(re.escape(pattern) for pattern in patterns))

    def path_matches(self, path: str) -> bool:
        if self.included is not None:
            return self.included.search(path) is not None
        if self.excluded is not None:
            return self.excluded.search(path) is None
        return True


def load_ignore_rules(directory: str) -> Optional[pathspec.PathSpec]:
    ignore_path = os.path.join(directory, IGNORE_FILE)
    if not os.path.isfile(ignore_path):
        return None
    try:
        with open(ignore_path, "r", encoding="utf-8", errors="ignore") as file_obj:
            patterns = [line.rstrip("\n") for line in file_obj]
    except OSError as exc:
        logger.warning("Could not load ignore file %s: %s", ignore_path, exc)
        return None
    valid_patterns = [pattern for pattern in patterns if pattern.strip() and not pattern.startswith("#")]
    if not valid_patterns:
        return None
    return pathspec.PathSpec.from_lines("gitwildmatch", valid_patterns)


def _is_ignored(path: str, is_dir: bool, rules: IgnoreRules) -> bool:
    for base, spec in rules:
        relative = os.path.relpath(path, base).replace(os.sep, "/")
        if is_dir:
            relative += "/"
        if spec.match_file(relative):
            return True
    return False


def _walk_directory(root: str, hidden: bool, use_ignore_files: bool) -> Iterator[str]:
    root = os.path.normpath(root)
    rules_by_dir: Dict[str, IgnoreRules] = {}

    for dirpath, dirnames, filenames in os.walk(root, topdown=True):
        rules = list(rules_by_dir.get(os.path.dirname(dirpath), []))
        if use_ignore_files:
            spec = load_ignore_rules(dirpath)
            if spec is not None:
                rules.append((dirpath, spec))
        rules_by_dir[dirpath] = rules

        kept = []
        for name in sorted(dirnames):
            full_path = os.path.join(dirpath, name)
            if name == VCS_DIR and use_ignore_files:
                continue
            if not hidden and name.startswith("."):
                continue
            if use_ignore_files and _is_ignored(full_path, True, rules):
                continue
            kept.append(name)
        dirnames[:] = kept

        for name in sorted(filenames):
            full_path = os.path.join(dirpath, name)
            if not hidden and name.startswith("."):
                continue
            if use_ignore_files and _is_ignored(full_path, False, rules):
                continue
            yield full_path


def walk_paths(roots: Sequence[str], hidden: bool = False, all_files: bool = False) -> Iterator[str]:
    """Yield candidate files under ``roots`` once each, in a stable order.

    ``all_files`` disables ignore files and shows hidden entries. Roots
    that are not directories are yielded as given so that missing files
    surface as read errors.
    """
    show_hidden = hidden or all_files
    seen = set()

    for root in roots:
        if os.path.isdir(root):
            candidates = _walk_directory(root, show_hidden, not all_files)
        else:
            if not os.path.exists(root):
                logger.warning("%s: no such file or directory", root)
            candidates = iter([root])

        for path in candidates:
            key = os.path.normpath(path)
            if key in seen:
                continue
            seen.add(key)
            yield path


def read_paths(stream: TextIO) -> List[str]:
    """One path per line, as produced by ``find`` or ``fd``."""
    paths = []
    for line in stream:
        path = line.rstrip("\r\n")
        if path:
            paths.append(path)
    return paths
