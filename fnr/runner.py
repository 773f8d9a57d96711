"""The find-and-replace pipeline: scan, review, plan, commit, report."""

import itertools
import logging
import os
import time
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from rich.console import Console

from .errors import FileReadError
from .models import FileResult, WriteStatus
from .paths import PathMatcher, walk_paths
from .pattern import compile_pattern, compile_template
from .planner import plan
from .printer import MatchPrinter, PrintMode, Statistics, Summary, render_footer, summarize
from .review import ReviewSession
from .search import scan_file
from .ui import ReviewUI, build_console
from .writer import commit

logger = logging.getLogger(__name__)

MAX_THREADS = 12
SCAN_AHEAD = 2


@dataclass
class ReplaceOptions:
    """Everything a run needs, already merged from flags and config."""

    find: str
    replace: str
    paths: List[str] = field(default_factory=lambda: ["."])
    literal: bool = False
    case_sensitive: bool = True
    word: bool = False
    write: bool = False
    prompt: bool = False
    print_mode: PrintMode = PrintMode.FULL
    before: int = 0
    after: int = 0
    hidden: bool = False
    all_files: bool = False
    include: Optional[List[str]] = None
    exclude: List[str] = field(default_factory=list)
    threads: int = 0
    print_stats: bool = False

    @property
    def writes_enabled(self) -> bool:
        return self.write or self.prompt

    @property
    def worker_count(self) -> int:
        if self.threads > 0:
            return self.threads
        return min(MAX_THREADS, os.cpu_count() or 1)


class FindAndReplacer:
    """Runs one invocation over the candidate files.

    Construction compiles FIND and REPLACE, so pattern and template errors
    surface before any file is opened.
    """

    def __init__(
        self,
        options: ReplaceOptions,
        console: Optional[Console] = None,
        ui: Optional[ReviewUI] = None,
    ):
        self.options = options
        self.pattern = compile_pattern(
            options.find,
            literal=options.literal,
            case_sensitive=options.case_sensitive,
            word=options.word,
        )
        self.template = compile_template(options.replace, self.pattern)
        self.path_matcher = PathMatcher(options.include, options.exclude)
        self.printer = MatchPrinter(options.print_mode, options.before, options.after)
        self.console = console or build_console()
        self.ui = ui
        self.stats = Statistics()
        self.results: List[FileResult] = []

    def candidates(self) -> Iterator[str]:
        for path in walk_paths(self.options.paths, hidden=self.options.hidden, all_files=self.options.all_files):
            if not self.path_matcher.path_matches(path):
                self.stats.visit_file(False)
                continue
            yield path

    def run(self) -> Summary:
        started_at = time.perf_counter()
        if self.options.prompt:
            self.run_with_prompt()
        else:
            self.run_parallel()
        self.stats.add_wall_time(time.perf_counter() - started_at)

        summary = summarize(self.results)
        if self.options.print_mode is not PrintMode.SILENT:
            for line in render_footer(summary, self.options.writes_enabled):
                self.console.print(line)
        if self.options.print_stats:
            self.console.print(str(self.stats), markup=False)
        return summary

    def run_parallel(self) -> None:
        """Scan, plan and commit every file on the worker pool.

        Reports are printed by the calling thread in candidate order.
        """
        with ThreadPoolExecutor(max_workers=self.options.worker_count) as executor:
            for result in executor.map(self._process, self.candidates()):
                self.results.append(result)
                for line in result.report:
                    self.console.print(line)
                result.report = []

    def run_with_prompt(self) -> None:
        """Scan ahead on the pool while prompting for files strictly in order.

        At most ``SCAN_AHEAD`` scans per worker are queued, so only a
        bounded number of files is held in memory while the user answers.
        """
        ui = self.ui or ReviewUI(self.console)
        session = ReviewSession(ui, self.printer)
        candidates = self.candidates()
        executor = ThreadPoolExecutor(max_workers=self.options.worker_count)
        try:
            pending = deque(
                executor.submit(self._scan, path)
                for path in itertools.islice(candidates, self.options.worker_count * SCAN_AHEAD)
            )
            while pending and not session.terminated:
                result = pending.popleft().result()
                next_path = next(candidates, None)
                if next_path is not None:
                    pending.append(executor.submit(self._scan, next_path))
                self.results.append(result)
                if result.change_set is None:
                    continue
                session.review(result.change_set)
                self._finish(result)
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

    def _scan(self, path: str) -> FileResult:
        self.stats.visit_file(True)
        with self.stats.search_timer():
            try:
                change_set = scan_file(path, self.pattern, self.template)
            except FileReadError as exc:
                logger.warning("%s: skipped: %s", path, exc.reason)
                return FileResult(path=path, skipped=exc.reason)
        self.stats.add_matches(len(change_set.edits))
        result = FileResult(path=path, change_set=change_set)
        if not change_set.edits:
            result.release()
        return result

    def _process(self, path: str) -> FileResult:
        result = self._scan(path)
        if result.change_set is None:
            return result
        result.change_set.accept_all()
        result.report = self.printer.file_report(result.change_set)
        return self._finish(result)

    def _finish(self, result: FileResult) -> FileResult:
        """Plan and commit, then release the change set."""
        final_content = plan(result.change_set)
        result.write = commit(result.change_set, final_content, dry_run=not self.options.writes_enabled)
        if result.write.status is WriteStatus.WRITTEN:
            self.stats.add_replacements(result.write.replaced)
        result.release()
        return result
