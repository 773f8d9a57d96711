"""Interactive staging of replacements, one match at a time."""

import logging
from enum import Enum, auto
from typing import Callable, Dict, Optional

from .models import Decision, Edit, FileChangeSet
from .printer import MatchPrinter, build_hunks

logger = logging.getLogger(__name__)

PROMPT = "Stage this replacement [y,n,q,a,e,d,?] ? "

HELP_TEXT = """\
y - replace this match
n - do not replace this match
q - quit; do not replace this match or any remaining ones
a - replace this match and all remaining ones in this file
d - do not replace this match nor any remaining ones in this file
e - edit this replacement
? - show help"""


class SessionState(Enum):
    """Where the review session stands for the current match."""

    PROMPTING = auto()
    AUTO_ACCEPT_FILE = auto()
    SKIP_FILE = auto()
    QUIT = auto()


class ReviewSession:
    """Decides edits file by file using a scripted or live UI.

    Policy set by ``a`` and ``d`` lasts until the end of the current file;
    ``q`` (or running out of input) ends the whole session. All state
    lives on the instance, so separate sessions never influence each other.
    """

    def __init__(self, ui, printer: Optional[MatchPrinter] = None):
        self.ui = ui
        self.printer = printer or MatchPrinter()
        self.state = SessionState.PROMPTING

        self.transitions: Dict[SessionState, Callable[[FileChangeSet, Edit], SessionState]] = {
            SessionState.PROMPTING: self._handle_prompting_state,
            SessionState.AUTO_ACCEPT_FILE: self._handle_auto_accept_state,
            SessionState.SKIP_FILE: self._handle_skip_state,
            SessionState.QUIT: self._handle_skip_state,
        }
        self.commands: Dict[str, Callable[[FileChangeSet, Edit], Optional[SessionState]]] = {
            "y": self._handle_yes,
            "n": self._handle_no,
            "a": self._handle_accept_rest,
            "q": self._handle_quit,
            "e": self._handle_edit,
            "d": self._handle_skip_rest,
            "?": self._handle_help,
        }

    @property
    def terminated(self) -> bool:
        return self.state is SessionState.QUIT

    def review(self, change_set: FileChangeSet) -> None:
        """Run the session over every pending edit of one file."""
        if self.terminated:
            change_set.reject_pending()
            return

        self.state = SessionState.PROMPTING
        if change_set.edits:
            hunks = build_hunks(change_set, change_set.edits)
            self.ui.display_lines(self.printer.header(change_set.path, sum(hunk.num_lines for hunk in hunks)))

        for edit in change_set.edits:
            if edit.decision is not Decision.PENDING:
                continue
            handler = self.transitions[self.state]
            self.state = handler(change_set, edit)

        change_set.reject_pending()

    def _handle_prompting_state(self, change_set: FileChangeSet, edit: Edit) -> SessionState:
        self.ui.display_lines(self.printer.edit_report(change_set, edit))
        while True:
            raw = self.ui.read_command(PROMPT)
            if raw is None:
                return self._handle_quit(change_set, edit)

            command = raw.strip().lower()
            handler = self.commands.get(command)
            if handler is None:
                self.ui.display_message(f"Unknown command '{raw.strip()}', enter ? for help", style="red")
                continue

            next_state = handler(change_set, edit)
            if next_state is not None:
                return next_state

    def _handle_auto_accept_state(self, change_set: FileChangeSet, edit: Edit) -> SessionState:
        edit.decision = Decision.ACCEPTED
        return SessionState.AUTO_ACCEPT_FILE

    def _handle_skip_state(self, change_set: FileChangeSet, edit: Edit) -> SessionState:
        edit.decision = Decision.REJECTED
        return self.state

    def _handle_yes(self, change_set: FileChangeSet, edit: Edit) -> SessionState:
        edit.decision = Decision.ACCEPTED
        return SessionState.PROMPTING

    def _handle_no(self, change_set: FileChangeSet, edit: Edit) -> SessionState:
        edit.decision = Decision.REJECTED
        return SessionState.PROMPTING

    def _handle_accept_rest(self, change_set: FileChangeSet, edit: Edit) -> SessionState:
        edit.decision = Decision.ACCEPTED
        return SessionState.AUTO_ACCEPT_FILE

    def _handle_skip_rest(self, change_set: FileChangeSet, edit: Edit) -> SessionState:
        edit.decision = Decision.REJECTED
        return SessionState.SKIP_FILE

    def _handle_quit(self, change_set: FileChangeSet, edit: Edit) -> SessionState:
        edit.decision = Decision.REJECTED
        self.ui.display_message("exiting!", style="yellow")
        logger.debug("review quit at %s:%d", change_set.path, edit.match.line_start)
        return SessionState.QUIT

    def _handle_edit(self, change_set: FileChangeSet, edit: Edit) -> SessionState:
        replacement = self.ui.read_replacement(edit.replacement)
        if replacement is None:
            self.ui.display_message("... skipped ...", style="dim")
            edit.decision = Decision.REJECTED
            return SessionState.PROMPTING

        edit.replacement = replacement
        edit.decision = Decision.ACCEPTED
        self.ui.display_lines(self.printer.edit_report(change_set, edit))
        self.ui.display_message("--")
        return SessionState.PROMPTING

    def _handle_help(self, change_set: FileChangeSet, edit: Edit) -> None:
        self.ui.display_message(HELP_TEXT, style="red")
        return None
