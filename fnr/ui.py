import sys
from typing import Iterable, Optional

from prompt_toolkit import PromptSession
from rich.console import Console
from rich.text import Text

COLOR_CHOICES = ("auto", "always", "never")


def build_console(color: str = "auto", stderr: bool = False) -> Console:
    """Console honoring ``--color``; file content is never read as markup."""
    if color == "always":
        return Console(force_terminal=True, highlight=False, stderr=stderr)
    if color == "never":
        return Console(no_color=True, color_system=None, highlight=False, stderr=stderr)
    return Console(highlight=False, stderr=stderr)


class ReviewUI:
    """Terminal side of a review: printing hunks and reading commands."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or build_console()
        self._session = None

    def display_message(self, content, style: Optional[str] = None, end: str = "\n") -> None:
        self.console.print(content, style=style, end=end, markup=False)

    def display_lines(self, lines: Iterable[Text]) -> None:
        for line in lines:
            self.console.print(line)

    def read_command(self, prompt: str) -> Optional[str]:
        """Read one command line; ``None`` once input is exhausted."""
        try:
            return self.console.input(Text(prompt))
        except (EOFError, KeyboardInterrupt):
            return None

    def read_replacement(self, default: str) -> Optional[str]:
        """Let the user rewrite a replacement; ``None`` means skip it."""
        try:
            if not sys.stdin.isatty():
                return self.console.input(Text("Replace with [^D to skip] "))
            return self._prompt_session().prompt("Replace with [^D to skip] ", default=default)
        except (EOFError, KeyboardInterrupt):
            return None

    def _prompt_session(self) -> PromptSession:
        if self._session is None:
            self._session = PromptSession()
        return self._session
