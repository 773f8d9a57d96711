from .errors import (
    ConflictError,
    FileReadError,
    FileWriteError,
    FnrError,
    PatternCompileError,
    TemplateError,
)
from .models import Decision, Edit, FileChangeSet, Match
from .pattern import Pattern, ReplacementTemplate, compile_pattern, compile_template, find_matches, render
from .planner import plan
from .review import ReviewSession, SessionState
from .runner import FindAndReplacer, ReplaceOptions
from .writer import commit

__all__ = [
    "ConflictError",
    "Decision",
    "Edit",
    "FileChangeSet",
    "FileReadError",
    "FileWriteError",
    "FindAndReplacer",
    "FnrError",
    "Match",
    "Pattern",
    "PatternCompileError",
    "ReplaceOptions",
    "ReplacementTemplate",
    "ReviewSession",
    "SessionState",
    "TemplateError",
    "commit",
    "compile_pattern",
    "compile_template",
    "find_matches",
    "plan",
    "render",
]
