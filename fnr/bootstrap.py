import argparse
import sys
from typing import List, Optional, TextIO

from .config import Config, ConfigManager
from .errors import UsageError
from .paths import read_paths
from .pattern import is_smart_case_sensitive
from .printer import PrintMode
from .runner import ReplaceOptions
from .ui import COLOR_CHOICES


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="fnr",
        description="Recursively find and replace. Like sed, but memorable.",
    )
    parser.add_argument("find", metavar="FIND", help="What to search for. Literal string or regular expression.")
    parser.add_argument(
        "replace",
        metavar="REPLACE",
        help="What to replace it with. May reference capture groups as $1, $name or ${1}; $$ is a literal $.",
    )
    parser.add_argument(
        "paths",
        metavar="PATH",
        nargs="*",
        help="Locations to search. Read from standard input when piped, else the current directory.",
    )

    case_group = parser.add_mutually_exclusive_group()
    case_group.add_argument("-i", "--ignore-case", action="store_true", help="Match case insensitively.")
    case_group.add_argument("-s", "--case-sensitive", action="store_true", help="Match case sensitively.")
    case_group.add_argument(
        "-S",
        "--smart-case",
        action="store_true",
        default=None,
        help="Match case sensitively only if FIND has uppercase characters (default).",
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument("-W", "--write", action="store_true", help="Modify files in place.")
    mode_group.add_argument(
        "-p",
        "--prompt",
        action="store_true",
        help="Confirm each modification before making it. Implies --write.",
    )

    parser.add_argument("-q", "--quiet", action="store_true", help="Disable printing matches.")
    parser.add_argument("-c", "--compact", action="store_true", default=None, help="Display compacted output format.")
    parser.add_argument("-Q", "--literal", action="store_true", help="Treat FIND as a string rather than a regular expression.")
    parser.add_argument("-w", "--word", action="store_true", help="Match FIND only at word boundary.")
    parser.add_argument("-a", "--all-files", action="store_true", help="Search ALL files in given paths, ignoring .gitignore.")
    parser.add_argument("-H", "--hidden", action="store_true", default=None, help="Find replacements in hidden files and directories.")
    parser.add_argument("-A", "--after", type=int, metavar="N", help="Print N lines after matches.")
    parser.add_argument("-B", "--before", type=int, metavar="N", help="Print N lines before matches.")
    parser.add_argument("-C", "--context", type=int, metavar="N", help="Print N lines before and after matches.")
    parser.add_argument("-I", "--include", action="append", metavar="PATTERN", help="Include only paths containing PATTERN.")
    parser.add_argument(
        "-E",
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Exclude paths containing PATTERN.",
    )
    parser.add_argument("--color", choices=COLOR_CHOICES, help="Control whether terminal output is in color.")
    parser.add_argument("--threads", type=int, metavar="N", help="Number of scan workers (default: min(12, CPU count)).")
    parser.add_argument("--stats", dest="print_stats", action="store_true", help="Print debug statistics about the run.")
    parser.add_argument("--debug", action="store_true", default=None, help="Enable debug logging.")
    parser.add_argument(
        "--save-config",
        action="store_true",
        help="Save the current settings as default configuration",
    )
    return parser


def merge_runtime_config(args: argparse.Namespace, config_manager: ConfigManager) -> tuple[Config, dict]:
    """Merge CLI args into persisted config and return both config object and dict."""
    config = config_manager.load_config()
    config_dict = config.to_dict()

    for key, value in vars(args).items():
        if value is not None and key in config_dict:
            config_dict[key] = value

    return Config.from_dict(config_dict), config_dict


def maybe_save_config(args: argparse.Namespace, config_dict: dict, config_manager: ConfigManager) -> None:
    """Persist merged config when --save-config is set."""
    if args.save_config:
        config_manager.save_config(**config_dict)
        print("Configuration saved successfully!")


def resolve_case_sensitivity(args: argparse.Namespace, config: Config) -> bool:
    if args.ignore_case:
        return False
    if args.case_sensitive:
        return True
    if config.smart_case:
        return is_smart_case_sensitive(args.find)
    return True


def resolve_search_paths(args: argparse.Namespace, stdin: Optional[TextIO] = None) -> List[str]:
    """Explicit PATHs, else piped standard input, else the current directory."""
    if args.paths:
        return list(args.paths)

    stdin = stdin if stdin is not None else sys.stdin
    if stdin is not None and not stdin.isatty():
        if args.prompt:
            raise UsageError("cannot use --prompt when reading files from stdin")
        return read_paths(stdin)
    return ["."]


def resolve_print_mode(args: argparse.Namespace, config: Config) -> PrintMode:
    if args.quiet:
        if args.prompt:
            raise UsageError("--quiet cannot be combined with --prompt")
        return PrintMode.SILENT
    if config.compact:
        if args.prompt:
            raise UsageError("--compact cannot be combined with --prompt")
        return PrintMode.COMPACT
    return PrintMode.FULL


def build_options(args: argparse.Namespace, config: Config, stdin: Optional[TextIO] = None) -> ReplaceOptions:
    """Turn parsed arguments and merged config into run options."""
    before = args.before if args.before is not None else config.context
    after = args.after if args.after is not None else config.context
    for name, value in (("--before", before), ("--after", after), ("--threads", config.threads)):
        if value < 0:
            raise UsageError(f"{name} must not be negative")

    return ReplaceOptions(
        find=args.find,
        replace=args.replace,
        paths=resolve_search_paths(args, stdin),
        literal=args.literal,
        case_sensitive=resolve_case_sensitivity(args, config),
        word=args.word,
        write=args.write,
        prompt=args.prompt,
        print_mode=resolve_print_mode(args, config),
        before=before,
        after=after,
        hidden=config.hidden,
        all_files=args.all_files,
        include=args.include,
        exclude=args.exclude,
        threads=config.threads,
        print_stats=args.print_stats,
    )
