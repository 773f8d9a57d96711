import sys
from typing import List, Optional

from rich.console import Console

from .bootstrap import build_arg_parser, build_options, maybe_save_config, merge_runtime_config
from .config import ConfigManager
from .errors import ConfigError, PatternCompileError, TemplateError, UsageError
from .logging_config import setup_logging
from .printer import Summary
from .runner import FindAndReplacer
from .ui import ReviewUI, build_console

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def exit_status(summary: Summary) -> int:
    if summary.has_failures or summary.made_no_progress:
        return EXIT_FAILURE
    return EXIT_OK


def main(argv: Optional[List[str]] = None, config_manager: Optional[ConfigManager] = None) -> int:
    """Main entry point."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    errors = Console(stderr=True, highlight=False)

    try:
        config_manager = config_manager or ConfigManager()
        config, config_dict = merge_runtime_config(args, config_manager)
        maybe_save_config(args, config_dict, config_manager)
        setup_logging(config.debug)
        options = build_options(args, config)
    except UsageError as exc:
        errors.print(f"fnr: error: {exc}", style="red", markup=False)
        return EXIT_USAGE
    except ConfigError as exc:
        errors.print(f"fnr: {exc}", style="red", markup=False)
        return EXIT_FAILURE

    console = build_console(config.color)
    ui = ReviewUI(console) if options.prompt else None

    try:
        replacer = FindAndReplacer(options, console=console, ui=ui)
        summary = replacer.run()
    except (PatternCompileError, TemplateError) as exc:
        errors.print(f"fnr: {exc}", style="red", markup=False)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        errors.print("\nInterrupted.", style="yellow")
        return EXIT_INTERRUPTED

    return exit_status(summary)
