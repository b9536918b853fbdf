# src/treesearch/cli.py
import sys
import argparse
import logging
import threading
from pathlib import Path

from treesearch import config
from treesearch.core.ignore import load_exclude_rules
from treesearch.core.search import SearchOrchestrator
from treesearch.errors import ConfigError
from treesearch.models import SearchConfig
from treesearch.printer import ConsolePrinter, Palette


def create_arg_parser():
    parser = argparse.ArgumentParser(
        prog="treesearch",
        description="Search file contents, or file and directory names, for a regular expression.",
    )
    parser.add_argument("pattern", type=str, help="Regular expression to search for")
    parser.add_argument("paths", type=str, nargs="*", default=list(config.DEFAULT_PATHS), help="Files or directories to search (default: .)")

    parser.add_argument("-r", "--recursive", action="store_true", help=config.HELP_RECURSIVE)
    parser.add_argument("-f", "--filter", type=str, default=config.DEFAULT_FILTER, metavar="REGEX", help=config.HELP_FILTER)
    parser.add_argument("-n", "--names", action="store_true", help=config.HELP_FILENAMES_ONLY)
    parser.add_argument("-i", "--ignore-case", action="store_true", help=config.HELP_IGNORE_CASE)
    parser.add_argument("-q", "--quiet", action="store_true", help=config.HELP_QUIET)
    parser.add_argument("-v", "--verbose", action="store_true", help=config.HELP_VERBOSE)
    parser.add_argument("--noskip", action="store_true", help=config.HELP_NO_SKIP)
    parser.add_argument("--nocolor", action="store_true", help=config.HELP_NO_COLOR)
    parser.add_argument("-a", "--absolute", action="store_true", help=config.HELP_ABSOLUTE)
    parser.add_argument("-x", "--exclude", action="append", default=[], metavar="GLOB", help=config.HELP_EXCLUDE)
    parser.add_argument("--exclude-from", type=str, default=None, metavar="FILE", help=config.HELP_EXCLUDE_FROM)
    parser.add_argument("--no-prefetch", action="store_true", help=config.HELP_NO_PREFETCH)
    parser.add_argument("--debug", action="store_true", help=config.HELP_DEBUG)
    return parser


def build_config(args) -> SearchConfig:
    """Turns parsed arguments into the immutable search snapshot."""
    return SearchConfig(
        pattern=args.pattern,
        paths=tuple(args.paths) or config.DEFAULT_PATHS,
        filter_pattern=args.filter or None,
        recursive=args.recursive,
        ignore_case=args.ignore_case,
        filenames_only=args.names,
        quiet=args.quiet,
        verbose=args.verbose,
        skip_binary=not args.noskip,
        absolute_paths=args.absolute,
        color=not args.nocolor,
        exclude=tuple(args.exclude),
        prefetch=not args.no_prefetch,
    )


def setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main():
    parser = create_arg_parser()
    args = parser.parse_args()
    setup_logging(args.debug)

    search_config = build_config(args)
    printer = ConsolePrinter(
        palette=Palette.for_config(search_config.color),
        quiet=search_config.quiet,
        verbose=search_config.verbose,
    )
    cancel_event = threading.Event()

    try:
        exclude_file = Path(args.exclude_from) if args.exclude_from else None
        exclude = load_exclude_rules(search_config.exclude, exclude_file)
        orchestrator = SearchOrchestrator(search_config, printer, cancel_event, exclude=exclude)
        counters = orchestrator.run()

    except ConfigError as e:
        # Always reported, verbose or not
        printer.error(str(e))
        sys.exit(1)

    except KeyboardInterrupt:
        cancel_event.set()
        printer.error(config.MSG_INTERRUPTED)
        sys.exit(1)

    except Exception as e:
        print(f"An unexpected error occurred: {e}", file=sys.stderr)
        sys.exit(1)

    if not search_config.quiet:
        printer.summary(counters)


if __name__ == "__main__":
    main()
