from __future__ import annotations

import argparse
import sys
from pathlib import Path

from minigrep import engine

__version__ = "0.1.0"


def non_negative_int(s: str) -> int:
    try:
        n = int(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid count: {s!r}") from None
    if n < 0:
        raise argparse.ArgumentTypeError(f"count must be >= 0 (got {n})")
    return n


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="minigrep",
        description="Print lines of FILE_PATH that contain QUERY, with optional context.",
    )
    p.add_argument("query", metavar="QUERY", help="Literal text to search for")
    p.add_argument("file_path", metavar="FILE_PATH", help="File to search")
    p.add_argument("-i", "--ignore-case", action="store_true", help="Case-insensitive matching")
    p.add_argument("-l", "--line-number", action="store_true", help="Prefix each output line with its line number")
    p.add_argument("-w", "--word-regexp", action="store_true", help="Only match QUERY as a whole word")
    p.add_argument("-B", "--before-context", type=non_negative_int, default=None, metavar="NUM", help="Lines of context before each match (default: 0)")
    p.add_argument("-A", "--after-context", type=non_negative_int, default=None, metavar="NUM", help="Lines of context after each match (default: 0)")
    p.add_argument("-C", "--context", type=non_negative_int, default=None, metavar="NUM", help="Lines of context before and after; -A/-B take precedence")
    p.add_argument("--json", action="store_true", help="Emit JSON results")
    p.add_argument("-v", "--verbose", action="store_true", help="Describe the search on stderr")
    p.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    return p


def config_from_args(args: argparse.Namespace) -> engine.Config:
    ctx = args.context or 0
    before = args.before_context if args.before_context is not None else ctx
    after = args.after_context if args.after_context is not None else ctx
    return engine.Config(
        query=args.query,
        case_insensitive=args.ignore_case,
        show_line_numbers=args.line_number,
        before=before,
        after=after,
        word=args.word_regexp,
    )


def print_search_info(config: engine.Config, path: Path) -> None:
    sys.stderr.write(f"Searching for '{config.query}' in file '{path}'...\n")
    if config.case_insensitive:
        sys.stderr.write("(Case-insensitive search)\n")
    if config.word:
        sys.stderr.write("(Whole-word matching)\n")
    if config.show_line_numbers:
        sys.stderr.write("(Line numbers enabled)\n")
    if config.before > 0:
        sys.stderr.write(f"(Context before: {config.before} lines)\n")
    if config.after > 0:
        sys.stderr.write(f"(Context after: {config.after} lines)\n")
    sys.stderr.flush()


def cmd_search(args: argparse.Namespace) -> int:
    config = config_from_args(args)
    path = Path(args.file_path)

    if args.verbose:
        print_search_info(config, path)

    try:
        lines = engine.read_lines(path)
    except OSError as e:
        reason = e.strerror or str(e)
        sys.stderr.write(f"minigrep: {path}: {reason}\n")
        return 1

    emitted = engine.assemble(lines, config)

    if args.json:
        print(engine.to_json(emitted))
    else:
        sep = engine.GROUP_SEPARATOR if (config.before or config.after) else None
        for text in engine.render(emitted, config.show_line_numbers, separator=sep):
            print(text)

    if args.verbose:
        n = sum(1 for e in emitted if e.is_match)
        sys.stderr.write(f"{n} matching line(s), {len(emitted)} line(s) printed\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv
    args = build_parser().parse_args(argv[1:])
    return cmd_search(args)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
