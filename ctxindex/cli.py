"""CLI entrypoints for ctxindex commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from .config import load_config
from .errors import ConfigError
from .extractors import SignatureExtractor
from .logging import ExecutionLog, configure_logging
from .markdown import parse_markdown
from .models import PHASES
from .pipeline import ContextIndexPipeline
from .retriever import declared_kind


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ctxindex",
        description="Build a condensed API and documentation index for a hosted repository.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to .ctxindex.yml or the directory containing it (defaults to current directory).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Resolve, retrieve and extract signatures for a repository.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    analyze_parser.add_argument("repo", help="Repository URL or owner/name.")
    analyze_parser.add_argument(
        "--phase",
        choices=PHASES,
        default="all",
        help="Which candidate files to retrieve.",
    )
    analyze_parser.add_argument(
        "--max-files",
        type=int,
        default=None,
        help="Upper bound on files fetched (defaults to the configured budget).",
    )
    analyze_parser.add_argument(
        "--crawl",
        action="store_true",
        help="Also crawl the highest priority documentation website.",
    )
    analyze_parser.add_argument(
        "--no-registry",
        action="store_true",
        help="Skip querying the package registry.",
    )

    extract_parser = subparsers.add_parser(
        "extract",
        help="Extract API signatures from a local file.",
    )
    _add_verbose_option(extract_parser, suppress_default=True)
    extract_parser.add_argument("path", type=Path, help="File to scan.")
    extract_parser.add_argument(
        "--kind",
        default=None,
        help="Content kind (md, d.ts, js, py, manifest, ...); inferred from the file name by default.",
    )

    parse_parser = subparsers.add_parser(
        "parse",
        help="Split a markdown file into sections, code blocks and links.",
    )
    _add_verbose_option(parse_parser, suppress_default=True)
    parse_parser.add_argument("path", type=Path, help="Markdown file, or - for stdin.")

    crawl_parser = subparsers.add_parser(
        "crawl",
        help="Crawl a documentation website for API entries.",
    )
    _add_verbose_option(crawl_parser, suppress_default=True)
    crawl_parser.add_argument("url", help="Start URL.")
    crawl_parser.add_argument("--max-pages", type=int, default=None, help="Page budget.")
    crawl_parser.add_argument("--language", default=None, help="Programming language hint.")

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for ctxindex commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")
    configure_logging(verbose=bool(args.verbose))
    log = ExecutionLog(config.log_file)

    if args.command == "analyze":
        pipeline = ContextIndexPipeline(config, log=log)
        try:
            report = pipeline.run(
                args.repo,
                args.phase,
                args.max_files,
                crawl=bool(args.crawl),
                query_registry=not args.no_registry,
            )
        except ValueError as exc:
            parser.exit(1, f"{exc}\n")
        _emit(report.to_dict())
        if not report.success:
            parser.exit(1)
    elif args.command == "extract":
        content = _read_input(parser, args.path)
        kind = args.kind or declared_kind(args.path.name)
        result = SignatureExtractor(log).extract(content, kind)
        _emit(result.to_dict())
        if not result.success:
            parser.exit(1)
    elif args.command == "parse":
        content = _read_input(parser, args.path)
        _emit(parse_markdown(content, log=log).to_dict())
    elif args.command == "crawl":
        pipeline = ContextIndexPipeline(config, log=log)
        max_pages = args.max_pages or config.crawler.max_pages
        result = pipeline.crawler.crawl(args.url, max_pages=max_pages, language=args.language)
        _emit(result.to_dict())
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _read_input(parser: argparse.ArgumentParser, path: Path) -> str:
    if str(path) == "-":
        return sys.stdin.read()
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        parser.exit(1, f"Cannot read {path}: {exc}\n")


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main(sys.argv[1:])
