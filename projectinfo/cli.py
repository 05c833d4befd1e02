"""CLI entrypoints for projectinfo commands."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from .config import ConfigError, ProjectInfoConfig, load_config
from .linecount import NullLineCounter
from .logging import configure_logging
from .models import ProjectDetectionResult
from .orchestrator import Orchestrator
from .stores import cache_path
from .stores.result_cache import dumps_result


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


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the workspace root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="projectinfo",
        description="Detect languages, frameworks and line statistics for a workspace.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also append log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    detect_parser = subparsers.add_parser(
        "detect",
        help="Run detection once and update .vscode/projectdetails.json.",
    )
    _add_verbose_option(detect_parser, suppress_default=True)
    _add_path_argument(detect_parser)
    detect_parser.add_argument(
        "--no-write",
        action="store_true",
        help="Print the result without updating the cache file.",
    )
    detect_parser.add_argument(
        "--no-cloc",
        action="store_true",
        help="Skip the external line counter.",
    )

    watch_parser = subparsers.add_parser(
        "watch",
        help="Detect on startup, then re-detect whenever a manifest changes.",
    )
    _add_verbose_option(watch_parser, suppress_default=True)
    _add_path_argument(watch_parser)

    show_parser = subparsers.add_parser(
        "show",
        help="Summarise the cached project details.",
    )
    _add_verbose_option(show_parser, suppress_default=True)
    _add_path_argument(show_parser)

    path_parser = subparsers.add_parser(
        "path",
        help="Print the location of the cache file.",
    )
    _add_verbose_option(path_parser, suppress_default=True)
    _add_path_argument(path_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve project details over HTTP.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for projectinfo commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
        return

    root = Path(args.path).expanduser().resolve()

    if args.command == "path":
        print(cache_path(root))
        return

    if args.command == "show":
        result = asyncio.run(Orchestrator(root, config=ProjectInfoConfig(root=root)).read(root))
        if result is None:
            parser.exit(1, f"No project details cached at {cache_path(root)}. Run `projectinfo detect` first.\n")
        print(format_summary(result))
        return

    if not root.is_dir():
        parser.exit(1, f"{root} is not a directory\n")

    try:
        config = load_config(root)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "detect":
        result = asyncio.run(
            _detect(
                root,
                config,
                write=not args.no_write,
                count_lines=not args.no_cloc,
            )
        )
        print(dumps_result(result), end="")
    elif args.command == "watch":
        try:
            asyncio.run(_watch(root, config))
        except KeyboardInterrupt:
            print("Stopped watching")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


async def _detect(
    root: Path, config: ProjectInfoConfig, *, write: bool, count_lines: bool
) -> ProjectDetectionResult:
    orchestrator = Orchestrator(
        root,
        config=config,
        line_counter=None if count_lines else NullLineCounter(),
    )
    result = await orchestrator.detect(root)
    if write:
        await orchestrator.write(root, result)
    return result


async def _watch(root: Path, config: ProjectInfoConfig) -> None:
    async with Orchestrator(root, config=config):
        await asyncio.Event().wait()


def format_summary(result: ProjectDetectionResult) -> str:
    """Render the cached result the way a status bar entry would."""
    languages = ", ".join(result.languages) if result.languages else "Unknown"
    lines = [f"Languages: {languages}"]
    if result.frameworks:
        lines.append(f"Frameworks: {', '.join(result.frameworks)}")
    for key, value in result.details.items():
        lines.append(f"  {key}: {value}")
    if result.cloc:
        lines.append("Lines of code:")
        for language, stats in sorted(
            result.cloc.items(), key=lambda item: item[1].code, reverse=True
        ):
            lines.append(f"  {language}: {stats.code} ({stats.n_files} files)")
    return "\n".join(lines)


if __name__ == "__main__":
    main(sys.argv[1:])
