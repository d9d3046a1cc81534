"""CLI entrypoints for apidocgen commands."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List

from .agent import DocAgent
from .config import AgentConfig, load_config
from .errors import ApiDocGenError
from .logging import configure_logging
from .models import InlineFile, TaskDescription, TaskResult
from .stores import TaskCache


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


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .apidocgen.yml or the directory holding it (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apidocgen",
        description="Generate OpenAPI documentation from source code with an inference service.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the agent as an HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_config_option(serve_parser)
    serve_parser.add_argument("--host", default=None, help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=None, help="Port to listen on.")

    generate_parser = subparsers.add_parser(
        "generate",
        help="Document a repository, archive, or set of files and write openapi.json.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_config_option(generate_parser)
    source = generate_parser.add_mutually_exclusive_group()
    source.add_argument("--repo", help="Git repository URL to clone and analyze.")
    source.add_argument("--archive", help="Zip archive to analyze.")
    generate_parser.add_argument(
        "files",
        nargs="*",
        help="Source files to analyze directly.",
    )
    generate_parser.add_argument("--language", help="Language hint (auto-detected when omitted).")
    generate_parser.add_argument(
        "--pattern",
        dest="patterns",
        action="append",
        default=None,
        help="Search pattern for repository or archive discovery (repeatable).",
    )
    generate_parser.add_argument(
        "--existing",
        help="Existing OpenAPI JSON document to extend.",
    )
    generate_parser.add_argument(
        "--output",
        default="public/openapi.json",
        help="Where to write the merged document (default: public/openapi.json).",
    )

    cache_parser = subparsers.add_parser(
        "cache",
        help="Inspect or clear the task result cache.",
    )
    _add_verbose_option(cache_parser, suppress_default=True)
    _add_config_option(cache_parser)
    cache_parser.add_argument("action", choices=("show", "clear"))

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for apidocgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        config = load_config(Path(args.config))
    except ApiDocGenError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "serve":
        from .service import run_service

        run_service(
            host=args.host or config.server.host,
            port=args.port or config.server.port,
        )
    elif args.command == "generate":
        if args.files and (args.repo or args.archive):
            parser.error("source files cannot be combined with --repo or --archive")
        try:
            task = _build_task(args)
        except (OSError, ValueError) as exc:
            parser.exit(1, f"Could not read task input: {exc}\n")
        try:
            result = asyncio.run(_run_task(config, task))
        except ApiDocGenError as exc:
            parser.exit(1, f"{exc}\n")
        except Exception as exc:  # pragma: no cover - unexpected failure
            parser.exit(1, f"apidocgen generate failed: {exc}\nRun with --verbose for more details.\n")

        print(result.status_message)
        if not result.merged_documentation:
            return
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(result.merged_documentation, indent=2), encoding="utf-8")
        print(f"OpenAPI document written to {_relativize(output.resolve())}")
    elif args.command == "cache":
        cache = TaskCache(config.cache.path, capacity=config.cache.capacity)
        if args.action == "clear":
            cache.clear()
            print("Task cache cleared")
        else:
            entries = cache.entries()
            if not entries:
                print("Task cache is empty")
            for signature, recorded_at in entries:
                print(f"{recorded_at}  {signature}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _build_task(args: argparse.Namespace) -> TaskDescription:
    existing = None
    if args.existing:
        existing = json.loads(Path(args.existing).read_text(encoding="utf-8"))
        if not isinstance(existing, dict):
            raise ValueError("--existing must contain a JSON object")

    files: List[InlineFile] = [
        InlineFile(path=Path(name).as_posix(), content=Path(name).read_text(encoding="utf-8"))
        for name in args.files
    ]
    return TaskDescription(
        files=files,
        archive=Path(args.archive).read_bytes() if args.archive else None,
        repository_url=args.repo,
        language=args.language,
        search_patterns=args.patterns,
        existing_documentation=existing,
    )


async def _run_task(config: AgentConfig, task: TaskDescription) -> TaskResult:
    agent = DocAgent.from_config(config)
    try:
        return await agent.execute(task)
    finally:
        await agent.aclose()


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
