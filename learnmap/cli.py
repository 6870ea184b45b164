"""CLI entrypoints for learnmap commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import load_config
from .errors import LearnMapError
from .logging import configure_logging
from .orchestrator import Orchestrator
from .stores import SQLiteProjectStore


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


def _add_output_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Write the script to this file instead of stdout.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="learnmap",
        description="Generate element explanations for a site or repository and compile learning plugins.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to .learnmap.yml or the directory holding it.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyse a website or repository and store the resulting project.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    analyze_parser.add_argument("name", help="Project name.")
    target = analyze_parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--url", help="Website URL to render and analyse.")
    target.add_argument("--repo", help="Git repository URL to clone and analyse.")

    list_parser = subparsers.add_parser("list", help="List stored projects, newest first.")
    _add_verbose_option(list_parser, suppress_default=True)

    delete_parser = subparsers.add_parser(
        "delete",
        help="Delete a project and revoke its API key.",
    )
    _add_verbose_option(delete_parser, suppress_default=True)
    delete_parser.add_argument("project_id", type=int, help="Numeric project id.")

    plugin_parser = subparsers.add_parser(
        "plugin",
        help="Compile the self-contained plugin script for a project key.",
    )
    _add_verbose_option(plugin_parser, suppress_default=True)
    plugin_parser.add_argument("key", help="Project API key (learn_...).")
    _add_output_option(plugin_parser)

    loader_parser = subparsers.add_parser(
        "loader",
        help="Compile the plugin variant that fetches its map from a lookup endpoint.",
    )
    _add_verbose_option(loader_parser, suppress_default=True)
    loader_parser.add_argument(
        "--endpoint",
        default=None,
        help="Lookup endpoint URL (defaults to plugin.lookup_endpoint from config).",
    )
    loader_parser.add_argument(
        "--key",
        default=None,
        help="Bake this API key into the script instead of reading data-api-key.",
    )
    _add_output_option(loader_parser)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for learnmap commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    try:
        config = load_config(args.config)
    except LearnMapError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port, config=config)
        return

    orchestrator = Orchestrator(config=config, store=SQLiteProjectStore(config.store.path))

    if args.command == "analyze":
        try:
            project = orchestrator.create_project(
                args.name,
                scrape_url=args.url,
                repo_url=args.repo,
            )
        except LearnMapError as exc:
            parser.exit(1, f"learnmap analyze failed: {exc}\nRun with --verbose for more details.\n")
        print(f"Project {project.id} created: {project.project_name}")
        print(f"API key: {project.access_key}")
        print(json.dumps(project.function_map, indent=2, ensure_ascii=False))
    elif args.command == "list":
        projects = orchestrator.store.list_projects()
        if not projects:
            print("No projects yet")
        for project in projects:
            target = project.scrape_url or project.repo_url or "-"
            print(
                f"{project.id}\t{project.project_name}\t{project.access_key}\t"
                f"{len(project.function_map)} entries\t{target}"
            )
    elif args.command == "delete":
        if not orchestrator.store.delete_project(args.project_id):
            parser.exit(1, f"Project {args.project_id} not found\n")
        print(f"Project {args.project_id} deleted")
    elif args.command == "plugin":
        script = orchestrator.build_plugin(args.key)
        if script is None:
            parser.exit(1, f"No project found for key {args.key}\n")
        _emit(script, args.output)
    elif args.command == "loader":
        try:
            script = orchestrator.build_loader(args.endpoint, key=args.key)
        except LearnMapError as exc:
            parser.exit(1, f"{exc}\n")
        _emit(script, args.output)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _emit(script: str, output: Path | None) -> None:
    if output is None:
        sys.stdout.write(script)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(script, encoding="utf-8")
    print(f"Plugin written to {_relativize(output)}")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
