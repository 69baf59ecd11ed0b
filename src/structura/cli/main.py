#!/usr/bin/env python
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv
from rich.logging import RichHandler

from structura import __version__
from structura.filehandler import ProjectType
from structura.llm.types import ProviderIdentity


def _repo_root() -> Path:
    return Path.cwd().resolve()


def configure_logging(verbose: bool = False) -> None:
    root = logging.getLogger()
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(show_path=False, markup=False, rich_tracebacks=verbose)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        root.addHandler(handler)
    root.setLevel(logging.WARNING)
    # Suppress request-level logs from the HTTP stack
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("structura").setLevel(logging.DEBUG if verbose else logging.INFO)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="structura",
        description="Structura - generate Markdown documentation for a source tree with an LLM",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # --- Command Definitions ---
    run_p = subparsers.add_parser("run", help="Generate documentation for a directory")
    run_p.add_argument("input", help="Source directory to document")
    run_p.add_argument("output", help="Directory receiving the Markdown files")
    run_p.add_argument(
        "--provider",
        choices=[p.value for p in ProviderIdentity],
        help="LLM provider (default: deepseek)",
    )
    run_p.add_argument("--model", help="Model name (default: provider's first model)")
    run_p.add_argument("--api-key", help="API key (default: provider env var)")
    run_p.add_argument(
        "--project-type",
        choices=["auto"] + [p.value for p in ProjectType],
        help="Project type for ignore rules and prompts (default: auto-detect)",
    )
    run_p.add_argument("--min-interval", type=float, help="Minimum seconds between requests")
    run_p.add_argument("--max-retries", type=int, help="Attempts per file for retryable errors")
    run_p.add_argument("--max-prompt-chars", type=int, help="Truncate file content above this size")
    run_p.add_argument("--no-summaries", action="store_true", help="Skip PROJECT_STRUCTURE.md and PROJECT_SETUP.md")
    run_p.add_argument("--verbose", "-v", action="store_true", dest="run_verbose", help="Verbose logging")

    config_p = subparsers.add_parser("config", help="Show effective configuration")
    config_p.add_argument("--provider", choices=[p.value for p in ProviderIdentity])

    subparsers.add_parser("providers", help="List providers and models")
    subparsers.add_parser("version", help="Show version")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    load_dotenv(_repo_root() / ".env")
    configure_logging(args.verbose or getattr(args, "run_verbose", False))

    if args.command is None:
        parser.print_help()
        return 1

    from structura.cli.commands import config, docs, providers
    from structura.cli.formatting.output import ConsoleOutput

    console = ConsoleOutput()
    try:
        if args.command == "run":
            overrides = {
                "provider": args.provider,
                "model": args.model,
                "api_key": args.api_key,
                "min_interval": args.min_interval,
                "max_retries": args.max_retries,
                "max_prompt_chars": args.max_prompt_chars,
            }
            return asyncio.run(docs.run(
                args.input,
                args.output,
                overrides=overrides,
                project_type=args.project_type,
                summaries=not args.no_summaries,
                output=console,
            ))
        elif args.command == "config":
            return config.run({"provider": args.provider}, output=console)
        elif args.command == "providers":
            return providers.run(output=console)
        elif args.command == "version":
            console.print(f"structura {__version__}")
            return 0
    except KeyboardInterrupt:
        console.print_warning("Interrupted. Run the same command again to resume.")
        return 130
    except Exception as e:
        logging.getLogger("structura").debug("Unhandled error", exc_info=True)
        console.print_error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
