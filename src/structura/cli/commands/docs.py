#!/usr/bin/env python
"""
Docs command - Generate documentation for every file under a directory.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any, Mapping, Optional

import httpx
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter

from structura.cli.formatting.output import ConsoleOutput
from structura.cli.session import EXIT_ERROR, SessionController
from structura.config import ConfigError, SessionConfig, resolve_session_config
from structura.doc_generation import DocumentationPipeline
from structura.filehandler import IgnorePolicy, ProjectType, detect_project_type, traverse
from structura.llm.providers import create_client
from structura.llm.retry import ResilientExecutor
from structura.llm.types import PROVIDER_KEY_ENV

logger = logging.getLogger(__name__)

AUTO_DETECT = "auto"


def is_interactive() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


async def prompt_api_key(config: SessionConfig) -> str:
    """Ask for the provider key with masked input."""
    session = PromptSession()
    key = await session.prompt_async(f"{config.provider.value} API key: ", is_password=True)
    return key.strip()


async def prompt_project_type(detected: ProjectType) -> ProjectType:
    """Let the user pick a project type; empty input keeps the detected one."""
    choices = [AUTO_DETECT] + [p.value for p in ProjectType]
    session = PromptSession(completer=WordCompleter(choices, ignore_case=True))
    answer = await session.prompt_async(
        f"Project type [{AUTO_DETECT}: {detected.value}]: ",
    )
    answer = answer.strip().lower()
    if not answer or answer == AUTO_DETECT:
        return detected
    try:
        return ProjectType(answer)
    except ValueError:
        logger.warning(f"Unknown project type '{answer}', using {detected.value}")
        return detected


async def run(
    input_dir: str,
    output_dir: str,
    *,
    overrides: Optional[Mapping[str, Any]] = None,
    project_type: Optional[str] = None,
    summaries: bool = True,
    interactive: Optional[bool] = None,
    output: Optional[ConsoleOutput] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path] = None,
) -> int:
    """Run the docs command."""
    console = output or ConsoleOutput()
    interactive = is_interactive() if interactive is None else interactive

    try:
        config = resolve_session_config(overrides, environ=environ, config_path=config_path)
    except ConfigError as e:
        console.print_error(str(e))
        return EXIT_ERROR

    input_root = Path(input_dir)
    output_root = Path(output_dir)

    if project_type and project_type != AUTO_DETECT:
        try:
            kind = ProjectType(project_type)
        except ValueError:
            console.print_error(f"Unknown project type '{project_type}'")
            return EXIT_ERROR
    else:
        kind = detect_project_type(input_root)
        if interactive and project_type is None:
            kind = await prompt_project_type(kind)

    if not config.api_key and interactive:
        key = await prompt_api_key(config)
        if key:
            config = config.with_overrides(api_key=key)
    if not config.api_key:
        env_names = " or ".join(PROVIDER_KEY_ENV[config.provider])
        console.print_error(
            f"No API key for {config.provider.value}. Set {env_names} or pass --api-key"
        )
        return EXIT_ERROR

    try:
        records = traverse(
            input_root,
            IgnorePolicy.for_project_type(kind),
            max_file_size=config.max_file_bytes,
            exclude=(output_root,),
        )
    except (FileNotFoundError, NotADirectoryError) as e:
        console.print_error(str(e))
        return EXIT_ERROR
    except OSError as e:
        console.print_error(f"Error walking directory {input_root}: {e}")
        return EXIT_ERROR

    console.print_info(
        f"Documenting {len(records)} files in {os.fspath(input_root)} "
        f"with {config.provider.value}/{config.model} (project type: {kind.value})"
    )

    async with create_client(config, http_client=http_client) as client:
        executor = ResilientExecutor.from_config(client, config)
        pipeline = DocumentationPipeline(
            records,
            input_root=input_root,
            output_root=output_root,
            executor=executor,
            project_type=kind,
            write_summaries=summaries,
        )
        summary = await SessionController(
            pipeline, console, show_progress=console.console.is_terminal
        ).run()

    logger.debug(f"{executor.dispatch_count} requests sent")
    return summary.exit_code
