#!/usr/bin/env python3

"""Wrap the functions of JavaScript/TypeScript files in a tracing call."""

import concurrent.futures
import glob
import logging
import os
import re
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from tracewrap.codemod.nodes import TransformOptions, TransformResult
from tracewrap.codemod.transform import transform_file
from tracewrap.config import DEFAULT_CONFIG_FILE, get_config_from_spec
from tracewrap.exceptions import CodemodError
from tracewrap.syntax.provider import CODEMOD_EXTENSIONS
from tracewrap.utils.log import add_file_handler, logger, set_console_level
from tracewrap.utils.serialize import UNSET, recursive_merge

_console = Console(highlight=False)

_HELP_TEXT = """Wrap functions in [bold]trace()[/bold] calls.

PATH is a file, a directory, or a glob such as [bold green]'src/**/*.{ts,tsx}'[/bold green].
Files under node_modules and declaration files (.d.ts) are never touched.
"""

_CONFIG_SPEC_HELP_TEXT = """Path to config files, filenames, or key-value pairs.

[bold red]IMPORTANT:[/bold red] [red]If you set this option, the default config file will not be used.[/red]

Examples:

[bold green]-c default.yaml -c transform.import_source=@acme/tracing[/bold green]

[bold green]-c tracewrap.yaml -c run.workers=8[/bold green]
"""

GLOB_META = re.compile(r"[*?[\]{}]")
_BRACES = re.compile(r"\{([^{}]*,[^{}]*)\}")
_DECLARATION_FILE = re.compile(r"\.d\.[cm]?ts$")

app = typer.Typer(rich_markup_mode="rich", add_completion=False)


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives, which `glob` does not understand."""
    match = _BRACES.search(pattern)
    if match is None:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(head + option + tail))
    return expanded


def is_codemod_file(path: str) -> bool:
    _, ext = os.path.splitext(path)
    return ext.lower() in CODEMOD_EXTENSIONS and not _DECLARATION_FILE.search(path)


def resolve_codemod_files(path_arg: str, cwd: str) -> list[str]:
    """Resolve the PATH argument to a sorted list of absolute file paths.

    A plain path naming an existing file resolves to that file (if it is a
    supported source file). A directory means every source file below it.
    Anything else is a glob relative to `cwd`.
    """
    absolute = os.path.normpath(path_arg if os.path.isabs(path_arg) else os.path.join(cwd, path_arg))
    if not GLOB_META.search(path_arg):
        if os.path.isfile(absolute):
            return [absolute] if is_codemod_file(absolute) else []
        if os.path.isdir(absolute):
            absolute = os.path.join(absolute, "**", "*")

    matches = set()
    for pattern in expand_braces(absolute):
        for match in glob.glob(pattern, recursive=True):
            if not os.path.isfile(match) or not is_codemod_file(match):
                continue
            if "node_modules" in Path(os.path.relpath(match, cwd)).parts:
                continue
            matches.add(os.path.normpath(match))
    return sorted(matches)


def process_file(file_path: str, options: TransformOptions, *, dry_run: bool = False) -> TransformResult:
    """Transform one file and write it back when it changed."""
    with open(file_path, encoding="utf-8", newline="") as f:
        content = f.read()
    result = transform_file(content, file_path, options)
    logger.debug(f"Result for {file_path}: {result.summary()}")
    if result.changed and not dry_run:
        with open(file_path, "w", encoding="utf-8", newline="") as f:
            f.write(result.modified)
        logger.debug(f"Wrote {file_path}")
    return result


def _print_result(relative_path: str, result: TransformResult, *, show_unchanged: bool) -> None:
    if result.changed:
        _console.print(f"[green]✔[/green] {escape(relative_path)} ({result.wrapped_count} wrapped)")
    elif show_unchanged and result.skipped:
        reasons = "; ".join(result.skip_reasons())
        _console.print(f"[yellow]↷[/yellow] {escape(relative_path)} (skipped: {escape(reasons)})")


def build_options(config: dict, cwd: str) -> TransformOptions:
    transform_config = dict(config.get("transform") or {})
    if not transform_config.get("root"):
        transform_config["root"] = cwd
    return TransformOptions(**transform_config)


# fmt: off
@app.command(help=_HELP_TEXT)
def main(
    path: str = typer.Argument(..., help="File, directory or glob of files to transform"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report what would change without writing files", rich_help_panel="Basic"),
    name_pattern: str | None = typer.Option(None, "--name-pattern", help="Span name template, tokens {name}, {file} and {path}", rich_help_panel="Naming"),
    skip: list[str] | None = typer.Option(None, "--skip", help="Regex of function names to leave alone (repeatable)", rich_help_panel="Naming"),
    print_files: bool = typer.Option(False, "--print-files", help="Also list files that were left unchanged", rich_help_panel="Output"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Log every wrap and skip decision", rich_help_panel="Output"),
    quiet: bool = typer.Option(False, "-q", "--quiet", help="Only report errors", rich_help_panel="Output"),
    workers: int | None = typer.Option(None, "-w", "--workers", help="Number of worker threads", rich_help_panel="Advanced"),
    config_spec: list[str] = typer.Option([str(DEFAULT_CONFIG_FILE)], "-c", "--config", help=_CONFIG_SPEC_HELP_TEXT, rich_help_panel="Advanced"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write a debug log to this file", rich_help_panel="Output"),
) -> None:
    # fmt: on
    if verbose:
        set_console_level(logging.DEBUG)
    elif quiet:
        set_console_level(logging.WARNING)
    if log_file is not None:
        add_file_handler(log_file, print_path=not quiet)

    cwd = os.getcwd()
    logger.debug(f"Building config from specs: {config_spec}")
    configs = [get_config_from_spec(spec) for spec in config_spec]
    configs.append({
        "transform": {"name_pattern": name_pattern or UNSET, "skip": skip or UNSET},
        "run": {"workers": workers or UNSET},
    })
    config = recursive_merge(*configs)
    try:
        options = build_options(config, cwd)
    except ValidationError as e:
        _console.print(f"[red]Invalid configuration:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    files = resolve_codemod_files(path, cwd)
    if not files:
        if not quiet:
            _console.print(f"[red]No matching files found for: {escape(path)}[/red]")
        raise typer.Exit(1)
    logger.info(f"Transforming {len(files)} file(s)")

    results: dict[str, TransformResult] = {}
    failed = 0
    n_workers = (config.get("run") or {}).get("workers") or 1
    with concurrent.futures.ThreadPoolExecutor(max_workers=n_workers) as executor:
        futures = {executor.submit(process_file, file_path, options, dry_run=dry_run): file_path for file_path in files}
        for future in concurrent.futures.as_completed(futures):
            file_path = futures[future]
            try:
                results[file_path] = future.result()
            except (CodemodError, OSError, UnicodeDecodeError) as e:
                failed += 1
                _console.print(f"[red]Failed to transform {escape(file_path)}: {escape(str(e))}[/red]")
                logger.debug(f"Error transforming {file_path}", exc_info=True)

    total_wrapped = 0
    total_changed = 0
    for file_path in files:
        result = results.get(file_path)
        if result is None:
            continue
        if result.changed:
            total_changed += 1
            total_wrapped += result.wrapped_count
        if not quiet:
            _print_result(os.path.relpath(file_path, cwd), result, show_unchanged=print_files or dry_run)

    if dry_run and total_changed > 0 and not quiet:
        _console.print()
        _console.print(
            f"[dim]Dry run: {total_changed} file(s) would be updated, {total_wrapped} function(s) wrapped.[/dim]"
        )
    if failed:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
