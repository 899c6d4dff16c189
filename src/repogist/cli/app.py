"""Command-line interface for repogist.

This module provides a Typer-based CLI for turning a Git repository into a
single text document, cleaning up leftover temporary workspaces, and running
the HTTP service.

Links to third-party package documentation:
- Typer: https://typer.tiangolo.com/
- Rich: https://rich.readthedocs.io/en/latest/
- Uvicorn: https://www.uvicorn.org/

Sample input:
    $ repogist ingest https://github.com/acme/widgets/tree/main -i "**/*.md"
    $ repogist ingest https://gitlab.com/acme/widgets --json --output widgets.json
    $ repogist sweep --all
    $ repogist serve --port 3000

Expected output:
    Repository Tree Structure:
    ├── src
    │   └── main.go
    └── go.mod
    ...
    ✅ Removed 3 temporary entries
"""

import json
import sys
from typing import List, Optional

import typer
import uvicorn

from repogist.config import CONFIG
from repogist.core.errors import IngestionError, InvalidReference
from repogist.core.pipeline import build_components, ingest_repository
from repogist.core.supervisor import RequestTimedOut, run_with_deadline
from repogist.log_utils import configure_logging

from .formatters import (
    get_spinner,
    print_diagnostics,
    print_error,
    print_info,
    print_ingestion_summary,
    print_success,
    print_sweep_report,
)
from .validators import (
    validate_git_url,
    validate_ignore_patterns,
    validate_output_file,
    validate_timeout,
)

# Create Typer app
app = typer.Typer(
    name="repogist",
    help="Fetch a Git repository and render it as a tree plus concatenated file contents",
    rich_markup_mode="rich",
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    level = "DEBUG" if verbose else CONFIG["logging"]["level"]
    configure_logging(level, log_file=None)


@app.command("ingest")
def ingest_command(
    url: str = typer.Argument(
        ...,
        callback=validate_git_url,
        help="Repository URL (GitHub/GitLab browse URL, .git URL or git@host:owner/repo.git)",
    ),
    ignore: Optional[List[str]] = typer.Option(
        None,
        "--ignore", "-i",
        callback=validate_ignore_patterns,
        help="Additional gitignore-style pattern to exclude (repeatable)",
    ),
    output_file: Optional[str] = typer.Option(
        None,
        "--output", "-o",
        callback=validate_output_file,
        help="Write the result to this file instead of stdout",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Emit {tree, content, normalized} as JSON instead of the normalized text",
    ),
    timeout: float = typer.Option(
        CONFIG["server"]["request_timeout_seconds"],
        "--timeout", "-t",
        callback=validate_timeout,
        help="Seconds to wait before abandoning the fetch and sweeping workspaces",
    ),
) -> None:
    """Ingest a repository and print its tree and file contents.

    Examples:
        [bold]$ repogist ingest https://github.com/acme/widgets[/bold]

        [bold]$ repogist ingest https://github.com/acme/widgets/tree/dev -i "**/*.md" -i "docs/"[/bold]

        [bold]$ repogist ingest https://gitlab.com/acme/widgets --json -o widgets.json[/bold]
    """
    manager, fetcher = build_components(CONFIG)

    with get_spinner(f"Ingesting {url}") as progress:
        progress.add_task("ingest", total=None)
        try:
            result = run_with_deadline(
                lambda: ingest_repository(url, ignore, manager, fetcher),
                manager,
                timeout,
            )
        except InvalidReference as e:
            print_error(str(e))
            raise typer.Exit(code=2)
        except RequestTimedOut as e:
            print_error(str(e))
            raise typer.Exit(code=1)
        except IngestionError as e:
            print_error(f"Failed to process repository: {e}")
            raise typer.Exit(code=1)

    rendered = json.dumps(result.to_dict(), indent=2) if as_json else result.normalized

    if output_file:
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(rendered)
        print_success(f"Repository ingested successfully: {output_file}")
        print_ingestion_summary(result)
    else:
        sys.stdout.write(rendered)
        if not rendered.endswith("\n"):
            sys.stdout.write("\n")

    print_diagnostics(result.diagnostics)


@app.command("sweep")
def sweep_command(
    all_entries: bool = typer.Option(
        False,
        "--all", "-a",
        help="Remove every repogist entry regardless of age",
    ),
    max_age_hours: Optional[float] = typer.Option(
        None,
        "--max-age-hours",
        min=0,
        help="Age threshold for stale entries (defaults to the configured value)",
    ),
) -> None:
    """Remove leftover temporary workspaces and archives.

    Examples:
        [bold]$ repogist sweep[/bold]

        [bold]$ repogist sweep --all[/bold]
    """
    manager, _ = build_components(CONFIG)
    print_info(f"Sweeping {manager.root}")
    report = manager.sweep_all() if all_entries else manager.sweep_stale(max_age_hours)
    print_sweep_report(report)
    if report.failures:
        print_error(f"{len(report.failures)} entries could not be removed")
        raise typer.Exit(code=1)
    print_success(f"Removed {report.removed_count} temporary entries")


@app.command("serve")
def serve_command(
    host: str = typer.Option(CONFIG["server"]["host"], "--host", help="Interface to bind"),
    port: int = typer.Option(CONFIG["server"]["port"], "--port", "-p", min=1, max=65535, help="Port to listen on"),
) -> None:
    """Run the HTTP ingestion service."""
    configure_logging(CONFIG["logging"]["level"], log_file="logs/repogist_api.log")
    print_info(f"Server is running on {host}:{port}")
    uvicorn.run("repogist.api.main:app", host=host, port=port)


if __name__ == "__main__":
    app()
