"""
Command-line interface for pgcatgen.

Introspects a PostgreSQL database and writes catalog modules for the
built-in schemas and contrib extensions.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from pgcatgen import __version__
from pgcatgen.config import DEFAULT_OUTPUT_DIR, GeneratorConfig, database_url
from pgcatgen.errors import CatalogGenError
from pgcatgen.generator import CatalogGenerator
from pgcatgen.metadata import PostgresIntrospector
from pgcatgen.models import GenerationReport

console = Console()

logger = logging.getLogger("pgcatgen")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def print_summary(report: GenerationReport, output_dir: Path) -> None:
    """Print what was generated and what was skipped."""
    table = Table(title="Generation Summary")
    table.add_column("Item", style="cyan")
    table.add_column("Count", style="green", justify="right")
    table.add_column("Names", style="yellow")

    table.add_row("Schemas", str(len(report.schemas)), ", ".join(report.schemas))
    table.add_row("Extensions", str(len(report.loaded)), ", ".join(report.loaded_names))
    table.add_row(
        "Skipped (no functions)",
        str(len(report.skipped_empty)),
        ", ".join(report.skipped_empty) or "-",
    )
    table.add_row(
        "Skipped (disabled)",
        str(len(report.skipped_disabled)),
        ", ".join(report.skipped_disabled) or "-",
    )
    if report.failed_install:
        table.add_row(
            "Failed to install",
            str(len(report.failed_install)),
            ", ".join(report.failed_install),
        )
    table.add_row("Files written", str(len(report.written)), str(output_dir))

    console.print(table)


@click.command()
@click.version_option(version=__version__, prog_name="pgcatgen")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file merged over the packaged defaults (extensions, rules)",
)
@click.option(
    "--catalog-module",
    type=str,
    default=None,
    help="Import path of the catalog classes used by generated modules",
)
@click.argument(
    "output_dir",
    required=False,
    type=click.Path(file_okay=False, path_type=Path),
)
def main(
    verbose: bool,
    config_path: Optional[Path],
    catalog_module: Optional[str],
    output_dir: Optional[Path],
) -> None:
    """
    Generate catalog modules from a live PostgreSQL database.

    OUTPUT_DIR defaults to engine/postgresql. The connection is taken from
    DATABASE_URL, or from PG_USER, PG_PASSWORD, PG_HOST, PG_PORT and
    PG_DATABASE.

    Examples:

        # Generate into the default directory
        pgcatgen

        # Generate into a package of your project
        DATABASE_URL=postgres://postgres@localhost/scratch \\
            pgcatgen --catalog-module myengine.catalog src/myengine/postgresql
    """
    setup_logging(verbose)

    try:
        config = GeneratorConfig.load(config_path, output_dir=output_dir or DEFAULT_OUTPUT_DIR)
        if catalog_module:
            config.catalog_module = catalog_module

        with PostgresIntrospector(database_url()) as introspector, Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Starting...", total=None)
            generator = CatalogGenerator(
                introspector,
                config,
                on_progress=lambda message: progress.update(task, description=message),
            )
            report = generator.run()
    except CatalogGenError as e:
        logger.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        logger.error("Interrupted")
        sys.exit(130)

    print_summary(report, config.output_dir)
    console.print(f"\n[green]Catalog written to: {config.output_dir}[/green]")


if __name__ == "__main__":
    main()
