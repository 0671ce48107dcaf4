"""
CLI module for media manager commands.
"""

import logging
import os
import sys
from typing import Optional

import click
from click.core import ParameterSource

from media_manager.analysis import Analyzer
from media_manager.config import Config, set_config
from media_manager.errors import MediaManagerError
from media_manager.library import Library
from media_manager.pipeline import ItemIdentifier, RecommendationPipeline
from media_manager.render import OutputFormat, RenderTarget


LIBRARY_ARGUMENT = "media_manager.library_argument"


def setup_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    """Setup logging configuration.

    Args:
        level: Logging level.
        fmt: Log record format.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=fmt or "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def fail(error: Exception) -> None:
    """Print a diagnostic and exit with status 1."""
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


class LibraryGroup(click.Group):
    """Command group taking the library root as an optional leading argument.

    ``media-manager /music recommend -i 3`` is the same as
    ``media-manager --library /music recommend -i 3``. The first positional
    token before the command name is taken as the library, unless it names
    a command.
    """

    def parse_args(self, ctx, args):
        args = list(args)

        value_options = set()
        for param in self.params:
            if isinstance(param, click.Option) and not param.is_flag:
                value_options.update(param.opts)

        i = 0
        while i < len(args):
            token = args[i]
            if token == "--":
                break
            if token.startswith("-") and token != "-":
                i += 2 if token in value_options else 1
                continue
            if token not in self.commands:
                ctx.meta[LIBRARY_ARGUMENT] = args.pop(i)
            break

        return super().parse_args(ctx, args)

    def collect_usage_pieces(self, ctx):
        pieces = super().collect_usage_pieces(ctx)
        return pieces[:1] + ["[LIBRARY]"] + pieces[1:]


def resolve_library(ctx, library: Optional[str]) -> str:
    """Pick the library root from ``--library`` or the leading argument."""
    positional = ctx.meta.get(LIBRARY_ARGUMENT)

    if positional is not None:
        # An inherited environment value yields to an explicit argument
        if library is not None and ctx.get_parameter_source("library") is not ParameterSource.ENVIRONMENT:
            raise click.UsageError(
                "Library given both as an argument and with --library", ctx
            )
        library = click.Path(exists=True, file_okay=False).convert(positional, None, ctx)

    if library is None:
        raise click.UsageError(
            "Missing library: pass LIBRARY or --library (or set MEDIA_MANAGER_LIBRARY)", ctx
        )

    return os.path.realpath(library)


@click.group(cls=LibraryGroup)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to configuration file"
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (defaults to the configured level)"
)
@click.option(
    "--library",
    "-l",
    envvar="MEDIA_MANAGER_LIBRARY",
    type=click.Path(exists=True, file_okay=False),
    help="Root directory of the media library (or pass it as LIBRARY)"
)
@click.pass_context
def cli(ctx, config: str, log_level: str, library: Optional[str]):
    """Media Manager - a CLI tool for managing media libraries."""
    library_root = resolve_library(ctx, library)

    cfg = Config(config) if config else Config()
    set_config(cfg)

    setup_logging(
        log_level or cfg.get("logging.level", "INFO"),
        cfg.get("logging.format"),
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg
    ctx.obj["library_root"] = library_root


@cli.command()
@click.pass_context
def scan(ctx):
    """Scan the media library and refresh the file manifest."""
    config = ctx.obj["config"]
    library_root = ctx.obj["library_root"]

    library = Library(config, library_root)

    click.echo(f"Scanning: {library_root}")
    try:
        files = library.scan()
    except OSError as e:
        fail(e)

    click.echo(f"Found {len(files)} audio files")
    click.echo(f"Manifest saved to: {library.storage.manifest_path}")


@cli.command()
@click.option(
    "--skip-existing/--no-skip-existing",
    default=True,
    help="Keep features of files already analyzed"
)
@click.pass_context
def analyze(ctx, skip_existing: bool):
    """Extract audio features for scanned files and build the analysis table."""
    config = ctx.obj["config"]
    library_root = ctx.obj["library_root"]

    analyzer = Analyzer(config, library_root)

    click.echo(f"Analyzing: {library_root}")
    try:
        summary = analyzer.analyze(skip_existing=skip_existing)
    except OSError as e:
        fail(e)

    click.echo(
        f"Analyzed {summary['analyzed']} files "
        f"({summary['skipped']} skipped, {summary['failed']} failed)"
    )
    if summary["analyzed"] or summary["skipped"]:
        click.echo(f"Analysis saved to: {analyzer.storage.analysis_path}")


@cli.command()
@click.option(
    "--item-id",
    "-i",
    type=int,
    help="ID of the item to get recommendations for"
)
@click.option(
    "--file-path",
    "-p",
    type=click.Path(),
    help="File path of the item to get recommendations for"
)
@click.option(
    "--num",
    "-n",
    type=int,
    help="Number of recommendations to retrieve (default 10)"
)
@click.option(
    "--format",
    "-f",
    "format_name",
    help="Output format (json or m3u8); prints a table if omitted"
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    help="Output file path (required if format is specified)"
)
@click.pass_context
def recommend(
    ctx,
    item_id: Optional[int],
    file_path: Optional[str],
    num: Optional[int],
    format_name: Optional[str],
    output: Optional[str]
):
    """Recommend items similar to a library item."""
    config = ctx.obj["config"]
    library_root = ctx.obj["library_root"]

    try:
        identifier = ItemIdentifier.from_options(item_id, file_path)
        target = RenderTarget.from_options(format_name, output)

        pipeline = RecommendationPipeline(library_root, config)
        result = pipeline.run(identifier, target, num=num)
    except MediaManagerError as e:
        fail(e)

    for warning in result.warnings:
        click.echo(f"Warning: {warning}", err=True)

    if result.format is OutputFormat.JSON:
        click.echo(f"Recommendations saved to JSON file: {result.output_path}")
    elif result.format is OutputFormat.M3U8:
        click.echo(f"Recommendations saved to M3U8 file: {result.output_path}")


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
