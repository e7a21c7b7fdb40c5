from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Iterable, Optional, Tuple
import click

from .indexer import write_index_files
from .records import ArtifactType, Record
from .resolver import AssetResolver, MATCH_MODES
from .source import make_source
from .store import CatalogStore
from .utils import DEFAULT_CONFIG, discover_media_files, load_config, save_config, merge_config_with_args

TYPE_CHOICE = click.Choice([t.value for t in ArtifactType], case_sensitive=False)


def resolve_location(location: str, base_dir: Path) -> str:
    """Resolve a relative file location against the config directory."""
    if location.startswith(("http://", "https://")):
        return location
    path = Path(location)
    if not path.is_absolute():
        path = base_dir / path
    return str(path)


def build_store(config: dict, base_dir: Path, rng: Optional[random.Random] = None) -> CatalogStore:
    """Construct a store from a merged configuration."""
    try:
        timeout_s = float(config["timeout"])
    except (TypeError, ValueError):
        raise click.ClickException(f"Invalid timeout in configuration: {config['timeout']!r}")
    if config["match"] not in MATCH_MODES:
        raise click.ClickException(f"Invalid match mode in configuration: {config['match']!r} (expected one of {', '.join(MATCH_MODES)})")

    media_root = Path(resolve_location(str(config["media_root"]), base_dir))
    resolver = AssetResolver(discover_media_files(media_root), match=config["match"])
    source = make_source(resolve_location(str(config["source"]), base_dir), timeout_s=timeout_s)
    return CatalogStore(source, resolver, rng=rng)


def _or_dash(value: Optional[int]) -> str:
    return "-" if value is None else str(value)


def format_item(item: Record) -> str:
    year = item.year if item.has_year else "?"
    media = item.file_path or "(no media)"
    return f"{year}  {item.type.value:<4}  {item.visual_name}  {item.headline}  [{media}]"


def echo_items(items: Iterable[Record]) -> None:
    count = 0
    for item in items:
        click.echo(format_item(item))
        count += 1
    click.echo(f"{count} item(s)")


def _loaded_store(ctx: click.Context, rng: Optional[random.Random] = None) -> CatalogStore:
    obj = ctx.obj
    store = build_store(obj["config"], obj["base_dir"], rng=rng)
    if not store.load_archive_data():
        click.echo(f"Error: {store.error}", err=True)
        ctx.exit(1)
    return store


@click.group()
@click.option("--source", help="CSV file path or URL of the catalog table")
@click.option("--media-root", help="Directory holding the media files")
@click.option("--match", type=click.Choice(MATCH_MODES), help="Asset matching mode")
@click.option("--timeout", type=float, help="HTTP timeout in seconds")
@click.option("--config-dir", type=click.Path(file_okay=False, dir_okay=True, path_type=Path), default=Path("."),
              help="Directory containing .archivestore/config.yaml")
@click.option("--log", "log_level", default="WARNING", show_default=True,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
@click.pass_context
def cli(ctx, source: Optional[str], media_root: Optional[str], match: Optional[str], timeout: Optional[float], config_dir: Path, log_level: str):
    """Browse and export an archive catalog.

    The catalog is a CSV table (VisualName, Type, Headline, Text, Tags, Year)
    whose rows are matched to media files under the media root. Settings
    come from .archivestore/config.yaml, with command line options taking
    precedence.
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )

    config = merge_config_with_args(DEFAULT_CONFIG, load_config(config_dir))
    config = merge_config_with_args(config, {
        "source": source,
        "media_root": media_root,
        "match": match,
        "timeout": timeout,
    })
    ctx.obj = {"config": config, "base_dir": config_dir}


@cli.command()
@click.pass_context
def summary(ctx):
    """Show item counts, year range and tag count."""
    store = _loaded_store(ctx)
    years = store.years
    click.echo(f"Items: {store.items_count} (Dove: {store.dove_count}, Hawk: {store.hawk_count})")
    if years:
        click.echo(f"Years: {years[0]}-{years[-1]} ({len(years)} distinct)")
    else:
        click.echo("Years: none")
    click.echo(f"Tags: {len(store.all_tags)}")
    click.echo(f"Current year: {store.current_year}")
    missing = sum(1 for item in store.items if not item.file_path)
    if missing:
        click.echo(f"Without media: {missing}")


@cli.command()
@click.pass_context
def years(ctx):
    """List the distinct years with their item counts."""
    store = _loaded_store(ctx)
    for year in store.years:
        click.echo(f"{year}  {len(store.items_by_year(year))}")


@cli.command()
@click.option("--type", "artifact_type", type=TYPE_CHOICE, help="Only tags of this type")
@click.option("--related", help="Only tags co-occurring with this tag")
@click.pass_context
def tags(ctx, artifact_type: Optional[str], related: Optional[str]):
    """List tags with their frequencies."""
    store = _loaded_store(ctx)
    counts = store.tag_counts
    if related:
        names = store.related_tags(related)
    elif artifact_type:
        names = store.tags_by_type(ArtifactType.parse(artifact_type))
    else:
        names = store.all_tags
    for name in names:
        click.echo(f"{name}  {counts.get(name, 0)}")


@cli.command()
@click.argument("query")
@click.pass_context
def search(ctx, query: str):
    """Search headlines, texts and tags."""
    store = _loaded_store(ctx)
    echo_items(store.search_items(query))


@cli.command("random")
@click.option("--count", default=1, show_default=True, type=int)
@click.option("--type", "artifact_type", type=TYPE_CHOICE)
@click.option("--seed", type=int, help="Seed for a repeatable sample")
@click.pass_context
def random_items(ctx, count: int, artifact_type: Optional[str], seed: Optional[int]):
    """Draw a random sample of items."""
    store = _loaded_store(ctx, rng=random.Random(seed))
    if artifact_type:
        echo_items(store.get_random_by_type(ArtifactType.parse(artifact_type), count))
    else:
        echo_items(store.get_random_items(count))


@cli.command()
@click.option("--year", type=int, help="Year to show (defaults to the earliest)")
@click.option("--tag", "tag_names", multiple=True, help="Require this tag (repeatable)")
@click.pass_context
def browse(ctx, year: Optional[int], tag_names: Tuple[str, ...]):
    """Show the items of one year, optionally filtered by tags."""
    store = _loaded_store(ctx)
    if year is not None and not store.set_year(year):
        click.echo(f"Error: no items for year {year}", err=True)
        ctx.exit(1)
    for tag in tag_names:
        store.toggle_tag(tag)

    selected = set(store.filtered_by_tags)
    click.echo(f"Year {store.current_year}"
               f" (prev: {_or_dash(store.prev_year)}, next: {_or_dash(store.next_year)})")
    echo_items(item for item in store.current_year_items if item in selected)


@cli.command()
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), default=Path("catalog.json"),
              show_default=True, help="Path for the catalog JSON file")
@click.pass_context
def export(ctx, output: Path):
    """Write catalog.json with items, derived views and a search index."""
    store = _loaded_store(ctx)
    json_file = write_index_files(store, output)
    click.echo(f"Wrote {store.items_count} items to {json_file}")


@cli.command("init-config")
@click.pass_context
def init_config(ctx):
    """Save the current settings to .archivestore/config.yaml."""
    config_path = save_config(ctx.obj["base_dir"], ctx.obj["config"])
    click.echo(f"Saved configuration to {config_path}")


if __name__ == "__main__":
    cli()
