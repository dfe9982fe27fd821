"""CLI interface for skillsync."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from skillsync import __version__
from skillsync.config import DEFAULT_CONFIG_PATH
from skillsync.errors import InstallError, SkillSyncError

if TYPE_CHECKING:
    from skillsync.config import Config
    from skillsync.skills.catalog import SkillCatalog
    from skillsync.skills.library import SkillLibrary
    from skillsync.skills.models import SkillPackage

console = Console()


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error: {escape(message)}[/]")
    raise SystemExit(1)


def _load(ctx: click.Context) -> tuple["Config", "SkillLibrary"]:
    from skillsync.factory import create_library
    cfg = ctx.obj["config"]
    return cfg, create_library(cfg)


def _providers_label(skill: "SkillPackage") -> str:
    return ", ".join(sorted(skill.installed_providers)) or "-"


async def _select_catalog(
    library: "SkillLibrary",
    catalog_ref: str | None,
    directory: str | None,
) -> "SkillCatalog":
    if directory:
        return await library.open_directory(directory)
    if catalog_ref is None:
        await library.load_catalog(library.local)
        return library.local
    catalog = library.catalog(catalog_ref)
    if catalog is None:
        raise click.BadParameter(f"No catalog named {catalog_ref!r}", param_hint="--catalog")
    await library.load_catalog(catalog)
    return catalog


async def _resolve_skill(
    library: "SkillLibrary",
    skill_ref: str,
    catalog_ref: str | None,
    directory: str | None,
) -> "SkillPackage | None":
    """Find a skill in the chosen catalog, or in any catalog when none is chosen."""
    if catalog_ref or directory:
        catalog = await _select_catalog(library, catalog_ref, directory)
        return catalog.find(skill_ref)

    await library.refresh()
    for catalog in library.catalogs:
        skill = catalog.find(skill_ref)
        if skill is not None:
            return skill
    return None


def _print_catalog_errors(library: "SkillLibrary") -> None:
    for catalog in library.catalogs:
        if catalog.error_message:
            console.print(f"[yellow]Warning: {escape(catalog.name)}: {escape(catalog.error_message)}[/]")


@click.group()
@click.version_option(version=__version__, prog_name="skillsync")
@click.option(
    "--config", "-c", "config_path",
    default=str(DEFAULT_CONFIG_PATH), show_default=True,
    help="Config file path",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str, verbose: bool):
    """skillsync - discover, sync and install agent skills."""
    from skillsync.config import load_config
    from skillsync.utils import setup_logging

    cfg = load_config(config_path)
    setup_logging("DEBUG" if verbose else cfg.logging.level, cfg.logging.format)
    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg
    ctx.obj["config_path"] = Path(config_path).expanduser()


@cli.command()
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing file")
@click.pass_context
def init(ctx: click.Context, force: bool):
    """Generate the default config file."""
    from skillsync.config import write_default_config

    config_path: Path = ctx.obj["config_path"]
    if config_path.exists() and not force:
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            console.print("[yellow]Cancelled.[/]")
            return

    write_default_config(config_path)
    console.print(f"[green]Created {config_path}[/]")


@cli.command("list")
@click.option("--catalog", "catalog_ref", help="Catalog name or id (default: installed skills)")
@click.option("--dir", "directory", type=click.Path(file_okay=False), help="List skills below a local directory")
@click.option("--search", "-s", default="", help="Filter by name or description")
@click.pass_context
def list_skills(ctx: click.Context, catalog_ref: str | None, directory: str | None, search: str):
    """List skills of a catalog."""
    _, library = _load(ctx)
    catalog = asyncio.run(_select_catalog(library, catalog_ref, directory))

    if catalog.error_message:
        console.print(f"[yellow]Warning: {escape(catalog.error_message)}[/]")

    skills = catalog.search(search)
    if not skills:
        console.print(f"[yellow]No skills found in {escape(catalog.name)}.[/]")
        return

    table = Table(title=f"{catalog.name} ({len(skills)})")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Version")
    table.add_column("Installed")

    for skill in skills:
        table.add_row(
            escape(skill.display_id),
            escape(skill.name),
            escape(skill.version),
            _providers_label(skill),
        )

    console.print(table)


@cli.command()
@click.argument("skill_ref")
@click.option("--catalog", "catalog_ref", help="Catalog name or id")
@click.option("--dir", "directory", type=click.Path(file_okay=False), help="Look in a local directory")
@click.pass_context
def show(ctx: click.Context, skill_ref: str, catalog_ref: str | None, directory: str | None):
    """Show a skill's metadata and SKILL.md content."""
    _, library = _load(ctx)
    skill = asyncio.run(_resolve_skill(library, skill_ref, catalog_ref, directory))
    if skill is None:
        _fail(f"Skill not found: {skill_ref}")

    console.print(Panel.fit(
        f"[bold]{escape(skill.name)}[/] {escape(skill.version)}\n"
        f"ID: {escape(skill.display_id)}\n"
        f"Source: {escape(skill.origin.display_name)}\n"
        f"Installed: {_providers_label(skill)}\n"
        f"References: {skill.reference_count}  Scripts: {skill.script_count}\n\n"
        f"{escape(skill.description)}"
    ))
    console.print(Markdown(skill.content))


@cli.command()
@click.argument("skill_ref")
@click.option("--provider", "-p", "providers", multiple=True, required=True, help="Provider to install for")
@click.option("--catalog", "catalog_ref", help="Catalog name or id")
@click.option("--dir", "directory", type=click.Path(file_okay=False), help="Install from a local directory")
@click.pass_context
def install(ctx: click.Context, skill_ref: str, providers: tuple[str, ...], catalog_ref: str | None, directory: str | None):
    """Install a skill for one or more providers."""
    cfg, library = _load(ctx)
    unknown = [p for p in providers if p not in cfg.provider_names]
    if unknown:
        _fail(f"Unknown provider: {', '.join(unknown)}. Available: {', '.join(cfg.provider_names)}")

    async def run_install() -> "SkillPackage | None":
        skill = await _resolve_skill(library, skill_ref, catalog_ref, directory)
        if skill is None:
            return None
        return await library.install(skill, providers)

    try:
        updated = asyncio.run(run_install())
    except InstallError as e:
        if e.skill is not None and e.skill.installed_providers:
            console.print(f"[yellow]Partially installed for: {_providers_label(e.skill)}[/]")
        _fail(str(e))
    except SkillSyncError as e:
        _fail(str(e))

    if updated is None:
        _print_catalog_errors(library)
        _fail(f"Skill not found: {skill_ref}")

    console.print(
        f"[green]✓ Installed {escape(updated.display_id)} for {_providers_label(updated)}[/]"
    )


@cli.command()
@click.argument("skill_ref")
@click.option("--provider", "-p", "providers", multiple=True, required=True, help="Provider to uninstall from")
@click.pass_context
def uninstall(ctx: click.Context, skill_ref: str, providers: tuple[str, ...]):
    """Remove an installed skill from one or more providers."""
    _, library = _load(ctx)

    async def run_uninstall() -> "SkillPackage | None":
        await library.load_catalog(library.local)
        skill = library.local.find(skill_ref)
        if skill is None:
            return None
        for provider in providers:
            skill = await library.uninstall(skill, provider)
        return skill

    try:
        updated = asyncio.run(run_uninstall())
    except SkillSyncError as e:
        _fail(str(e))

    if updated is None:
        _fail(f"Skill is not installed: {skill_ref}")

    remaining = _providers_label(updated)
    console.print(
        f"[green]✓ Uninstalled {escape(updated.display_id)} from {', '.join(providers)}[/]"
        + (f" [dim](still installed for {remaining})[/]" if updated.installed_providers else "")
    )


@cli.group()
def repo():
    """Manage remote skill repositories."""
    pass


@repo.command("list")
@click.pass_context
def list_repos(ctx: click.Context):
    """List configured repositories."""
    _, library = _load(ctx)

    table = Table(title="Repositories")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("URL")
    table.add_column("Cached")

    for reference in library.store.references:
        try:
            cached = library.cache.has_cache(reference.url)
        except SkillSyncError:
            cached = False
        table.add_row(
            reference.id,
            escape(reference.name),
            escape(reference.url),
            "[green]yes[/]" if cached else "no",
        )

    console.print(table)


@repo.command("add")
@click.argument("url")
@click.option("--name", help="Display name (default: derived from the URL)")
@click.pass_context
def add_repo(ctx: click.Context, url: str, name: str | None):
    """Add a GitHub repository of skills."""
    _, library = _load(ctx)
    try:
        catalog = library.add_repository(url, name)
    except SkillSyncError as e:
        _fail(str(e))

    console.print(f"[green]✓ Added {escape(catalog.name)}[/] [dim]({catalog.id})[/]")


@repo.command("remove")
@click.argument("ref")
@click.pass_context
def remove_repo(ctx: click.Context, ref: str):
    """Remove a repository by id or URL and delete its cached clone."""
    _, library = _load(ctx)
    try:
        reference = asyncio.run(library.remove_repository(ref))
    except SkillSyncError as e:
        _fail(str(e))

    console.print(f"[green]✓ Removed {escape(reference.name)}[/]")


@cli.group()
def cache():
    """Manage the clone cache."""
    pass


@cache.command("clear")
@click.argument("url")
@click.pass_context
def clear_cache(ctx: click.Context, url: str):
    """Delete the cached clone of a repository."""
    _, library = _load(ctx)
    try:
        removed = asyncio.run(library.cache.evict(url))
    except (SkillSyncError, OSError) as e:
        _fail(str(e))

    if removed:
        console.print(f"[green]✓ Cleared cache for {escape(url)}[/]")
    else:
        console.print(f"[yellow]No cached clone for {escape(url)}[/]")
