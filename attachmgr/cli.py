"""CLI entrypoint for attachmgr."""

import logging
import sys
from pathlib import Path

import click

from . import __version__


def _auto_detect_vault(start: Path) -> Path | None:
    """Find the vault root (a folder holding .obsidian or .attachmgr) by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        if (p / ".obsidian").is_dir() or (p / ".attachmgr").is_dir():
            return p
    return None


def _setup_logging(level: str) -> None:
    from rich.console import Console
    from rich.logging import RichHandler

    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@click.group()
@click.version_option(__version__, prog_name="attachmgr")
@click.option(
    "--vault",
    "-v",
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Path to the vault root (defaults to the nearest folder containing .obsidian)",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="warning",
    show_default=True,
    help="Logging verbosity",
)
@click.pass_context
def cli(ctx: click.Context, vault: Path | None, log_level: str) -> None:
    """attachmgr - keep note attachments next to their notes.

    Resolves where a note's attachments belong, moves pasted and dropped
    images there, and carries attachment folders along when notes are renamed.
    """
    ctx.ensure_object(dict)
    _setup_logging(log_level)

    if vault is None:
        detected = _auto_detect_vault(Path.cwd())
        if detected is None:
            raise click.ClickException("Vault not found. Pass --vault /path/to/vault or run from inside a vault.")
        vault = detected

    if not vault.exists() or not vault.is_dir():
        raise click.BadParameter(f"Directory '{vault}' does not exist.", param_hint="--vault / -v")

    ctx.obj["vault"] = vault.resolve()


@cli.command()
@click.argument("note")
@click.pass_context
def resolve(ctx: click.Context, note: str) -> None:
    """Print the attachment folder of NOTE (a vault path).

    Examples:

        attachmgr resolve Docs/Design.md
    """
    from .commands.ops_cmd import run_resolve

    sys.exit(run_resolve(ctx.obj["vault"], note))


@cli.command()
@click.argument("old")
@click.argument("new")
@click.pass_context
def rename(ctx: click.Context, old: str, new: str) -> None:
    """Carry attachments along for a note renamed from OLD to NEW.

    If the note still sits at OLD it is moved to NEW first.

    Examples:

        attachmgr rename Docs/Design.md Docs/DesignV2.md
    """
    from .commands.ops_cmd import run_rename

    sys.exit(run_rename(ctx.obj["vault"], old, new))


@cli.command()
@click.argument("file")
@click.option("--note", "-n", required=True, help="Vault path of the note that owns FILE")
@click.pass_context
def paste(ctx: click.Context, file: str, note: str) -> None:
    """Move a pasted FILE into the attachment folder of --note and fix its link.

    Examples:

        attachmgr paste "Pasted image 20240101120000.png" --note Docs/Design.md
    """
    from .commands.ops_cmd import run_paste

    sys.exit(run_paste(ctx.obj["vault"], file, note))


@cli.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--note", "-n", required=True, help="Vault path of the note the files are dropped on")
@click.pass_context
def drop(ctx: click.Context, files: tuple[Path, ...], note: str) -> None:
    """Save PNG/JPEG FILES into the attachment folder of --note.

    Prints each saved path with the reference text to embed it.

    Examples:

        attachmgr drop ~/Desktop/diagram.png --note Docs/Design.md
    """
    from .commands.ops_cmd import run_drop

    sys.exit(run_drop(ctx.obj["vault"], list(files), note))


@cli.command()
@click.option("--note", "-n", default=None, help="Pin the active note instead of following edits")
@click.pass_context
def watch(ctx: click.Context, note: str | None) -> None:
    """Watch the vault and keep attachments in sync.

    Runs until interrupted (Ctrl+C). Pasted images are moved next to the
    active note; renamed notes take their attachment folders along.

    Examples:

        attachmgr watch

        attachmgr watch --note Docs/Design.md
    """
    from .commands.watch_cmd import run_watch

    run_watch(ctx.obj["vault"], note=note)


@cli.command()
@click.option("--last", "last_n", type=int, default=None, help="Show only the last N entries")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Output format",
)
@click.pass_context
def journal(ctx: click.Context, last_n: int | None, output_format: str) -> None:
    """Show moves recorded in .attachmgr/journal.log."""
    from .commands.watch_cmd import run_journal

    count = run_journal(ctx.obj["vault"], last_n=last_n, format=output_format)
    sys.exit(0 if count > 0 else 1)


@cli.group()
def config() -> None:
    """Inspect and edit settings (.attachmgr/settings.json)."""
    pass


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Display current settings."""
    from .commands.config_cmd import run_config_show

    sys.exit(run_config_show(ctx.obj["vault"]))


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Set KEY to VALUE.

    Examples:

        attachmgr config set root_mode nextToNote

        attachmgr config set attachment_path '${notepath}/${notename}-assets'
    """
    from .commands.config_cmd import run_config_set

    sys.exit(run_config_set(ctx.obj["vault"], key, value))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
