"""CLI interface for managing Alfred workflows in a repository."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable

import click

from . import commands
from .exceptions import ReportableError
from .output import OutputFormatter
from .workflow import WorkflowLayout

logger = logging.getLogger(__name__)


def _run(ctx: Any, action: Callable[[], Any]) -> Any:
    """Run a command, translating errors into exit codes.

    ReportableError exits 1 after printing its message and details. Anything
    else is unexpected and exits 2 with a traceback.
    """
    out: OutputFormatter = ctx.obj["out"]
    try:
        result = action()
        if asyncio.iscoroutine(result):
            result = asyncio.run(result)
        return result
    except ReportableError as e:
        logger.debug("Reportable error", exc_info=True)
        e.report(out)
        ctx.exit(1)
    except KeyboardInterrupt:
        out.warning("Interrupted")
        ctx.exit(130)  # Standard exit code for SIGINT
    except Exception:
        out.console.print_exception()
        ctx.exit(2)


@click.group()
@click.option(
    "--directory",
    "-C",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Workflow directory to operate on",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="alfredwf")
@click.pass_context
def main(ctx: Any, directory: Path, quiet: bool, verbose: bool) -> None:
    """alfredwf - keep a source-controlled Alfred workflow in sync with Alfred."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(quiet=quiet)
    ctx.obj["directory"] = directory
    ctx.obj["layout"] = WorkflowLayout.from_config(directory)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("alfredwf").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command("import")
@click.pass_context
def import_(ctx: Any) -> None:
    """Copy edits made in Alfred from the installation back into raw.

    Only runs when no file is newer in raw than in the installation and every
    file it would overwrite or delete in raw is committed to git.
    """
    layout: WorkflowLayout = ctx.obj["layout"]
    _run(ctx, lambda: commands.import_workflow(layout, ctx.obj["out"]))


@main.command()
@click.pass_context
def update(ctx: Any) -> None:
    """Copy the bundled workflow in dist into the installation.

    Refuses when the installation has newer or extra files, which may be
    edits made in Alfred.
    """
    layout: WorkflowLayout = ctx.obj["layout"]
    _run(ctx, lambda: commands.update_workflow(layout, ctx.obj["out"]))


@main.command()
@click.option(
    "--prefs",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Alfred prefs.json (default from ALFREDWF_PREFS_PATH or HOME)",
)
@click.pass_context
def link(ctx: Any, prefs: Path) -> None:
    """Link the installed workflow matching raw/info.plist."""
    layout: WorkflowLayout = ctx.obj["layout"]
    _run(ctx, lambda: commands.link_workflow(layout, ctx.obj["out"], prefs))


@main.command()
@click.pass_context
def bundle(ctx: Any) -> None:
    """Rebuild dist from src/scripts and raw."""
    layout: WorkflowLayout = ctx.obj["layout"]
    _run(ctx, lambda: commands.bundle_workflow(layout, ctx.obj["out"]))


@main.command()
@click.pass_context
def export(ctx: Any) -> None:
    """Package dist into an installable .alfredworkflow file."""
    layout: WorkflowLayout = ctx.obj["layout"]
    _run(ctx, lambda: commands.export_workflow(layout, ctx.obj["out"]))


@main.command()
@click.argument("prefixes", nargs=-1, required=True)
@click.option(
    "--prefs",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Alfred prefs.json (default from ALFREDWF_PREFS_PATH or HOME)",
)
@click.pass_context
def bootstrap(ctx: Any, prefixes: tuple[str, ...], prefs: Path) -> None:
    """Create directories for installed workflows not yet in the repository.

    Run from the repository root. PREFIXES are bundleid prefixes selecting
    which installed workflows to bootstrap.

    Examples:
        alfredwf bootstrap com.example.
    """
    directory: Path = ctx.obj["directory"]
    _run(
        ctx,
        lambda: commands.bootstrap_workflows(
            directory, list(prefixes), ctx.obj["out"], prefs
        ),
    )


@main.command()
@click.pass_context
def upversion(ctx: Any) -> None:
    """Bump the patch version in raw/info.plist."""
    layout: WorkflowLayout = ctx.obj["layout"]
    _run(ctx, lambda: commands.upversion_workflow(layout, ctx.obj["out"]))


@main.command()
@click.pass_context
def lint(ctx: Any) -> None:
    """Check package.json agrees with raw/info.plist."""
    layout: WorkflowLayout = ctx.obj["layout"]
    _run(ctx, lambda: commands.lint_workflow(layout, ctx.obj["out"]))


if __name__ == "__main__":
    main()
