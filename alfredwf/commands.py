"""Workflow management commands.

Each command works on one workflow directory (see WorkflowLayout) and either
completes, or raises a ReportableError describing what to do next. The CLI
runs them on an asyncio event loop.
"""

import asyncio
import json
import logging
import os
import shutil
import zipfile
from pathlib import Path
from typing import Any, Optional, Union

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
)

from .alfred import list_current_workflows
from .config import config
from .exceptions import (
    InfoPlistCorruptError,
    InfoPlistFieldError,
    InfoPlistMissingError,
    ReportableError,
    WorkflowDirMissingError,
    report_as,
    reportable_error,
)
from .git import DIFF_OPTIONS, git_cz, git_update_index
from .info_plist import INFO_PLIST, InfoPlist, read_info_plist, upversion_info_plist
from .output import OutputFormatter
from .sync import (
    SyncOutcome,
    SyncPlan,
    apply_outcomes,
    sync_outcomes,
    verify_committed,
)
from .utils import SCRIPT_MODE, sh_quote, unique
from .workflow import WorkflowLayout, package_name, verify_bundleid

logger = logging.getLogger(__name__)

PACKAGE_JSON_TEMPLATE: dict[str, Any] = {
    "private": True,
    "scripts": {
        "bundle-workflow": "alfredwf bundle",
        "export-workflow": "alfredwf export",
        "import-workflow": "alfredwf import",
        "link-workflow": "alfredwf link",
        "lint-workflow": "alfredwf lint",
        "update-workflow": "alfredwf update",
        "upversion-workflow": "alfredwf upversion",
    },
}


def json_type_name(value: Any) -> str:
    """Name of the JSON type of a decoded JSON value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


async def _apply_with_progress(
    out: OutputFormatter,
    source: Path,
    target: Path,
    outcomes: list[SyncOutcome],
) -> list[str]:
    if out.quiet:
        return await apply_outcomes(source, target, outcomes)
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=out.console,
        transient=True,
    ) as progress:
        task = progress.add_task("Syncing files...", total=len(outcomes))
        return await apply_outcomes(
            source,
            target,
            outcomes,
            on_applied=lambda _: progress.advance(task),
        )


# =============================================================================
# import
# =============================================================================


async def import_workflow(layout: WorkflowLayout, out: OutputFormatter) -> None:
    """Copy newer files from the installation back into raw.

    This pulls edits made in the Alfred UI back into the repository. Files in
    dist that are missing from raw are ignored, since they come from the
    bundle rather than from raw. Nothing is changed unless every file about
    to be overwritten or deleted in raw is committed to git.
    """
    installation = layout.installation
    try:
        installation_info_plist = read_info_plist(installation, require_symlink=True)
    except WorkflowDirMissingError as e:
        raise ReportableError(
            f"No {installation} link and it is required to import-workflow "
            "- run link-workflow?",
            [layout.help("link")],
            cause=e,
        ) from e
    except ReportableError as e:
        raise ReportableError(
            f"Problems with {installation}/{INFO_PLIST}, "
            "run bundle-workflow and/or export-workflow?",
            [layout.help("bundle"), layout.help("export")],
            cause=e,
        ) from e

    with report_as(
        f"{installation} does not appear linked correctly - run link-workflow?",
        [layout.help("link")],
    ):
        verify_bundleid(installation, installation_info_plist, layout.raw)

    # Copying installation -> raw, but names missing from raw that come from
    # dist are not raw's to copy. If that is wrong, the next bundle reports
    # the clash and it can be resolved without losing data.
    names = unique(layout.installation_filenames() + layout.raw_filenames())
    outcomes = await sync_outcomes(
        installation, layout.raw, names, frozenset(layout.dist_filenames())
    )
    plan = SyncPlan.from_outcomes(outcomes)
    plan.raise_for_failures("Cannot import-workflow")

    if not plan.changes:
        out.success("All files imported and up to date")
        return

    await verify_committed(layout.raw, plan.changes, "Cannot import-workflow")

    for message in await _apply_with_progress(
        out, installation, layout.raw, plan.changes
    ):
        out.info(message)


# =============================================================================
# update
# =============================================================================


async def update_workflow(layout: WorkflowLayout, out: OutputFormatter) -> None:
    """Copy newer files from dist into the live installation.

    Refuses when the installation has files that are newer than dist, or
    files dist does not have, since those may be edits made in Alfred.
    """
    installation = layout.installation
    installation_info_plist: Optional[InfoPlist] = None
    try:
        installation_info_plist = read_info_plist(installation, require_symlink=True)
    except WorkflowDirMissingError as e:
        raise ReportableError(
            f"Can't update-workflow without {installation} link - run link-workflow?",
            [layout.help("link")],
            cause=e,
        ) from e
    except (InfoPlistMissingError, InfoPlistCorruptError, InfoPlistFieldError):
        # A broken info.plist can happen during development; dist replaces it
        out.warning(f"Ignoring missing or corrupted {installation}/{INFO_PLIST}")

    if installation_info_plist is not None:
        with report_as(
            "Cannot verify bundleid match - you may need to bundle-workflow "
            "or link-workflow?",
            [layout.help("bundle"), layout.help("link")],
        ):
            verify_bundleid(installation, installation_info_plist, layout.dist)

    names = unique(layout.dist_filenames() + layout.installation_filenames())
    outcomes = await sync_outcomes(layout.dist, installation, names)
    plan = SyncPlan.from_outcomes(outcomes)
    plan.raise_for_failures(
        "Cannot update-workflow", f"{layout.dist} -> {installation}"
    )

    # Files only in the installation may have been created in Alfred, so
    # they are never deleted here
    deletes = plan.deletes
    if deletes:
        raise reportable_error(
            f"Cannot update-workflow, found {len(deletes)} stale files in "
            f"{installation}",
            "  Either import-workflow, resolve, and then bundle-workflow "
            "before retrying:",
            layout.help("import"),
            layout.help("bundle"),
            "  Or delete the files you don't want:",
            *(
                f":; rm {sh_quote(str((installation / o.name).resolve()))}"
                for o in deletes
            ),
        )

    copies = plan.copies
    for message in await _apply_with_progress(out, layout.dist, installation, copies):
        out.info(message)
    if not copies:
        out.success("Installation is up to date")


# =============================================================================
# link
# =============================================================================


def link_workflow(
    layout: WorkflowLayout,
    out: OutputFormatter,
    prefs_path: Optional[Union[str, Path]] = None,
) -> None:
    """Create the installation symlink, or confirm an existing one."""
    installation = layout.installation
    relink = [
        f":; rm -f {sh_quote(str(installation.absolute()))}",
        layout.help("link"),
    ]
    installation_info_plist: Optional[InfoPlist] = None
    try:
        installation_info_plist = read_info_plist(installation, require_symlink=True)
    except WorkflowDirMissingError:
        pass
    except ReportableError as e:
        raise ReportableError(
            "The linked workflow is corrupted? Try update, "
            "or maybe remove and relink?",
            [layout.help("update"), *relink],
            cause=e,
        ) from e

    if installation_info_plist is not None:
        with report_as(
            "It looks like this workflow is linked to the wrong installation, "
            "maybe remove and relink?",
            relink,
        ):
            raw_info_plist = verify_bundleid(
                installation, installation_info_plist, layout.raw
            )
        out.success(
            "Confirmed linked installation matches bundleid for "
            f"{raw_info_plist.describe()}"
        )
        return

    workflows, warnings = list_current_workflows(prefs_path)
    for warning in warnings:
        out.warning(warning)

    raw_info_plist = read_info_plist(layout.raw)
    bundleid = raw_info_plist.bundleid
    matching = [w for w in workflows if w.info_plist.bundleid == bundleid]
    if not matching:
        raise reportable_error(
            "Cannot find a matching installed workflow, use export-workflow to "
            "build, install via Alfred, and retry link",
            f":; ( cd {sh_quote(str(layout.root.resolve()))} && alfredwf export "
            f"&& open {sh_quote(raw_info_plist.export_name())} ; )",
        )
    if len(matching) > 1:
        raise reportable_error(
            "Found multiple matching workflows, you might need to clean up the "
            "duplicates in Alfred?",
            *(f"Found {w.info_plist.describe()} in {w.target}" for w in matching),
        )

    workflow = matching[0]
    try:
        os.symlink(workflow.target, installation)
    except OSError as e:
        raise ReportableError(
            f"Failed to create symlink {installation}", cause=e
        ) from e
    out.success(f"Linked to {workflow.info_plist.describe()} in {workflow.target}")


# =============================================================================
# bundle
# =============================================================================


def bundle_workflow(layout: WorkflowLayout, out: OutputFormatter) -> None:
    """Rebuild dist from the built scripts and the raw files.

    dist is cleared first, so everything is copied rather than synced. A raw
    file with the same name as a script is a clash and an error.
    """
    dist = layout.dist
    if dist.exists():
        shutil.rmtree(dist)
    dist.mkdir(parents=True)

    scripts: list[Path] = []
    if layout.scripts.is_dir():
        scripts = [p for p in sorted(layout.scripts.iterdir()) if p.is_file()]
    for script in scripts:
        target = dist / script.name
        shutil.copy2(script, target)
        os.chmod(target, SCRIPT_MODE)
        logger.debug(f"Bundled script {script} -> {target}")

    raw_names = layout.raw_filenames()
    clashes = sorted(set(raw_names) & set(os.listdir(dist)))
    if clashes:
        raise reportable_error(
            f"Failed to copy raw file(s) {layout.raw} -> {dist}, check for clash?",
            *(f"  {name}" for name in clashes),
        )
    try:
        shutil.copytree(layout.raw, dist, symlinks=True, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise ReportableError(
            f"Failed to copy raw file(s) {layout.raw} -> {dist}", cause=e
        ) from e
    out.success(
        f"Bundled {len(scripts)} script(s) and {len(raw_names)} raw file(s) into {dist}"
    )


# =============================================================================
# export
# =============================================================================


def export_workflow(layout: WorkflowLayout, out: OutputFormatter) -> Path:
    """Package dist into an installable .alfredworkflow file.

    Returns:
        Path of the written file, next to dist
    """
    with report_as(f"Cannot read {layout.dist}/{INFO_PLIST}"):
        info_plist = read_info_plist(layout.dist)

    export_path = layout.root / info_plist.export_name()
    partial_path = export_path.with_name(export_path.name + ".partial")
    try:
        # zip cannot store mtimes before 1980, those are clamped
        with zipfile.ZipFile(
            partial_path,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            strict_timestamps=False,
        ) as zf:
            for name in layout.dist_filenames():
                path = layout.dist / name
                zf.write(path, name)
                if path.is_dir():
                    for child in sorted(path.rglob("*")):
                        zf.write(child, child.relative_to(layout.dist).as_posix())
    except BaseException:
        partial_path.unlink(missing_ok=True)
        raise
    os.replace(partial_path, export_path)
    out.success(f"Exported {info_plist.name} to {export_path}")
    return export_path


# =============================================================================
# bootstrap
# =============================================================================


def bootstrap_workflows(
    repository: Union[str, Path],
    prefixes: list[str],
    out: OutputFormatter,
    prefs_path: Optional[Union[str, Path]] = None,
) -> list[Path]:
    """Create workflow directories for installed workflows not yet in the repo.

    Only workflows whose bundleid starts with one of prefixes are considered,
    so unrelated installed workflows are left alone.

    Returns:
        The workflow directories created
    """
    workflows_dir = Path(repository) / config.workflows_dir
    existing: set[str] = set()
    if workflows_dir.is_dir():
        for path in sorted(workflows_dir.iterdir()):
            if path.is_dir():
                raw = WorkflowLayout.from_config(path).raw
                existing.add(read_info_plist(raw).bundleid)

    workflows, warnings = list_current_workflows(prefs_path)
    for warning in warnings:
        out.warning(warning)

    needs_bootstrap = [
        w
        for w in workflows
        if any(w.info_plist.bundleid.startswith(prefix) for prefix in prefixes)
        and w.info_plist.bundleid not in existing
    ]
    if not needs_bootstrap:
        out.info(f"No new workflows for prefixes: {', '.join(prefixes)}")
        return []

    out.info(f"Found {len(needs_bootstrap)} workflow(s) to bootstrap")
    created: list[Path] = []
    for workflow in needs_bootstrap:
        info_plist = workflow.info_plist
        repository_name = info_plist.repository_name()
        layout = WorkflowLayout.from_config(workflows_dir / repository_name)
        out.print()
        out.info(
            f"Bootstrapping {repository_name} from {info_plist.name} in "
            f"{workflow.target}"
        )

        layout.root.mkdir(parents=True)
        try:
            os.symlink(workflow.target, layout.installation)
        except OSError as e:
            raise ReportableError(
                f"Failed to create symlink {layout.installation}", cause=e
            ) from e
        layout.raw.mkdir()
        package_json = {
            "name": package_name(repository_name),
            "version": info_plist.version or "1.0.0",
            "description": info_plist.description or info_plist.name,
            "author": info_plist.createdby,
            **PACKAGE_JSON_TEMPLATE,
        }
        layout.package_json.write_text(json.dumps(package_json, indent=2) + "\n")
        layout.scripts.mkdir(parents=True)
        # import-workflow needs raw/info.plist to check the link
        shutil.copy2(workflow.target / INFO_PLIST, layout.raw / INFO_PLIST)

        out.success(
            f"{layout.root}: Set installation link, wrote package.json, "
            f"created src/scripts, and copied {layout.raw_name}/{INFO_PLIST}"
        )
        out.info("Next steps:")
        out.print(layout.help("import", extra=["alfredwf bundle"]))
        created.append(layout.root)
    return created


# =============================================================================
# upversion
# =============================================================================


async def upversion_workflow(layout: WorkflowLayout, out: OutputFormatter) -> str:
    """Bump the patch version of raw/info.plist.

    Refuses when info.plist has staged or unstaged changes in git, so the
    bump can always be reverted.

    Returns:
        The new version
    """
    raw = layout.raw
    await git_update_index(raw)
    staged, unstaged = await asyncio.gather(
        git_cz(
            raw, "diff-index", *DIFF_OPTIONS, "--cached", "HEAD", "--", INFO_PLIST
        ),
        git_cz(raw, "diff-files", *DIFF_OPTIONS, "--", INFO_PLIST),
    )
    for kind, files in (("staged", staged), ("unstaged", unstaged)):
        if files:
            raise reportable_error(
                f"Cannot upversion, would overwrite {kind} file in {raw}:", *files
            )

    info_plist_path = raw / INFO_PLIST
    with report_as(f"Cannot upversion {info_plist_path}"):
        version = upversion_info_plist(info_plist_path)
    out.success(f"Bumped patch version in {info_plist_path} to {version}")
    return version


# =============================================================================
# lint
# =============================================================================


def lint_problems(info_plist: InfoPlist, package_json: Any) -> list[str]:
    """Cross-check package.json fields against info.plist."""
    if not isinstance(package_json, dict):
        return ["Cannot parse package.json"]

    def check_field(field: str, expected: Optional[str]) -> list[str]:
        if field not in package_json:
            return [f"Missing '{field}' in package.json"]
        value = package_json[field]
        if not isinstance(value, str):
            return [
                f"Field '{field}' in package.json is {json_type_name(value)} != string"
            ]
        if expected is None:
            return [
                f"Field '{field}' in package.json cannot be inferred from "
                f"{INFO_PLIST}, check Alfred configuration"
            ]
        if value != expected:
            return [
                f"Field '{field}' in package.json \"{value}\" != \"{expected}\" "
                f"inferred from {INFO_PLIST}"
            ]
        return []

    return [
        *check_field("name", package_name(info_plist.repository_name())),
        *check_field("version", info_plist.version),
        *check_field("description", info_plist.description),
        *check_field("author", info_plist.createdby),
    ]


def lint_workflow(layout: WorkflowLayout, out: OutputFormatter) -> None:
    """Check package.json agrees with raw/info.plist."""
    info_plist = read_info_plist(layout.raw)
    try:
        text = layout.package_json.read_text(encoding="utf-8")
    except OSError as e:
        raise ReportableError(f"Cannot read {layout.package_json}", cause=e) from e
    try:
        package_json = json.loads(text)
    except ValueError:
        package_json = None

    problems = lint_problems(info_plist, package_json)
    if problems:
        raise reportable_error(
            f"Lint failed - found {len(problems)} problem(s):", *problems
        )
    out.success("Lint passed")
