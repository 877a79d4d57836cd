"""CLI interface for pydotfiles."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import click

from . import __version__
from .archive import Archive, build_archive, load_archive, write_archive
from .config import ENV_ARCHIVE, ENV_CONFIG_DIR, ENV_REPO, FilePaths
from .exceptions import DotfilesError, DotfilesNotFoundError
from .manifest import (
    Manifest,
    TrackedEntry,
    load_manifest,
    parse_manifest,
    precheck_manifest,
    read_manifest_text,
    save_manifest,
)
from .output import OutputFormatter
from .sync import (
    EmbeddedSource,
    FileSource,
    FilesystemSource,
    IgnoreMatcher,
    StatusReporter,
    SyncEngine,
    SyncOperations,
    create_default_ignore_file,
    load_ignore_file,
    parse_ignore_content,
)

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Everything a command needs, loaded once per invocation."""

    paths: FilePaths
    manifest: Manifest
    ignore: IgnoreMatcher
    home: FileSource
    repo: FileSource
    archive: Optional[Archive] = None


def open_session(
    paths: FilePaths,
    embedded: bool,
    out: OutputFormatter,
    create_config_dir: bool = True,
) -> Session:
    """Load the manifest, ignore patterns and both file sources.

    In embedded mode the manifest, ignore file and repository files come
    from the archive built by ``pydotfiles bundle``. The home config
    directory is created only after the repository side loaded, and never
    when ``create_config_dir`` is False.

    Raises:
        DotfilesError: If the repository, manifest or archive cannot be loaded
    """
    archive: Optional[Archive] = None
    if embedded:
        archive = load_archive(paths.archive_file)
        manifest = parse_manifest(archive.manifest_text())
        ignore = IgnoreMatcher(parse_ignore_content(archive.ignore_text() or ""))
        repo: FileSource = EmbeddedSource(archive)
        logger.debug("Using embedded archive %s", archive.identity)
    else:
        paths.check_paths(create_config_dir=False)
        manifest = load_manifest(paths.manifest_file)
        ignore = load_ignore_file(paths.ignore_file)
        repo = FilesystemSource.for_repo(paths)

    if create_config_dir and not paths.config_dir.exists():
        out.warning(f"Config directory not found, creating: {paths.config_dir}")
        paths.config_dir.mkdir(parents=True, exist_ok=True)

    home = FilesystemSource.for_home(paths)
    return Session(paths, manifest, ignore, home, repo, archive)


def _reject_embedded(ctx: Any, out: OutputFormatter, command: str) -> None:
    if ctx.obj["embedded"]:
        out.error(
            f"Cannot {command} in embedded mode: the embedded archive is read-only"
        )
        ctx.exit(1)


@click.group()
@click.option(
    "--repo",
    envvar=ENV_REPO,
    type=click.Path(file_okay=False),
    help="Dotfiles repository (default: ~/repos/dotfiles)",
)
@click.option(
    "--config-dir",
    envvar=ENV_CONFIG_DIR,
    type=click.Path(file_okay=False),
    help="Home configuration directory (default: ~/.config)",
)
@click.option(
    "--archive",
    envvar=ENV_ARCHIVE,
    type=click.Path(dir_okay=False),
    help="Embedded archive file (default: ~/.local/share/pydotfiles/embedded.zip)",
)
@click.option(
    "--embedded",
    "-e",
    is_flag=True,
    help="Read the repository side from the embedded archive",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(__version__)
@click.pass_context
def main(
    ctx: Any,
    repo: Optional[str],
    config_dir: Optional[str],
    archive: Optional[str],
    embedded: bool,
    quiet: bool,
    json: bool,
    verbose: bool,
) -> None:
    """pydotfiles - Manage dotfiles between ~/.config and a git repository.

    Files matching patterns in the repository's .dotignore are never copied.
    """
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["paths"] = FilePaths.from_environment(repo, config_dir, archive)
    ctx.obj["embedded"] = embedded

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pydotfiles").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


def _run_direction(ctx: Any, direction: str, dry_run: bool, workers: int) -> None:
    out: OutputFormatter = ctx.obj["out"]

    if workers < 1:
        out.error("Number of workers must be at least 1")
        ctx.exit(1)

    try:
        session = open_session(ctx.obj["paths"], ctx.obj["embedded"], out)
        engine = SyncEngine(session.home, session.repo, session.ignore, out)
        if direction == "sync":
            report = engine.sync(session.manifest.entries, dry_run, workers)
        else:
            report = engine.install(session.manifest.entries, dry_run, workers)
    except KeyboardInterrupt:
        out.warning(f"\n{direction.capitalize()} cancelled by user")
        ctx.exit(130)
    except DotfilesError as e:
        out.error(str(e))
        ctx.exit(1)
    else:
        if not report.ok:
            ctx.exit(1)


@main.command()
@click.option(
    "--dry-run", is_flag=True, help="Show what would be synced without copying"
)
@click.option(
    "--workers",
    type=int,
    default=1,
    help="Number of parallel workers for copies (default: 1)",
)
@click.pass_context
def sync(ctx: Any, dry_run: bool, workers: int) -> None:
    """Sync files from the home config directory to the repository."""
    out: OutputFormatter = ctx.obj["out"]
    _reject_embedded(ctx, out, "sync")
    _run_direction(ctx, "sync", dry_run, workers)


@main.command()
@click.option(
    "--dry-run", is_flag=True, help="Show what would be installed without copying"
)
@click.option(
    "--workers",
    type=int,
    default=1,
    help="Number of parallel workers for copies (default: 1)",
)
@click.pass_context
def install(ctx: Any, dry_run: bool, workers: int) -> None:
    """Install files from the repository to the home config directory."""
    _run_direction(ctx, "install", dry_run, workers)


@main.command()
@click.pass_context
def status(ctx: Any) -> None:
    """Show the status of every file in distribution.toml."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        session = open_session(
            ctx.obj["paths"], ctx.obj["embedded"], out, create_config_dir=False
        )
        reporter = StatusReporter(session.home, session.repo, session.ignore, out)
        diff = reporter.report(session.manifest.entries)
    except DotfilesError as e:
        out.error(str(e))
        ctx.exit(1)

    if any(entry.error is not None for entry in diff):
        ctx.exit(1)


@main.command()
@click.argument("tool")
@click.argument("file")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Track the file even if it matches a .dotignore pattern",
)
@click.pass_context
def add(ctx: Any, tool: str, file: str, force: bool) -> None:
    """Add a file to distribution.toml and copy it to the repository.

    TOOL: The tool name (directory under the config directory)

    FILE: The file path relative to the tool directory
    """
    out: OutputFormatter = ctx.obj["out"]
    _reject_embedded(ctx, out, "add files")

    entry = TrackedEntry(tool, file)
    try:
        session = open_session(ctx.obj["paths"], False, out)

        if not session.home.exists(entry.logical_path):
            raise DotfilesNotFoundError(
                f"File not found: {session.paths.config_file_path(tool, file)}",
                path=entry.logical_path,
            )

        if session.ignore.is_ignored(entry.display_path) and not force:
            out.error(
                f"{entry.display_path} matches a .dotignore pattern "
                "(use --force to track it anyway)"
            )
            ctx.exit(1)

        if not session.manifest.add(tool, file):
            out.warning(f"Already tracked: {entry.display_path}")
        else:
            save_manifest(session.manifest, session.paths.manifest_file)

        SyncOperations(session.home, session.repo).copy_file(entry.logical_path)
        out.success(f"Added to tracking: {entry.display_path}")
    except DotfilesError as e:
        out.error(str(e))
        ctx.exit(1)


@main.command()
@click.argument("tool")
@click.argument("file")
@click.pass_context
def remove(ctx: Any, tool: str, file: str) -> None:
    """Remove a file from distribution.toml.

    The repository copy is left in place; the command prints how to delete it.

    TOOL: The tool name (directory under the config directory)

    FILE: The file path relative to the tool directory
    """
    out: OutputFormatter = ctx.obj["out"]
    _reject_embedded(ctx, out, "remove files")

    entry = TrackedEntry(tool, file)
    try:
        session = open_session(ctx.obj["paths"], False, out)
        session.manifest.remove(tool, file)
        save_manifest(session.manifest, session.paths.manifest_file)
    except DotfilesError as e:
        out.error(str(e))
        ctx.exit(1)

    out.info(f"Removed from distribution file: {entry.display_path}")

    repo_file = session.paths.repo_file_path(tool, file)
    if repo_file.exists():
        out.warning(f"To complete removal, manually delete the file: {repo_file}")
        out.command_hint(f"rm {repo_file}")


@main.command()
@click.pass_context
def precheck(ctx: Any) -> None:
    """Check that distribution.toml exists and has valid syntax."""
    out: OutputFormatter = ctx.obj["out"]
    paths: FilePaths = ctx.obj["paths"]

    out.header("Checking distribution file...")

    try:
        if ctx.obj["embedded"]:
            archive = load_archive(paths.archive_file)
            out.info(f"Distribution file: {paths.archive_file} (embedded)")
            content = archive.manifest_text()
        else:
            out.info(f"Distribution file: {paths.manifest_file}")
            if not paths.manifest_file.is_file():
                out.error("Distribution file not found")
                ctx.exit(1)
            out.success("Distribution file exists")
            content = read_manifest_text(paths.manifest_file)

        result = precheck_manifest(content)
    except DotfilesError as e:
        out.error(f"Precheck failed: {e}")
        ctx.exit(1)

    if out.json_output:
        out.output_json(
            {
                "valid": True,
                "lines": result.line_count,
                "tools": result.tool_count,
                "files": result.entry_count,
            }
        )
        return

    out.success("Valid TOML syntax")
    out.print_summary(
        "Distribution",
        [
            ("Line count", f"{result.line_count} lines"),
            ("Total tools", str(result.tool_count)),
            ("Tracked files", str(result.entry_count)),
        ],
    )
    out.print()
    out.success("Precheck passed successfully")


@main.command()
@click.pass_context
def init(ctx: Any) -> None:
    """Create distribution.toml and a default .dotignore in the repository."""
    out: OutputFormatter = ctx.obj["out"]
    paths: FilePaths = ctx.obj["paths"]
    _reject_embedded(ctx, out, "initialize")

    try:
        paths.repo_dir.mkdir(parents=True, exist_ok=True)
        if paths.manifest_file.exists():
            out.info(f"Distribution file exists: {paths.manifest_file}")
        else:
            save_manifest(Manifest(), paths.manifest_file)
            out.success(f"Created {paths.manifest_file}")

        if create_default_ignore_file(paths.ignore_file):
            out.success(f"Created {paths.ignore_file}")
        else:
            out.info(f"Ignore file exists: {paths.ignore_file}")
    except OSError as e:
        out.error(f"Initialization failed: {e}")
        ctx.exit(1)
    except DotfilesError as e:
        out.error(str(e))
        ctx.exit(1)


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Archive file to write (default: the --archive location)",
)
@click.pass_context
def bundle(ctx: Any, output: Optional[str]) -> None:
    """Build the embedded archive from the repository.

    The archive holds distribution.toml, .dotignore and every tracked file,
    and is used by commands run with --embedded.
    """
    out: OutputFormatter = ctx.obj["out"]
    paths: FilePaths = ctx.obj["paths"]
    _reject_embedded(ctx, out, "bundle")

    target = Path(output) if output else paths.archive_file
    try:
        paths.check_paths(create_config_dir=False)
        manifest = load_manifest(paths.manifest_file)
        archive = build_archive(paths, manifest)
        write_archive(archive, target)
    except DotfilesError as e:
        out.error(str(e))
        ctx.exit(1)

    missing = len(manifest) - archive.tracked_file_count
    out.print_summary(
        "Bundle Complete",
        [
            ("Archive", str(target)),
            ("Build identity", archive.identity),
            ("Embedded files", str(archive.tracked_file_count)),
            ("Missing files", str(missing)),
        ],
    )
    if missing and not out.json_output:
        out.warning(f"{missing} tracked file(s) were not found in the repository")
