"""Main CLI entry point for the artifact-sync command.

This module provides the Typer application that serves as the entry point
for the artifact-sync command-line tool. Each operation (pull, push,
compare, delete) is a subcommand sharing the artifact type flags; global
options (verbosity, log directory, colors, working directory) belong to
the application callback.
"""

import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer

from src.cli.errors import ConfigError, InitError
from src.cli.init_command import InitCommand
from src.cli.models import ExitCode, ServiceTier
from src.cli.output import OutputHandler
from src.cli.sync_command import SyncCommand
from src.sync_engine.models import (
    ArtifactType,
    ArtifactTypeSelector,
    AssetScope,
    OperationKind,
    SyncOptions,
)

__version__ = "0.1.0"

app = typer.Typer(
    name="artifact-sync",
    help="""Synchronize artifacts between a local directory and a content service.

QUICK START:
  artifact-sync pull                        # Pull modified web assets
  artifact-sync pull -A --ignore-timestamps # Pull every authoring artifact
  artifact-sync push -t -c                  # Push modified types and content
  artifact-sync compare -a --source ./a --target ./b""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)


@dataclass
class GlobalOptions:
    """Options given before the subcommand."""
    verbosity: int = 0
    no_color: bool = False
    working_dir: str = "."
    options_path: Optional[str] = None


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)
    # Repeated invocations in one process (tests) must not stack handlers
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter("%(asctime)s [%(levelname)8s] %(message)s", datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"artifact-sync_{timestamp}.log"

        file_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt=date_format
        )
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def build_selectors(
    assets: bool = False,
    webassets: bool = False,
    types: bool = False,
    content: bool = False,
    categories: bool = False,
    layouts: bool = False,
    layout_mappings: bool = False,
    renditions: bool = False,
    image_profiles: bool = False,
    sites: bool = False,
    pages: bool = False,
    publishing_profiles: bool = False,
    site_revisions: bool = False,
    publishing_sources: bool = False,
    default_content: bool = False,
    all_authoring: bool = False,
) -> List[ArtifactTypeSelector]:
    """Turn the artifact type flags into selectors.

    Without any flag, web assets are selected.
    """
    if all_authoring:
        assets = webassets = types = content = categories = True
        layouts = layout_mappings = renditions = image_profiles = True
        sites = pages = True

    selectors = []
    if assets or webassets:
        if assets and webassets:
            scope = AssetScope.BOTH
        elif assets:
            scope = AssetScope.CONTENT_ASSETS
        else:
            scope = AssetScope.WEB_ASSETS
        selectors.append(ArtifactTypeSelector(ArtifactType.ASSETS, scope))

    flags = [
        (image_profiles, ArtifactType.IMAGE_PROFILES),
        (categories, ArtifactType.CATEGORIES),
        (layouts, ArtifactType.LAYOUTS),
        (layout_mappings, ArtifactType.LAYOUT_MAPPINGS),
        (renditions, ArtifactType.RENDITIONS),
        (types, ArtifactType.TYPES),
        (default_content, ArtifactType.DEFAULT_CONTENT),
        (content, ArtifactType.CONTENT),
        (sites, ArtifactType.SITES),
        (pages, ArtifactType.PAGES),
        (publishing_profiles, ArtifactType.PUBLISHING_PROFILES),
        (site_revisions, ArtifactType.SITE_REVISIONS),
        (publishing_sources, ArtifactType.PUBLISHING_SOURCES),
    ]
    selectors.extend(ArtifactTypeSelector(artifact_type) for flag, artifact_type in flags if flag)

    if not selectors:
        logger.debug("No artifact types specified, using web assets")
        selectors.append(ArtifactTypeSelector(ArtifactType.ASSETS, AssetScope.WEB_ASSETS))
    return selectors


# Artifact type flags shared by every subcommand
ASSETS = typer.Option(False, "--assets", "-a", help="Include content assets")
WEBASSETS = typer.Option(False, "--webassets", "-w", help="Include web assets (the default)")
TYPES = typer.Option(False, "--types", "-t", help="Include content types")
CONTENT = typer.Option(False, "--content", "-c", help="Include content items")
CATEGORIES = typer.Option(False, "--categories", "-C", help="Include categories")
LAYOUTS = typer.Option(False, "--layouts", "-l", help="Include layouts")
LAYOUT_MAPPINGS = typer.Option(False, "--layout-mappings", "-m", help="Include layout mappings")
RENDITIONS = typer.Option(False, "--renditions", "-r", help="Include renditions")
IMAGE_PROFILES = typer.Option(False, "--image-profiles", "-i", help="Include image profiles")
SITES = typer.Option(False, "--sites", "-s", help="Include sites")
PAGES = typer.Option(False, "--pages", "-p", help="Include pages (pulling pages pulls sites too)")
PUBLISHING_PROFILES = typer.Option(False, "--publishing-profiles", "-P", help="Include publishing profiles")
SITE_REVISIONS = typer.Option(False, "--site-revisions", "-R", help="Include site revisions")
PUBLISHING_SOURCES = typer.Option(False, "--publishing-sources", "-S", help="Include publishing sources")
DEFAULT_CONTENT = typer.Option(False, "--default-content", help="Include default content")
ALL_AUTHORING = typer.Option(False, "--all-authoring", "-A", help="Include all authoring artifact types")

IGNORE_TIMESTAMPS = typer.Option(
    False, "--ignore-timestamps", help="Include all items, not only the modified ones"
)
MANIFEST = typer.Option(None, "--manifest", help="Only include the items listed in this manifest", metavar="NAME")
SITE_CONTEXT = typer.Option(None, "--site-context", help="Only include pages of this site", metavar="SITE_ID")
CONTINUE_ON_ERROR = typer.Option(
    None,
    "--continue-on-error/--stop-on-error",
    help="Keep going after an artifact type fails (default from options file)",
)


def _execute(
    ctx: typer.Context,
    operation: OperationKind,
    selectors: List[ArtifactTypeSelector],
    sync_options: SyncOptions,
    continue_on_error: Optional[bool],
) -> None:
    global_options: GlobalOptions = ctx.obj or GlobalOptions()
    output = OutputHandler(verbosity=global_options.verbosity, no_color=global_options.no_color)

    logger.info(
        f"{operation.value}: {', '.join(selector.name for selector in selectors)}"
    )
    sync_cmd = SyncCommand(
        working_dir=global_options.working_dir,
        options_path=global_options.options_path,
        output_handler=output,
    )
    exit_code = sync_cmd.run(operation, selectors, sync_options, continue_on_error=continue_on_error)
    raise typer.Exit(exit_code)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    working_dir: str = typer.Option(
        ".",
        "--dir",
        help="Local working directory holding the artifacts",
        metavar="DIR",
    ),
    options_path: Optional[str] = typer.Option(
        None,
        "--options",
        help="Options file (default: DIR/.artifact-sync/options.yaml)",
        metavar="FILE",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        is_eager=True,
    ),
) -> None:
    """Synchronize artifacts between a local directory and a content service."""
    if version:
        typer.echo(f"artifact-sync version {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    _configure_logging(verbosity, logdir)
    ctx.obj = GlobalOptions(
        verbosity=verbosity,
        no_color=no_color,
        working_dir=working_dir,
        options_path=options_path,
    )


@app.command()
def pull(
    ctx: typer.Context,
    assets: bool = ASSETS,
    webassets: bool = WEBASSETS,
    types: bool = TYPES,
    content: bool = CONTENT,
    categories: bool = CATEGORIES,
    layouts: bool = LAYOUTS,
    layout_mappings: bool = LAYOUT_MAPPINGS,
    renditions: bool = RENDITIONS,
    image_profiles: bool = IMAGE_PROFILES,
    sites: bool = SITES,
    pages: bool = PAGES,
    publishing_profiles: bool = PUBLISHING_PROFILES,
    site_revisions: bool = SITE_REVISIONS,
    publishing_sources: bool = PUBLISHING_SOURCES,
    default_content: bool = DEFAULT_CONTENT,
    all_authoring: bool = ALL_AUTHORING,
    ignore_timestamps: bool = IGNORE_TIMESTAMPS,
    deletions: bool = typer.Option(
        False, "--deletions", help="Delete local items that no longer exist on the service"
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="With --deletions: delete without asking"
    ),
    manifest: Optional[str] = MANIFEST,
    write_manifest: Optional[str] = typer.Option(
        None, "--write-manifest", help="Write a manifest of the pulled items", metavar="NAME"
    ),
    write_deletions_manifest: Optional[str] = typer.Option(
        None,
        "--write-deletions-manifest",
        help="With --deletions: write a manifest of the deleted items",
        metavar="NAME",
    ),
    site_context: Optional[str] = SITE_CONTEXT,
    continue_on_error: Optional[bool] = CONTINUE_ON_ERROR,
) -> None:
    """Pull artifacts from the service into the working directory."""
    selectors = build_selectors(
        assets, webassets, types, content, categories, layouts, layout_mappings,
        renditions, image_profiles, sites, pages, publishing_profiles,
        site_revisions, publishing_sources, default_content, all_authoring,
    )
    options = SyncOptions(
        ignore_timestamps=ignore_timestamps,
        deletions=deletions,
        quiet=quiet,
        verbose=_verbose(ctx),
        manifest=manifest,
        write_manifest=write_manifest,
        deletions_manifest=write_deletions_manifest,
        site_id=site_context,
    )
    _execute(ctx, OperationKind.PULL, selectors, options, continue_on_error)


@app.command()
def push(
    ctx: typer.Context,
    assets: bool = ASSETS,
    webassets: bool = WEBASSETS,
    types: bool = TYPES,
    content: bool = CONTENT,
    categories: bool = CATEGORIES,
    layouts: bool = LAYOUTS,
    layout_mappings: bool = LAYOUT_MAPPINGS,
    renditions: bool = RENDITIONS,
    image_profiles: bool = IMAGE_PROFILES,
    sites: bool = SITES,
    pages: bool = PAGES,
    publishing_profiles: bool = PUBLISHING_PROFILES,
    site_revisions: bool = SITE_REVISIONS,
    publishing_sources: bool = PUBLISHING_SOURCES,
    default_content: bool = DEFAULT_CONTENT,
    all_authoring: bool = ALL_AUTHORING,
    ignore_timestamps: bool = IGNORE_TIMESTAMPS,
    manifest: Optional[str] = MANIFEST,
    site_context: Optional[str] = SITE_CONTEXT,
    continue_on_error: Optional[bool] = CONTINUE_ON_ERROR,
) -> None:
    """Push artifacts from the working directory to the service."""
    selectors = build_selectors(
        assets, webassets, types, content, categories, layouts, layout_mappings,
        renditions, image_profiles, sites, pages, publishing_profiles,
        site_revisions, publishing_sources, default_content, all_authoring,
    )
    options = SyncOptions(
        ignore_timestamps=ignore_timestamps,
        verbose=_verbose(ctx),
        manifest=manifest,
        site_id=site_context,
    )
    _execute(ctx, OperationKind.PUSH, selectors, options, continue_on_error)


@app.command()
def delete(
    ctx: typer.Context,
    assets: bool = ASSETS,
    webassets: bool = WEBASSETS,
    types: bool = TYPES,
    content: bool = CONTENT,
    categories: bool = CATEGORIES,
    layouts: bool = LAYOUTS,
    layout_mappings: bool = LAYOUT_MAPPINGS,
    renditions: bool = RENDITIONS,
    image_profiles: bool = IMAGE_PROFILES,
    sites: bool = SITES,
    pages: bool = PAGES,
    publishing_profiles: bool = PUBLISHING_PROFILES,
    site_revisions: bool = SITE_REVISIONS,
    publishing_sources: bool = PUBLISHING_SOURCES,
    default_content: bool = DEFAULT_CONTENT,
    all_authoring: bool = ALL_AUTHORING,
    manifest: Optional[str] = MANIFEST,
    site_context: Optional[str] = SITE_CONTEXT,
    continue_on_error: Optional[bool] = CONTINUE_ON_ERROR,
) -> None:
    """Delete artifacts from the service."""
    selectors = build_selectors(
        assets, webassets, types, content, categories, layouts, layout_mappings,
        renditions, image_profiles, sites, pages, publishing_profiles,
        site_revisions, publishing_sources, default_content, all_authoring,
    )
    options = SyncOptions(verbose=_verbose(ctx), manifest=manifest, site_id=site_context)
    _execute(ctx, OperationKind.DELETE, selectors, options, continue_on_error)


@app.command()
def compare(
    ctx: typer.Context,
    source: Optional[str] = typer.Option(
        None, "--source", help="Source directory or service URL", metavar="DIR_OR_URL"
    ),
    target: Optional[str] = typer.Option(
        None, "--target", help="Target directory or service URL", metavar="DIR_OR_URL"
    ),
    assets: bool = ASSETS,
    webassets: bool = WEBASSETS,
    types: bool = TYPES,
    content: bool = CONTENT,
    categories: bool = CATEGORIES,
    layouts: bool = LAYOUTS,
    layout_mappings: bool = LAYOUT_MAPPINGS,
    renditions: bool = RENDITIONS,
    image_profiles: bool = IMAGE_PROFILES,
    sites: bool = SITES,
    pages: bool = PAGES,
    publishing_profiles: bool = PUBLISHING_PROFILES,
    site_revisions: bool = SITE_REVISIONS,
    publishing_sources: bool = PUBLISHING_SOURCES,
    default_content: bool = DEFAULT_CONTENT,
    all_authoring: bool = ALL_AUTHORING,
    site_context: Optional[str] = SITE_CONTEXT,
    continue_on_error: Optional[bool] = CONTINUE_ON_ERROR,
) -> None:
    """Compare artifacts between two directories or services."""
    selectors = build_selectors(
        assets, webassets, types, content, categories, layouts, layout_mappings,
        renditions, image_profiles, sites, pages, publishing_profiles,
        site_revisions, publishing_sources, default_content, all_authoring,
    )
    options = SyncOptions(
        verbose=_verbose(ctx),
        site_id=site_context,
        compare_source=source,
        compare_target=target,
    )
    _execute(ctx, OperationKind.COMPARE, selectors, options, continue_on_error)


@app.command()
def init(
    ctx: typer.Context,
    url: Optional[str] = typer.Option(
        None, "--url", help="Service URL (fallback for ARTIFACT_SYNC_URL)", metavar="URL"
    ),
    username: Optional[str] = typer.Option(
        None, "--user", help="User name (fallback for ARTIFACT_SYNC_USER)", metavar="USER"
    ),
    tier: ServiceTier = typer.Option(ServiceTier.STANDARD, "--tier", help="Feature tier of the service"),
    helper: Optional[List[str]] = typer.Option(
        None, "--helper", help="Helper reference TYPE=module:attribute (repeatable)", metavar="SPEC"
    ),
    stop_on_error: bool = typer.Option(
        False, "--stop-on-error", help="Stop at the first failing artifact type by default"
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing options file"),
) -> None:
    """Create the options file for the working directory."""
    global_options: GlobalOptions = ctx.obj or GlobalOptions()
    output = OutputHandler(verbosity=global_options.verbosity, no_color=global_options.no_color)

    try:
        init_cmd = InitCommand(working_dir=global_options.working_dir, options_path=global_options.options_path)
        path = init_cmd.run(
            url=url,
            username=username,
            tier=tier,
            helper_specs=helper,
            continue_on_error=not stop_on_error,
            force=force,
        )
    except ConfigError as e:
        logger.error(f"Initialization failed: {e}")
        output.error(f"Initialization failed: {e}")
        raise typer.Exit(ExitCode.CONFIG_ERROR)
    except InitError as e:
        logger.error(f"Initialization failed: {e}")
        output.error(f"Initialization failed: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    except Exception as e:
        logger.exception("Unexpected error during initialization")
        output.error(f"Unexpected error: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    output.success(f"Options written to {path}")
    output.info("Next steps:")
    output.info("  1. Set ARTIFACT_SYNC_PASSWORD (or add it to .env)")
    output.info("  2. Run 'artifact-sync pull' to start syncing")
    raise typer.Exit(ExitCode.SUCCESS)


def _verbose(ctx: typer.Context) -> bool:
    global_options: GlobalOptions = ctx.obj or GlobalOptions()
    return global_options.verbosity >= 1


def main() -> None:
    """Main entry point for the CLI application.

    This function is called when the module is executed directly or
    when the console script is invoked.
    """
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
