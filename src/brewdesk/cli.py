"""Main CLI entry point for brewdesk."""

import json
import logging
from importlib.metadata import version
from pathlib import Path

import click

from .brew import BrewNotFoundError, BrewRunner, InstallationProgress
from .catalog import CatalogError, get_catalog, get_package
from .config import (
    Config,
    ConfigValidationError,
    ConfigVersionError,
    default_config_path,
)
from .constants import CATEGORY_LABELS, status_marker
from .detect import DetectionResult, SoftwareDetector, create_detector

logger = logging.getLogger(__name__)


def _load_config(config_path: Path) -> Config:
    """Load user settings, exiting with a message if they are invalid."""
    try:
        return Config.load_or_default(config_path)
    except (ConfigVersionError, ConfigValidationError) as e:
        click.echo(f"Invalid config {config_path}: {e}", err=True)
        raise SystemExit(1) from None


def _format_result(name: str, result: DetectionResult) -> str:
    line = f"  {name:<22} {status_marker(result.installed, result.version)}"
    if result.installed and result.source:
        line += f"  ({result.source}"
        if result.path:
            line += f": {result.path}"
        line += ")"
    return line


def _echo_output(line: str, stream: str) -> None:
    click.echo(line.rstrip("\n"), err=stream == "stderr")


def _echo_progress(progress: InstallationProgress) -> None:
    logger.debug(
        f"{progress.id}: {progress.status} {progress.progress} {progress.message}"
    )


def _run_mutation(ctx: click.Context, action: str, package_name: str) -> None:
    """Shared body of install/uninstall."""
    detector: SoftwareDetector = ctx.obj["detector"]

    try:
        package = get_package(package_name)
    except CatalogError as e:
        click.echo(str(e), err=True)
        raise SystemExit(1) from None

    runner = BrewRunner(detector)
    config = detector.get_package_config(package.name)
    run = runner.install if action == "install" else runner.uninstall

    verb = "Installing" if action == "install" else "Uninstalling"
    click.echo(f"{verb} {package.name}...")

    try:
        result = run(
            package.name,
            brew_name=config.brew_name,
            is_cask=package.is_cask,
            on_output=_echo_output,
            on_progress=_echo_progress,
        )
    except BrewNotFoundError as e:
        click.echo(str(e), err=True)
        raise SystemExit(1) from None
    except KeyboardInterrupt:
        click.echo(f"\n{verb} cancelled.", err=True)
        raise SystemExit(130) from None

    if not result.success:
        info = result.error_info
        message = info.message if info else "Unknown error"
        click.echo(f"\n{action.capitalize()} failed: {message}", err=True)
        raise SystemExit(1)

    detection = detector.detect(package.name)
    click.echo(f"\n{action.capitalize()} complete.")
    click.echo(_format_result(package.name, detection))


@click.group()
@click.version_option(version=version("brewdesk"), prog_name="brewdesk")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (default: $BREWDESK_CONFIG or ~/.brewdesk.yaml)",
)
@click.option("--debug", is_flag=True, help="Enable verbose detection output")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, debug: bool) -> None:
    """brewdesk - install developer tools with Homebrew and see what's installed."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="[DEBUG] %(name)s: %(message)s",
        )

    config = _load_config(config_path or default_config_path())

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["detector"] = create_detector(config.cache_ttl, config.packages)


@main.command()
@click.argument("packages", nargs=-1)
@click.option("--json", "as_json", is_flag=True, help="Output results as JSON")
@click.option("--refresh", is_flag=True, help="Ignore cached results")
@click.pass_context
def status(
    ctx: click.Context, packages: tuple[str, ...], as_json: bool, refresh: bool
) -> None:
    """Show whether PACKAGES (default: the whole catalog) are installed."""
    detector: SoftwareDetector = ctx.obj["detector"]
    names = list(packages) or [pkg.name for pkg in get_catalog()]

    if refresh:
        for name in names:
            detector.invalidate_cache(name)

    results = detector.detect_many(names)

    if as_json:
        data = {name: result.to_dict() for name, result in results.items()}
        click.echo(json.dumps(data, indent=2))
        return

    installed = sum(1 for result in results.values() if result.installed)
    click.echo(f"{installed}/{len(results)} installed\n")
    for name, result in results.items():
        click.echo(_format_result(name, result))


@main.command(name="list")
@click.option(
    "--category",
    type=click.Choice(sorted(CATEGORY_LABELS)),
    default=None,
    help="Only show one category",
)
def list_packages(category: str | None) -> None:
    """List the packages available in the catalog."""
    catalog = get_catalog()

    for key, label in CATEGORY_LABELS.items():
        if category and key != category:
            continue
        entries = [pkg for pkg in catalog if pkg.category == key]
        if not entries:
            continue
        click.echo(f"{label}:")
        for pkg in entries:
            cask = " (cask)" if pkg.is_cask else ""
            click.echo(f"  • {pkg.name}{cask} - {pkg.description}")
        click.echo()


@main.command()
@click.argument("package")
@click.pass_context
def install(ctx: click.Context, package: str) -> None:
    """Install PACKAGE from the catalog with Homebrew."""
    _run_mutation(ctx, "install", package)


@main.command()
@click.argument("package")
@click.pass_context
def uninstall(ctx: click.Context, package: str) -> None:
    """Uninstall PACKAGE with Homebrew."""
    _run_mutation(ctx, "uninstall", package)


if __name__ == "__main__":
    main()
