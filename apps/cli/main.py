"""CLI application for cockpit-repack."""

from contextlib import contextmanager
from pathlib import Path

import typer

from repack import log
from repack.config import BuildConfig
from repack.errors import PipelineError
from repack.pipeline import Pipeline, parse_version

app = typer.Typer(
    name="cockpit-repack",
    help="cockpit-repack - Repackage a Cockpit release as an npm module",
    add_completion=False,
    invoke_without_command=True,
    epilog=(
        "Environment: VERSION (default 323), PACKAGE_NAME (default cockpit-base1), "
        "BUILD_DIR (default build), OUTPUT_DIR (default cockpit), NPM_REGISTRY."
    ),
)


@contextmanager
def fatal_errors():
    """Turn a failed stage into a logged error and exit status 1."""
    try:
        yield
    except (PipelineError, OSError) as e:
        log.error(str(e))
        raise typer.Exit(1)


def _pipeline(ctx: typer.Context) -> Pipeline:
    return Pipeline(ctx.obj)


@app.callback()
def main(
    ctx: typer.Context,
    workdir: Path | None = typer.Option(
        None, "--workdir", "-C", help="Directory holding the tarball, build and output directories"
    ),
) -> None:
    """Resolve configuration once for every command."""
    overrides = {"workdir": workdir.resolve()} if workdir else {}
    ctx.obj = BuildConfig.from_env(**overrides)

    if ctx.invoked_subcommand is None:
        log.warn("No command specified. Use 'help' to see available commands.")
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


@app.command()
def download(ctx: typer.Context, version: str | None = typer.Argument(None, help="Cockpit release")) -> None:
    """Download cockpit tarball."""
    with fatal_errors():
        _pipeline(ctx).download(version)


@app.command()
def extract(ctx: typer.Context, version: str | None = typer.Argument(None, help="Cockpit release")) -> None:
    """Extract tarball."""
    with fatal_errors():
        _pipeline(ctx).extract(version)


@app.command("configure-build")
def configure_build(ctx: typer.Context) -> None:
    """Configure build environment (ES module output)."""
    with fatal_errors():
        _pipeline(ctx).configure_build()


@app.command("install-deps")
def install_deps(ctx: typer.Context) -> None:
    """Install npm dependencies."""
    with fatal_errors():
        _pipeline(ctx).install_deps()


@app.command("install-ts")
def install_ts(ctx: typer.Context) -> None:
    """Install TypeScript globally."""
    with fatal_errors():
        _pipeline(ctx).install_ts()


@app.command()
def build(ctx: typer.Context) -> None:
    """Build cockpit."""
    with fatal_errors():
        _pipeline(ctx).build()


@app.command()
def patch(ctx: typer.Context) -> None:
    """Patch cockpit."""
    with fatal_errors():
        _pipeline(ctx).patch()


@app.command()
def version(
    ctx: typer.Context,
    major: str | None = typer.Argument(None, help="Major version line"),
    package: str | None = typer.Argument(None, help="npm package name"),
) -> None:
    """Determine next npm version."""
    with fatal_errors():
        next_version = _pipeline(ctx).version(major, package)
    typer.echo(str(next_version))


@app.command()
def package(
    ctx: typer.Context,
    next_version: str | None = typer.Argument(None, metavar="VERSION", help="Version to package, e.g. 323.0.1"),
) -> None:
    """Build base package."""
    with fatal_errors():
        _pipeline(ctx).package(parse_version(next_version))


@app.command()
def copy(ctx: typer.Context) -> None:
    """Copy additional files."""
    with fatal_errors():
        _pipeline(ctx).copy()


@app.command()
def publish(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", help="Run npm publish with --dry-run"),
) -> None:
    """Publish to npm."""
    with fatal_errors():
        _pipeline(ctx).publish(dry_run=dry_run)


@app.command()
def cleanup(
    ctx: typer.Context,
    version: str | None = typer.Argument(None, help="Cockpit release (accepted, not used)"),
) -> None:
    """Clean up artifacts."""
    with fatal_errors():
        _pipeline(ctx).cleanup()


@app.command()
def full(
    ctx: typer.Context,
    version: str | None = typer.Argument(None, help="Cockpit release"),
    publish: bool = typer.Argument(False, help="true to publish after packaging"),
) -> None:
    """Run full build (PUBLISH=true to publish)."""
    with fatal_errors():
        _pipeline(ctx).full(version, publish=publish)


@app.command("help")
def show_help(ctx: typer.Context) -> None:
    """Show this help."""
    typer.echo(ctx.parent.get_help())


if __name__ == "__main__":
    app()
