"""
devshell — CLI entrypoint.

Usage:
    devshell --help
    devshell enter
    devshell resolve --platform linux-aarch64 --json
    eval "$(devshell shell-hook)"
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from devshell import __version__
from devshell.core.config.loader import (
    CATALOG_KINDS,
    ConfigError,
    catalog_file_from_env,
    catalog_kind_from_env,
    load_descriptor,
    platform_from_env,
)
from devshell.core.observability.logging_config import (
    ENV_LOG_FILE,
    ENV_LOG_FILE_LEVEL,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="devshell")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to devshell.yml (default: auto-detect, else built-in).",
)
@click.option(
    "--catalog",
    "catalog_kind",
    type=click.Choice(CATALOG_KINDS),
    default=None,
    help="Package catalog backend (default: $DEVSHELL_CATALOG or nix).",
)
@click.option(
    "--catalog-file",
    type=click.Path(exists=False),
    default=None,
    help="YAML package catalog to use instead of the built-in data.",
)
@click.option("--mock", is_flag=True, help="Use mock adapters (no real toolchain changes).")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    catalog_kind: str | None,
    catalog_file: str | None,
    mock: bool,
) -> None:
    """devshell — reproducible development shell for Tauri/Leptos builds."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["catalog_kind"] = catalog_kind
    ctx.obj["catalog_file"] = Path(catalog_file) if catalog_file else None
    ctx.obj["mock"] = mock

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_LOG_FILE),
        log_file_level=os.environ.get(ENV_LOG_FILE_LEVEL),
    )


# ── Helpers ─────────────────────────────────────────────────────


def _fail(message: str) -> None:
    click.secho(f"❌ {message}", fg="red", err=True)
    sys.exit(1)


def _descriptor(ctx: click.Context):
    try:
        return load_descriptor(ctx.obj.get("config_path"))
    except ConfigError as e:
        _fail(str(e))


def _catalog(ctx: click.Context, descriptor=None, realise: bool = False):
    """The selected catalog; ``realise`` when the session will use the paths."""
    from devshell.adapters.catalog import build_catalog

    try:
        kind = ctx.obj.get("catalog_kind") or catalog_kind_from_env()
        catalog_file = ctx.obj.get("catalog_file") or catalog_file_from_env()
        timeouts = {}
        if descriptor is not None:
            timeouts = {
                "timeout": descriptor.command_timeout,
                "build_timeout": descriptor.install_timeout,
            }
        return build_catalog(kind, catalog_file=catalog_file, realise=realise, **timeouts)
    except ConfigError as e:
        _fail(str(e))


def _platform(explicit: str | None) -> str:
    from devshell.core.services.platform_detect import select_platform

    return select_platform(explicit or platform_from_env()).identifier


def _registry(ctx: click.Context):
    from devshell.adapters.registry import default_registry

    return default_registry(mock_mode=ctx.obj.get("mock", False))


_STATUS_COLORS = {"ok": "green", "failed": "red", "skipped": "yellow"}


def _print_report(ctx: click.Context, report) -> None:
    for receipt in report.receipts:
        click.secho(f"   {receipt.marker} ", fg=_STATUS_COLORS[receipt.status], nl=False)
        if receipt.ok:
            click.echo(f"{receipt.action_id} ({'changed' if receipt.changed else 'unchanged'})")
            detail = receipt.output if ctx.obj.get("verbose") else ""
        elif receipt.failed:
            click.echo(receipt.action_id)
            detail = receipt.error or ""
        else:
            click.echo(f"{receipt.action_id} ({receipt.output})")
            detail = ""
        for line in detail.splitlines()[:10]:
            click.echo(f"     │ {line}")


platform_option = click.option(
    "--platform",
    "-p",
    "platform",
    default=None,
    help="Platform identifier, e.g. linux-x86_64 (default: $DEVSHELL_PLATFORM or host).",
)


# ── Commands ────────────────────────────────────────────────────


@cli.command()
@platform_option
@click.option("--dry-run", is_flag=True, help="Resolve and validate, don't bootstrap or spawn.")
@click.option("--no-bootstrap", is_flag=True, help="Skip the toolchain bootstrap.")
@click.option("--keep-going", is_flag=True, help="Don't stop at a failed bootstrap step.")
@click.option("--shell", "shell", default=None, help="Shell to run (default: $SHELL).")
@click.pass_context
def enter(
    ctx: click.Context,
    platform: str | None,
    dry_run: bool,
    no_bootstrap: bool,
    keep_going: bool,
    shell: str | None,
) -> None:
    """Enter the development shell."""
    from devshell.core.services.resolver import ResolutionError
    from devshell.core.use_cases.enter import BootstrapError, prepare_session, spawn_shell

    descriptor = _descriptor(ctx)
    target = _platform(platform)

    try:
        session = prepare_session(
            descriptor,
            target,
            _catalog(ctx, descriptor, realise=not dry_run),
            _registry(ctx),
            bootstrap=not no_bootstrap,
            dry_run=dry_run,
            continue_on_error=True if keep_going else None,
        )
    except ResolutionError as e:
        _fail(str(e))
    except BootstrapError as e:
        _print_report(ctx, e.report)
        _fail(str(e))

    if dry_run:
        click.secho(f"\n🐚 [dry-run] {descriptor.name} ({session.platform})", fg="cyan", bold=True)
        click.echo(f"   {descriptor.library_path_var}={session.library_path}")
        if session.report:
            click.echo()
            _print_report(ctx, session.report)
        click.echo()
        return

    if not ctx.obj.get("quiet"):
        click.secho(f"🐚 {descriptor.name} ({session.platform})", fg="cyan", err=True)
    sys.exit(spawn_shell(session, shell=shell))


@cli.command()
@platform_option
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def resolve(ctx: click.Context, platform: str | None, as_json: bool) -> None:
    """Resolve every library and tool for a platform."""
    from devshell.core.use_cases.resolve import resolve_for

    descriptor = _descriptor(ctx)
    result = resolve_for(descriptor, _platform(platform), _catalog(ctx, descriptor))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if not result.ok:
        _fail(result.error or "resolution failed")

    resolved = result.resolved
    assert resolved is not None  # guaranteed when ok
    supported = "" if result.supported else " (not a supported platform)"
    click.secho(f"\n📦 {descriptor.name} — {result.platform}{supported}", fg="cyan", bold=True)

    click.secho(f"   Libraries: {len(resolved.libraries)}", fg="white", bold=True)
    for artifact in resolved.libraries:
        click.echo(f"     • {artifact.name} {artifact.version}  → {artifact.lib_output}")

    click.secho(f"   Tools: {len(resolved.tools)}", fg="white", bold=True)
    for artifact in resolved.tools:
        click.echo(f"     • {artifact.name} {artifact.version}  → {artifact.path}")
    click.echo()


@cli.command("library-path")
@platform_option
@click.option("--no-inherit", is_flag=True, help="Print only the resolved entries.")
@click.pass_context
def library_path(ctx: click.Context, platform: str | None, no_inherit: bool) -> None:
    """Print the library search path a session would get."""
    from devshell.core.services.library_path import prepend_path
    from devshell.core.use_cases.resolve import resolve_for

    descriptor = _descriptor(ctx)
    result = resolve_for(descriptor, _platform(platform), _catalog(ctx, descriptor, realise=True))
    if not result.ok:
        _fail(result.error or "resolution failed")

    inherited = None if no_inherit else os.environ.get(descriptor.library_path_var)
    click.echo(prepend_path(result.library_path, inherited))


@cli.command()
@platform_option
@click.option("--dry-run", is_flag=True, help="Validate the steps without running them.")
@click.option("--keep-going", is_flag=True, help="Don't stop at a failed step.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def bootstrap(
    ctx: click.Context,
    platform: str | None,
    dry_run: bool,
    keep_going: bool,
    as_json: bool,
) -> None:
    """Run the toolchain bootstrap sequence without entering a shell."""
    from devshell.core.services.library_path import build_session_env
    from devshell.core.services.resolver import ResolutionError, resolve_environment
    from devshell.core.use_cases.enter import run_bootstrap

    descriptor = _descriptor(ctx)
    try:
        catalog = _catalog(ctx, descriptor, realise=not dry_run)
        resolved = resolve_environment(descriptor, _platform(platform), catalog)
    except ResolutionError as e:
        _fail(str(e))

    env = build_session_env(resolved, descriptor, os.environ)
    report = run_bootstrap(
        descriptor,
        _registry(ctx),
        env,
        dry_run=dry_run,
        continue_on_error=True if keep_going else None,
    )

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        sys.exit(0 if report.all_ok else 1)

    mode_label = "[dry-run] " if dry_run else "[mock] " if ctx.obj.get("mock") else ""
    click.secho(f"\n⚡ {mode_label}bootstrap — {descriptor.name}", fg="cyan", bold=True)
    click.echo()
    _print_report(ctx, report)

    click.echo()
    status_color = {"ok": "green", "partial": "yellow", "failed": "red"}.get(report.status, "white")
    click.secho(
        f"   Result: {report.succeeded}/{report.total} succeeded, {report.changed} changed",
        fg=status_color,
        bold=True,
    )
    click.echo()
    if not report.all_ok:
        sys.exit(1)


@cli.command("shell-hook")
@platform_option
@click.pass_context
def shell_hook(ctx: click.Context, platform: str | None) -> None:
    """Print a POSIX sh fragment that activates the environment."""
    from devshell.core.services.shell_hook import render_shell_hook
    from devshell.core.use_cases.resolve import resolve_for

    descriptor = _descriptor(ctx)
    result = resolve_for(descriptor, _platform(platform), _catalog(ctx, descriptor, realise=True))
    if not result.ok:
        _fail(result.error or "resolution failed")
    assert result.resolved is not None
    click.echo(render_shell_hook(descriptor, result.resolved), nl=False)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def platforms(ctx: click.Context, as_json: bool) -> None:
    """Show which platforms resolve completely."""
    from devshell.core.use_cases.resolve import check_platforms

    descriptor = _descriptor(ctx)
    results = check_platforms(descriptor, _catalog(ctx, descriptor))

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "platform": r.platform,
                        "supported": r.supported,
                        "ok": r.ok,
                        "missing": r.missing,
                    }
                    for r in results
                ],
                indent=2,
            )
        )
        return

    click.secho(f"\n🖥️  Platforms — {descriptor.name}", fg="cyan", bold=True)
    for r in results:
        label = " (supported)" if r.supported else ""
        if r.ok:
            click.secho(f"   ✓ {r.platform}{label}", fg="green")
        else:
            click.secho(f"   ✗ {r.platform}{label}", fg="red" if r.supported else "yellow")
            click.echo(f"     missing: {', '.join(r.missing)}")
    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def doctor(ctx: click.Context, as_json: bool) -> None:
    """Check which external tools are available on this host."""
    status = _registry(ctx).adapter_status()

    if as_json:
        click.echo(json.dumps(status, indent=2))
        return

    click.secho("\n🩺 Adapters", fg="cyan", bold=True)
    for name, info in status.items():
        if info["available"]:
            click.secho(f"   ✓ {name}", fg="green")
        else:
            click.secho(f"   ✗ {name} (not found)", fg="yellow")
    click.echo()


@cli.group()
def config() -> None:
    """Environment descriptor commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate devshell.yml (or the built-in environment)."""
    from devshell.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"), catalog=_catalog(ctx))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.descriptor is not None  # guaranteed when valid
        source = "built-in" if result.builtin else str(result.config_path)
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Environment: {result.descriptor.name} ({source})")
        click.echo(f"   Libraries: {len(result.descriptor.libraries)}")
        click.echo(f"   Tools: {len(result.descriptor.tools)}")
        click.echo(f"   Platforms: {', '.join(result.descriptor.platforms)}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
