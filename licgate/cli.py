"""
Command-line interface for licgate.
"""

from __future__ import annotations

import os
from pathlib import Path

import click

from licgate.client.application.license_manager import LicenseManager
from licgate.client.domain.registry import EntitlementRegistry
from licgate.common.config import Config
from licgate.common.exceptions import LicenseInitializationError
from licgate.common.models import ClientConfig


def _manager(ctx: click.Context) -> LicenseManager:
    try:
        return LicenseManager(ctx.obj)
    except LicenseInitializationError as e:
        cause = e.__cause__ or e
        msg = f"{e}: {cause}"
        raise click.ClickException(msg) from e


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the license cache (default: from LICGATE_DATA_DIR or ~/.licgate)",
)
@click.option(
    "--api-url",
    default=None,
    help="Validation backend URL (default: from LICGATE_API_URL)",
)
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None, api_url: str | None) -> None:
    """licgate license manager CLI"""
    ctx.obj = ClientConfig(data_dir=data_dir, api_url=api_url)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Validate the cached license and show its status"""
    with _manager(ctx) as manager:
        outcome = manager.initialize()
        current = manager.current_status
        click.echo(f"State: {current.state.value}")
        click.echo(f"Access level: {current.access_level.display_name}")
        click.echo(f"Plan: {current.plan_type}")
        key = manager.get_masked_license_key()
        if key:
            click.echo(f"License key: {key}")
        if current.expiry_date:
            click.echo(f"Expires: {current.expiry_date.isoformat()}")
        if current.last_validation:
            click.echo(f"Last validated: {current.last_validation.isoformat()}")
        click.echo(outcome.message)


@cli.command()
@click.argument("license_key")
@click.pass_context
def activate(ctx: click.Context, license_key: str) -> None:
    """Validate and store a license key"""
    with _manager(ctx) as manager:
        outcome = manager.set_license_key(license_key)
        if not outcome.is_success:
            raise click.ClickException(outcome.message)
        click.echo(f"License activated: {manager.current_status.plan_type}")


@cli.command()
@click.pass_context
def deactivate(ctx: click.Context) -> None:
    """Remove the cached license"""
    with _manager(ctx) as manager:
        manager.cache.clear()
    click.echo("License removed")


@cli.command()
@click.argument("feature_id")
@click.pass_context
def check(ctx: click.Context, feature_id: str) -> None:
    """Check whether a feature is available with the cached license"""
    with _manager(ctx) as manager:
        manager.initialize()
        decision = manager.check_feature_access(feature_id)
        if decision.allowed:
            click.echo(f"{feature_id}: allowed")
        else:
            reason = decision.reason or "not allowed"
            click.echo(f"{feature_id}: denied ({reason})")
            ctx.exit(1)


@cli.command()
def features() -> None:
    """List features and the plan they require"""
    for feature in EntitlementRegistry().features():
        click.echo(
            f"{feature.feature_id:<32} {feature.required_level.display_name:<8} "
            f"{feature.display_name}"
        )


@cli.command()
@click.option(
    "--licenses-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON license table (default: <data dir>/server_licenses.json)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind server to (default: from LICGATE_SERVER_HOST env or 127.0.0.1)",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Port to bind server to (default: from LICGATE_SERVER_PORT env or 8000)",
)
@click.option(
    "--accept-any",
    is_flag=True,
    help="Accept unknown license keys as Pro licenses",
)
def serve(
    licenses_file: Path | None,
    host: str | None,
    port: int | None,
    accept_any: bool,  # noqa: FBT001
) -> None:
    """Start the development validation backend"""
    # Set environment variables before building the config
    if host:
        os.environ["LICGATE_SERVER_HOST"] = host
    if port:
        os.environ["LICGATE_SERVER_PORT"] = str(port)

    from licgate.server import start_server  # noqa: PLC0415

    start_server(Config(), licenses_file, accept_any=accept_any)


if __name__ == "__main__":
    cli()
