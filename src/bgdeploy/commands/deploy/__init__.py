"""Deploy command group."""

import tempfile
from pathlib import Path
from typing import IO

import click

from bgdeploy.artifacts import Extractor
from bgdeploy.config import EnvironmentConfig, load_credentials
from bgdeploy.core.context import BGDeployContext, pass_context
from bgdeploy.core.exceptions import BGDeployError
from bgdeploy.core.output import format_duration
from bgdeploy.deploy import BlueGreenDeployer, DeploymentExecutor, DeploymentInfo


def _target_options(func):
    """Options shared by every command that talks to a foundation."""
    func = click.option("--space", required=True, help="Cloud Foundry space")(func)
    func = click.option("--org", required=True, help="Cloud Foundry org")(func)
    func = click.option("--foundation", default=None, help="Foundation API URL within the environment")(func)
    func = click.option("-e", "--environment", required=True, help="Environment name from config")(func)
    func = click.option("--app", "app_name", required=True, help="Application name")(func)
    return func


def _resolve(
    ctx: BGDeployContext,
    app_name: str,
    environment: str,
    foundation: str | None,
    org: str,
    space: str,
    instances: int | None = None,
) -> tuple[EnvironmentConfig, str, DeploymentInfo]:
    """Resolve the environment, foundation URL and deployment info."""
    env_config = ctx.config.get_environment(environment)
    foundation_url = env_config.get_foundation(foundation)
    credentials = load_credentials()

    info = DeploymentInfo(
        app_name=app_name,
        instances=env_config.instances if instances is None else instances,
        username=credentials.username,
        password=credentials.password,
        org=org,
        space=space,
        skip_ssl=env_config.skip_ssl,
        domain=env_config.domain,
    )
    return env_config, foundation_url, info


def _raw_output() -> IO[bytes]:
    return click.get_binary_stream("stdout")


def _clean_up(ctx: BGDeployContext, executor: DeploymentExecutor, foundation_url: str) -> None:
    """Release the courier session, logging a failure instead of raising it."""
    try:
        executor.clean_up()
    except (BGDeployError, OSError) as e:
        ctx.logger.error("clean up failed", foundation=foundation_url, error=e)


@click.group()
@pass_context
def deploy(ctx: BGDeployContext) -> None:
    """Blue-green deployments - push, rollback, delete-venerable, exists.

    \b
    Examples:
        bgdeploy deploy push app.zip --app my-app -e test --org my-org --space dev
        bgdeploy deploy rollback --app my-app -e test --org my-org --space dev
        bgdeploy deploy exists --app my-app -e test --org my-org --space dev
    """
    pass


@deploy.command("push")
@click.argument("artifact", type=click.Path(exists=True))
@_target_options
@click.option("--instances", type=click.IntRange(min=0), default=None, help="Instance count (default from environment)")
@click.option("--manifest", type=click.Path(exists=True, dir_okay=False), help="Manifest to stage with a zip artifact")
@pass_context
def push(
    ctx: BGDeployContext,
    artifact: str,
    app_name: str,
    environment: str,
    foundation: str | None,
    org: str,
    space: str,
    instances: int | None,
    manifest: str | None,
) -> None:
    """Push an artifact with a blue-green deployment.

    ARTIFACT is either a zip file, which is extracted before pushing, or an
    application directory.

    \b
    Examples:
        bgdeploy deploy push app.zip --app my-app -e prod --org my-org --space prod
        bgdeploy deploy push ./build --app my-app -e test --org my-org --space dev --instances 2
    """
    artifact_path = Path(artifact)
    if manifest and artifact_path.is_dir():
        raise click.UsageError("--manifest is only supported with a zip artifact")

    try:
        _, foundation_url, info = _resolve(
            ctx, app_name, environment, foundation, org, space, instances
        )

        with tempfile.TemporaryDirectory(prefix="bgdeploy-app-") as staging:
            if artifact_path.is_dir():
                app_path = artifact_path
            else:
                manifest_text = Path(manifest).read_text() if manifest else None
                app_path = Extractor().unzip(artifact_path, staging, manifest_text)

            log = ctx.logger.bind(app=app_name, foundation=foundation_url)
            log.info("starting blue-green deployment", app_path=app_path)
            deployer = BlueGreenDeployer(DeploymentExecutor(ctx.courier))
            result = deployer.deploy(foundation_url, str(app_path), info, _raw_output())

    except (BGDeployError, OSError) as e:
        ctx.output.print_error(f"Deployment failed: {e}")
        raise click.Abort()

    log.info("deployment finished", status=result.status.value)

    if result.succeeded:
        if result.first_deploy:
            ctx.output.print(f"[dim]First deploy of {app_name}[/dim]")
        duration = format_duration(result.duration_seconds or 0.0)
        ctx.output.print_success(f"Deployed {app_name} to {foundation_url} in {duration}")
        return

    if result.logs:
        ctx.output.print_logs(app_name, result.logs)
    ctx.output.print_error(f"Deployment {result.status.value}: {result.message}")
    raise click.Abort()


@deploy.command("rollback")
@_target_options
@click.option("--first-deploy", is_flag=True, help="Only delete the app, there is no venerable to restore")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation")
@pass_context
def rollback(
    ctx: BGDeployContext,
    app_name: str,
    environment: str,
    foundation: str | None,
    org: str,
    space: str,
    first_deploy: bool,
    yes: bool,
) -> None:
    """Roll back a failed push.

    Deletes the app and renames APP-venerable back to APP unless
    --first-deploy is given.

    \b
    Examples:
        bgdeploy deploy rollback --app my-app -e test --org my-org --space dev
    """
    if not yes and not ctx.output.confirm(f"Roll back {app_name}?"):
        ctx.output.print_info("Cancelled")
        return

    try:
        _, foundation_url, info = _resolve(ctx, app_name, environment, foundation, org, space)
        executor = DeploymentExecutor(ctx.courier)
        try:
            executor.login(foundation_url, info, _raw_output())
            executor.rollback(info, first_deploy)
        finally:
            _clean_up(ctx, executor, foundation_url)
    except BGDeployError as e:
        ctx.output.print_error(f"Rollback failed: {e}")
        raise click.Abort()

    ctx.output.print_success(f"Rollback of {app_name} attempted on {foundation_url}")


@deploy.command("delete-venerable")
@_target_options
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation")
@pass_context
def delete_venerable(
    ctx: BGDeployContext,
    app_name: str,
    environment: str,
    foundation: str | None,
    org: str,
    space: str,
    yes: bool,
) -> None:
    """Delete APP-venerable left behind by a push.

    \b
    Examples:
        bgdeploy deploy delete-venerable --app my-app -e test --org my-org --space dev
    """
    if not yes and not ctx.output.confirm(f"Delete {app_name}-venerable?"):
        ctx.output.print_info("Cancelled")
        return

    try:
        _, foundation_url, info = _resolve(ctx, app_name, environment, foundation, org, space)
        executor = DeploymentExecutor(ctx.courier)
        try:
            executor.login(foundation_url, info, _raw_output())
            executor.delete_venerable(info, foundation_url)
        finally:
            _clean_up(ctx, executor, foundation_url)
    except BGDeployError as e:
        ctx.output.print_error(str(e))
        raise click.Abort()

    ctx.output.print_success(f"Deleted {info.venerable_name}")


@deploy.command("exists")
@_target_options
@pass_context
def exists(
    ctx: BGDeployContext,
    app_name: str,
    environment: str,
    foundation: str | None,
    org: str,
    space: str,
) -> None:
    """Check whether an app exists. Exits 1 when it does not.

    \b
    Examples:
        bgdeploy deploy exists --app my-app -e test --org my-org --space dev
    """
    try:
        _, foundation_url, info = _resolve(ctx, app_name, environment, foundation, org, space)
        executor = DeploymentExecutor(ctx.courier)
        try:
            executor.login(foundation_url, info, _raw_output())
            found = executor.exists(app_name)
        finally:
            _clean_up(ctx, executor, foundation_url)
    except BGDeployError as e:
        ctx.output.print_error(str(e))
        raise click.Abort()

    if found:
        ctx.output.print_success(f"{app_name} exists on {foundation_url}")
        return
    ctx.output.print_info(f"{app_name} does not exist on {foundation_url}")
    raise SystemExit(1)
