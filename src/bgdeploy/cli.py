"""Main CLI entry point for bgdeploy."""

import sys

import click
from rich.console import Console

from bgdeploy import __version__
from bgdeploy.config import CredentialsSettings, load_config
from bgdeploy.core.context import BGDeployContext
from bgdeploy.core.exceptions import BGDeployError, ConfigError


CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 120,
}


def resolve_color(no_color: bool, setting: str) -> bool | None:
    """Pick the colour mode. None lets Rich detect the terminal."""
    if no_color or setting == "never":
        return False
    if setting == "always":
        return True
    return None


def print_version(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console = Console()
    console.print(f"bgdeploy version {__version__}")
    ctx.exit()


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for info, -vv for debug)",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    help="Suppress non-essential output",
)
@click.option(
    "--no-color",
    is_flag=True,
    help="Disable colored output",
)
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True),
    metavar="FILE",
    envvar="BGDEPLOY_CONFIG",
    help="Path to config file",
)
@click.option(
    "--version",
    is_flag=True,
    callback=print_version,
    expose_value=False,
    is_eager=True,
    help="Show version and exit",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: int,
    quiet: bool,
    no_color: bool,
    config_file: str | None,
) -> None:
    """bgdeploy - zero-downtime blue-green deployments for Cloud Foundry.

    Pushes a new version next to the live one, maps its route, then retires
    the old version. Failed pushes are rolled back to the previous version.

    \b
    Examples:
        bgdeploy deploy push app.zip --app my-app -e test --org my-org --space dev
        bgdeploy deploy rollback --app my-app -e test --org my-org --space dev

    \b
    Configuration:
        ~/.bgdeploy/config.yaml    User configuration
        ./bgdeploy.yaml            Project configuration
        CF_USERNAME, CF_PASSWORD   Cloud Foundry credentials
    """
    try:
        config = load_config(config_file)

        ctx.obj = BGDeployContext(
            config=config,
            verbose=verbose,
            quiet=quiet,
            color=resolve_color(no_color, config.global_settings.color),
        )

    except ConfigError as e:
        console = Console(stderr=True)
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)


def register_commands() -> None:
    """Register all command groups."""
    from bgdeploy.commands.deploy import deploy

    cli.add_command(deploy)


register_commands()


@cli.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration."""
    bgdeploy_ctx: BGDeployContext = ctx.obj
    credentials = CredentialsSettings()
    config_data = {
        "cf_binary": bgdeploy_ctx.config.cf.binary,
        "cf_timeout": bgdeploy_ctx.config.cf.timeout,
        "verbosity": bgdeploy_ctx.config.global_settings.verbosity.value,
        "color": bgdeploy_ctx.config.global_settings.color,
        "has_username": bool(credentials.username),
        "has_password": bool(credentials.password),
    }
    for key, environment in bgdeploy_ctx.config.environments.items():
        config_data[f"environment.{key}"] = (
            f"{environment.domain} ({len(environment.foundations)} foundations)"
        )
    bgdeploy_ctx.output.print_data(config_data, title="Current Configuration")


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except BGDeployError as e:
        console = Console(stderr=True)
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        console = Console(stderr=True)
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
