"""
ecs-ssm: open an SSM shell on the EC2 instance running an ECS service.

    ecs-ssm -c app -s auth              # shell inside the auth container
    ecs-ssm -s auth -e "ls -la"         # run a command in it instead
    ecs-ssm -i i-0123456789abcdef0      # root shell on a known instance
"""
import logging

import click

from . import __version__
from .config_loader import DEFAULTS, ConfigLoader
from .connect import connect
from .exceptions import EcsSsmError, ResolutionError, SessionLaunchError

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def setup_logging(level):
    logging.basicConfig(level=getattr(logging, level.upper()), format="%(message)s")
    if level.upper() != "DEBUG":
        logging.getLogger("botocore").setLevel(logging.WARNING)


def report_error(error):
    click.secho(f"Error: {error}", fg="red", err=True)
    if isinstance(error, ResolutionError):
        click.echo(f"Failed at the {error.stage} lookup.", err=True)
        resolved = {k: v for k, v in error.resolved.items() if k != "cluster"}
        for key, value in resolved.items():
            click.echo(f"  {key}: {value}", err=True)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--service", "-s", help=f"Service name fragment. [default: {DEFAULTS['service']}]"
)
@click.option(
    "--cluster", "-c", help=f"ECS cluster name or ARN. [default: {DEFAULTS['cluster']}]"
)
@click.option("--region", "-r", help=f"AWS region. [default: {DEFAULTS['region']}]")
@click.option(
    "--profile", "-p", help=f"AWS credential profile. [default: {DEFAULTS['profile']}]"
)
@click.option(
    "--exec",
    "-e",
    "exec_command",
    help="Command to run in the service container instead of a shell.",
)
@click.option(
    "--instance",
    "-i",
    help="Connect straight to this instance id, skipping the ECS lookups.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="JSON file with default service, cluster, region and profile.",
)
@click.option(
    "--log-level",
    envvar="ECS_SSM_LOG_LEVEL",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="INFO",
    show_default=True,
)
@click.version_option(__version__, "--version", "-V")
@click.pass_context
def main(
    ctx,
    service,
    cluster,
    region,
    profile,
    exec_command,
    instance,
    config_path,
    log_level,
):
    """Open an interactive SSM session on the host running an ECS service."""
    setup_logging(log_level)
    try:
        options = ConfigLoader(config_path).load(
            service=service,
            cluster=cluster,
            region=region,
            profile=profile,
            exec_command=exec_command,
            instance=instance,
        )
        ctx.exit(connect(options))
    except SessionLaunchError as e:
        report_error(e)
        ctx.exit(e.returncode or 1)
    except EcsSsmError as e:
        report_error(e)
        ctx.exit(1)
