import logging

import click

from .aws_sessions import ecs_client_for
from .checker import ConfigChecker
from .ecs_id_resolver import ECSIDResolver
from .exceptions import SessionLaunchError
from .remote_command import build_command
from .session import SSMSession
from .targets import KnownInstance, ResolveService

logger = logging.getLogger(__name__)


def select_target(options):
    if options.instance:
        return KnownInstance(options.instance)
    return ResolveService(options.service)


def resolve_instance(target, options, client_factory=ecs_client_for):
    """Return the instance id to connect to.

    A known instance is returned as is, without building an ECS client.
    """
    if isinstance(target, KnownInstance):
        return target.instance_id

    logger.debug(
        "Cluster: %s, Service: %s, Region: %s.",
        options.cluster,
        target.service,
        options.region,
    )
    ecs_client = client_factory(options.region, options.profile)
    resolver = ECSIDResolver(ecs_client, options.cluster)
    return resolver.resolve(target.service).instance_id


def check_tools(checker):
    missing = [name for name, ok in checker.validate_all().items() if not ok]
    if missing:
        raise SessionLaunchError(
            f"Required program(s) not found: {', '.join(missing)}. Install the AWS "
            "CLI and the session-manager-plugin."
        )


def connect(options, checker=None, client_factory=ecs_client_for):
    """Resolve the target instance and run an interactive session on it.

    Returns the exit status of the session.
    """
    target = select_target(options)
    instance_id = resolve_instance(target, options, client_factory=client_factory)

    if isinstance(target, ResolveService):
        click.echo(f"Service {target.service} is running on instance {instance_id}")
    else:
        click.echo(f"Connecting to instance {instance_id}")

    check_tools(checker or ConfigChecker())

    command = build_command(target, options.service, options.exec_command)
    with SSMSession(
        instance_id,
        command,
        region=options.region,
        profile=options.profile,
    ) as session:
        return session.wait()
