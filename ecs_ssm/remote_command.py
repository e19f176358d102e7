"""Commands run on the instance once the SSM session is up."""

import json
import logging
import shlex

from .targets import KnownInstance

logger = logging.getLogger(__name__)

ROOT_SHELL = "sudo su -"


def _container_selector(service):
    # Any running container whose name contains the service fragment.
    return f"$(sudo docker ps -qf name={shlex.quote(service)} | head -n1)"


def container_shell_command(service):
    return f"sudo docker exec -ti {_container_selector(service)} /bin/bash"


def container_exec_command(service, exec_command):
    return (
        f"sudo docker exec -ti {_container_selector(service)} "
        f"/bin/bash -lc {shlex.quote(exec_command)}"
    )


def root_shell_command():
    return ROOT_SHELL


def build_command(target, service, exec_command=None):
    if isinstance(target, KnownInstance):
        if exec_command:
            logger.warning(
                "Ignoring --exec '%s': a direct instance always opens a root shell.",
                exec_command,
            )
        return root_shell_command()
    if exec_command:
        return container_exec_command(service, exec_command)
    return container_shell_command(service)


def ssm_parameters(command):
    """Value for ``--parameters`` of the AWS-StartInteractiveCommand document."""
    return json.dumps({"command": [command]})
