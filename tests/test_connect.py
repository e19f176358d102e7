from unittest.mock import MagicMock, patch

import pytest

from conftest import INSTANCE_ID
from ecs_ssm.config_loader import ConnectOptions
from ecs_ssm.connect import connect, resolve_instance, select_target
from ecs_ssm.exceptions import (
    ServiceNotFoundError,
    SessionLaunchError,
    TaskNotFoundError,
)
from ecs_ssm.targets import KnownInstance, ResolveService


def make_options(**overrides):
    values = dict(service="auth", cluster="app", region="eu-central-1", profile="default")
    values.update(overrides)
    return ConnectOptions(**values)


@pytest.fixture
def checker():
    checker = MagicMock()
    checker.validate_all.return_value = {"aws": True, "session-manager-plugin": True}
    return checker


class TestSelectTarget:
    def test_service(self):
        assert select_target(make_options()) == ResolveService("auth")

    def test_instance(self):
        assert select_target(make_options(instance="i-0123456789")) == KnownInstance(
            "i-0123456789"
        )


class TestResolveInstance:
    def test_known_instance_skips_ecs(self):
        client_factory = MagicMock()

        instance_id = resolve_instance(
            KnownInstance("i-0123456789"), make_options(), client_factory=client_factory
        )

        assert instance_id == "i-0123456789"
        client_factory.assert_not_called()

    def test_resolves_through_chain(self, ecs_client):
        client_factory = MagicMock(return_value=ecs_client)

        instance_id = resolve_instance(
            ResolveService("auth"), make_options(), client_factory=client_factory
        )

        assert instance_id == INSTANCE_ID
        client_factory.assert_called_once_with("eu-central-1", "default")


class TestConnect:
    @patch("ecs_ssm.connect.SSMSession")
    def test_end_to_end(self, mock_ssm_session, ecs_client, checker, capsys):
        mock_ssm_session.return_value.__enter__.return_value.wait.return_value = 0

        status = connect(
            make_options(), checker=checker, client_factory=lambda region, profile: ecs_client
        )

        assert status == 0
        mock_ssm_session.assert_called_once_with(
            INSTANCE_ID,
            "sudo docker exec -ti $(sudo docker ps -qf name=auth | head -n1) /bin/bash",
            region="eu-central-1",
            profile="default",
        )
        assert f"Service auth is running on instance {INSTANCE_ID}" in capsys.readouterr().out

    @patch("ecs_ssm.connect.SSMSession")
    def test_direct_instance_bypasses_resolution(self, mock_ssm_session, checker):
        mock_ssm_session.return_value.__enter__.return_value.wait.return_value = 0
        client_factory = MagicMock()

        connect(
            make_options(instance="i-0fedcba987654321", exec_command="ls -la"),
            checker=checker,
            client_factory=client_factory,
        )

        client_factory.assert_not_called()
        args, _ = mock_ssm_session.call_args
        assert args == ("i-0fedcba987654321", "sudo su -")

    @patch("ecs_ssm.connect.SSMSession")
    def test_exec_override(self, mock_ssm_session, ecs_client, checker):
        mock_ssm_session.return_value.__enter__.return_value.wait.return_value = 0

        connect(
            make_options(exec_command="ls -la"),
            checker=checker,
            client_factory=lambda region, profile: ecs_client,
        )

        args, _ = mock_ssm_session.call_args
        assert args[1].endswith("/bin/bash -lc 'ls -la'")

    @patch("ecs_ssm.connect.SSMSession")
    def test_resolution_failure_never_launches(self, mock_ssm_session, ecs_client, checker):
        ecs_client.list_tasks.return_value = {"taskArns": []}

        with pytest.raises(TaskNotFoundError):
            connect(
                make_options(),
                checker=checker,
                client_factory=lambda region, profile: ecs_client,
            )

        mock_ssm_session.assert_not_called()

    @patch("ecs_ssm.connect.SSMSession")
    def test_unknown_service(self, mock_ssm_session, ecs_client, checker):
        with pytest.raises(ServiceNotFoundError):
            connect(
                make_options(service="billing"),
                checker=checker,
                client_factory=lambda region, profile: ecs_client,
            )

        mock_ssm_session.assert_not_called()

    @patch("ecs_ssm.connect.SSMSession")
    def test_missing_tools(self, mock_ssm_session, checker):
        checker.validate_all.return_value = {"aws": True, "session-manager-plugin": False}

        with pytest.raises(SessionLaunchError, match="session-manager-plugin"):
            connect(make_options(instance="i-0123456789"), checker=checker)

        mock_ssm_session.assert_not_called()

    @patch("ecs_ssm.connect.SSMSession")
    def test_session_failure_propagates(self, mock_ssm_session, checker):
        mock_ssm_session.return_value.__enter__.return_value.wait.side_effect = (
            SessionLaunchError("exited with status 255", returncode=255)
        )
        mock_ssm_session.return_value.__exit__.return_value = None

        with pytest.raises(SessionLaunchError) as e:
            connect(make_options(instance="i-0123456789"), checker=checker)

        assert e.value.returncode == 255
