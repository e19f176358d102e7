import json
import os
import re
from dataclasses import dataclass
from typing import Optional

import jsonschema

from .exceptions import ConfigError

CONFIG_ENV_VAR = "ECS_SSM_CONFIG"
DEFAULT_CONFIG_PATH = os.path.join("~", ".ecs-ssm.json")

DEFAULTS = {
    "service": "auth",
    "cluster": "app",
    "region": "eu-central-1",
    "profile": "default",
}


@dataclass(frozen=True)
class ConnectOptions:
    service: str
    cluster: str
    region: str
    profile: str
    exec_command: Optional[str] = None
    instance: Optional[str] = None


class ConfigLoader:
    """Merges CLI options over an optional JSON defaults file.

    Example file::

        {"cluster": "app", "region": "eu-west-1", "profile": "my-account"}
    """

    SCHEMA = {
        "type": "object",
        "properties": {
            "service": {"type": "string", "minLength": 1},
            "cluster": {"type": "string", "minLength": 1},
            "region": {"type": "string", "minLength": 1},
            "profile": {"type": "string", "minLength": 1},
        },
        "additionalProperties": False,
    }

    def __init__(self, config_path=None):
        self.explicit = config_path is not None or CONFIG_ENV_VAR in os.environ
        self.config_path = os.path.expanduser(
            config_path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
        )

    def validate_schema(self, config):
        try:
            jsonschema.validate(instance=config, schema=self.SCHEMA)
        except jsonschema.exceptions.ValidationError as e:
            raise ConfigError(
                f"Configuration validation failed for {self.config_path}: {e.message}"
            )

    @staticmethod
    def validate_instance_id(instance_id):
        ec2_instance_regex = r"^i-[0-9a-fA-F]{8,17}$"
        # Hybrid nodes registered with SSM
        managed_instance_regex = r"^mi-[0-9a-fA-F]{17}$"
        if not re.match(ec2_instance_regex, instance_id) and not re.match(
            managed_instance_regex, instance_id
        ):
            raise ConfigError(f"Invalid instance_id format: {instance_id}")

    def load_file(self):
        """Load the defaults file, or return {} when the default one is absent."""
        if not os.path.exists(self.config_path):
            if self.explicit:
                raise ConfigError(f"Configuration file not found: {self.config_path}")
            return {}

        with open(self.config_path, "r") as f:
            try:
                config = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Failed to parse JSON config: {e}")

        self.validate_schema(config)
        return config

    def load(
        self,
        service=None,
        cluster=None,
        region=None,
        profile=None,
        exec_command=None,
        instance=None,
    ):
        config = dict(DEFAULTS)
        config.update(self.load_file())

        overrides = {
            "service": service,
            "cluster": cluster,
            "region": region,
            "profile": profile,
        }
        for key, value in overrides.items():
            if value is not None:
                config[key] = value

        if instance is not None:
            self.validate_instance_id(instance)

        return ConnectOptions(
            exec_command=exec_command or None, instance=instance, **config
        )
