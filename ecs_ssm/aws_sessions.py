import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import ConfigError


def create_session(profile_name=None, region_name=None, verify=True):
    """Build a boto3 session for the given profile and region.

    With ``verify`` the credentials are checked up front with an STS call, so
    an expired SSO login shows up as a configuration problem instead of as a
    failure halfway through the lookup chain.
    """
    # This is put here due to https://github.com/boto/botocore/issues/1841
    boto3.set_stream_logger(name="botocore.credentials", level=logging.ERROR)

    try:
        session = boto3.Session(profile_name=profile_name, region_name=region_name)
        if verify:
            session.client("sts").get_caller_identity()
        return session
    except (BotoCoreError, ClientError) as e:
        raise ConfigError(
            f"Failed to create AWS session with profile '{profile_name}': {e}"
        ) from e


def ecs_client_for(region_name, profile_name):
    return create_session(profile_name=profile_name, region_name=region_name).client(
        "ecs"
    )
