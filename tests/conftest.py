from unittest.mock import MagicMock

import pytest

CLUSTER = "app"
SERVICE_ARN = "arn:aws:ecs:eu-central-1:123456789012:service/app/app-auth-service-1"
TASK_ARN = "arn:aws:ecs:eu-central-1:123456789012:task/app/0123456789abcdef0123456789abcdef"
CONTAINER_INSTANCE_ARN = (
    "arn:aws:ecs:eu-central-1:123456789012:container-instance/app/"
    "fedcba9876543210fedcba9876543210"
)
INSTANCE_ID = "i-0123456789"


class PageRecorder:
    """Stands in for a boto3 PageIterator and counts the pages handed out."""

    def __init__(self, pages):
        self.pages = pages
        self.served = 0

    def __iter__(self):
        for page in self.pages:
            self.served += 1
            yield page


def service_pages(*pages):
    return [{"serviceArns": list(arns)} for arns in pages]


@pytest.fixture
def ecs_client():
    """An ECS client double holding one cluster with a single auth task."""
    client = MagicMock()
    client.pages = PageRecorder(service_pages([SERVICE_ARN]))
    client.get_paginator.return_value.paginate.side_effect = (
        lambda **kwargs: client.pages
    )
    client.list_tasks.return_value = {"taskArns": [TASK_ARN]}
    client.describe_tasks.return_value = {
        "tasks": [{"taskArn": TASK_ARN, "containerInstanceArn": CONTAINER_INSTANCE_ARN}],
        "failures": [],
    }
    client.describe_container_instances.return_value = {
        "containerInstances": [
            {
                "containerInstanceArn": CONTAINER_INSTANCE_ARN,
                "ec2InstanceId": INSTANCE_ID,
            }
        ],
        "failures": [],
    }
    return client
