import logging
from dataclasses import dataclass

from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import (
    ContainerInstanceNotFoundError,
    Ec2InstanceNotFoundError,
    ResolutionError,
    ServiceNotFoundError,
    TaskNotFoundError,
    TransportError,
)

SERVICES_PAGE_SIZE = 100

STAGE_SERVICE = "service"
STAGE_TASK = "task"
STAGE_CONTAINER_INSTANCE = "container_instance"
STAGE_EC2_INSTANCE = "ec2_instance"


@dataclass(frozen=True)
class Resolution:
    cluster: str
    service_arn: str
    task_arn: str
    container_instance_arn: str
    instance_id: str


class ECSIDResolver:
    """Walks service -> task -> container instance -> EC2 instance in one cluster.

    The cluster is fixed when the resolver is built and every stage reads it
    from here, so the identifiers handed from one stage to the next always
    belong to the same cluster.
    """

    def __init__(self, ecs_client, cluster: str, logger=None):
        self.ecs = ecs_client
        self.cluster = cluster
        self.logger = logger or logging.getLogger(__name__)

    def _transport_error(self, stage, identifier, error):
        return TransportError(
            f"ECS {stage} lookup for '{identifier}' in cluster '{self.cluster}' "
            f"failed: {error}",
            stage,
            self.cluster,
            identifier,
        )

    def resolve_service(self, fragment: str) -> str:
        """
        Return the first service ARN in the cluster containing ``fragment``.

        Pages are requested one at a time and the listing stops at the first
        page holding a match.
        """
        paginator = self.ecs.get_paginator("list_services")
        pages = paginator.paginate(
            cluster=self.cluster,
            PaginationConfig={"PageSize": SERVICES_PAGE_SIZE},
        )
        try:
            for page in pages:
                service_arns = page.get("serviceArns", [])
                self.logger.debug("Services: %s", service_arns)
                for service_arn in service_arns:
                    if fragment in service_arn:
                        return service_arn
        except (BotoCoreError, ClientError) as e:
            raise self._transport_error(STAGE_SERVICE, fragment, e) from e

        raise ServiceNotFoundError(
            f"No service matching '{fragment}' in cluster '{self.cluster}'.",
            STAGE_SERVICE,
            self.cluster,
            fragment,
        )

    def resolve_task(self, service_arn: str) -> str:
        # Any running task will do; the last one listed is taken.
        try:
            response = self.ecs.list_tasks(
                cluster=self.cluster, serviceName=service_arn
            )
        except (BotoCoreError, ClientError) as e:
            raise self._transport_error(STAGE_TASK, service_arn, e) from e

        task_arns = response.get("taskArns", [])
        if not task_arns:
            raise TaskNotFoundError(
                f"Service '{service_arn}' has no running tasks.",
                STAGE_TASK,
                self.cluster,
                service_arn,
            )
        return task_arns[-1]

    def resolve_container_instance(self, task_arn: str) -> str:
        try:
            response = self.ecs.describe_tasks(cluster=self.cluster, tasks=[task_arn])
        except (BotoCoreError, ClientError) as e:
            raise self._transport_error(STAGE_CONTAINER_INSTANCE, task_arn, e) from e

        tasks = response.get("tasks", [])
        if not tasks:
            reasons = ", ".join(
                failure.get("reason", "unknown")
                for failure in response.get("failures", [])
            )
            raise TaskNotFoundError(
                f"Task '{task_arn}' not found"
                + (f" ({reasons})." if reasons else "."),
                STAGE_CONTAINER_INSTANCE,
                self.cluster,
                task_arn,
            )

        task = tasks[0]
        container_instance_arn = task.get("containerInstanceArn")
        if not container_instance_arn:
            launch_type = task.get("launchType")
            raise ContainerInstanceNotFoundError(
                f"Task '{task_arn}' is not placed on a container instance"
                + (f" (launch type {launch_type})." if launch_type else "."),
                STAGE_CONTAINER_INSTANCE,
                self.cluster,
                task_arn,
            )
        return container_instance_arn

    def resolve_ec2_instance(self, container_instance_arn: str) -> str:
        try:
            response = self.ecs.describe_container_instances(
                cluster=self.cluster, containerInstances=[container_instance_arn]
            )
        except (BotoCoreError, ClientError) as e:
            raise self._transport_error(
                STAGE_EC2_INSTANCE, container_instance_arn, e
            ) from e

        container_instances = response.get("containerInstances", [])
        instance_id = (
            container_instances[0].get("ec2InstanceId") if container_instances else None
        )
        if not instance_id:
            raise Ec2InstanceNotFoundError(
                f"Container instance '{container_instance_arn}' has no EC2 instance.",
                STAGE_EC2_INSTANCE,
                self.cluster,
                container_instance_arn,
            )
        return instance_id

    def resolve(self, fragment: str) -> Resolution:
        """Run the whole chain for a service name fragment.

        Each identifier is logged as soon as it is found. On failure the
        raised ResolutionError carries the identifiers resolved so far in
        ``resolved``.
        """
        resolved = {"cluster": self.cluster}
        try:
            resolved["service_arn"] = self.resolve_service(fragment)
            self.logger.info("Service ARN: %s", resolved["service_arn"])

            resolved["task_arn"] = self.resolve_task(resolved["service_arn"])
            self.logger.info("Task ARN: %s", resolved["task_arn"])

            resolved["container_instance_arn"] = self.resolve_container_instance(
                resolved["task_arn"]
            )
            self.logger.info(
                "Container instance ARN: %s", resolved["container_instance_arn"]
            )

            resolved["instance_id"] = self.resolve_ec2_instance(
                resolved["container_instance_arn"]
            )
            self.logger.info("Instance ID: %s", resolved["instance_id"])
        except ResolutionError as e:
            e.resolved = dict(resolved)
            raise

        return Resolution(**resolved)
