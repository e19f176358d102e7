class EcsSsmError(Exception):
    """Base class for every error this tool reports to the operator."""


class ConfigError(EcsSsmError):
    pass


class ResolutionError(EcsSsmError):
    """A stage of the service -> instance lookup chain failed.

    ``stage`` names the link that broke, ``identifier`` is the value that was
    being looked up and ``resolved`` holds the identifiers found before the
    failure, so the operator can carry on by hand.
    """

    def __init__(self, message, stage, cluster, identifier):
        super().__init__(message)
        self.stage = stage
        self.cluster = cluster
        self.identifier = identifier
        self.resolved = {}


class NotFoundError(ResolutionError):
    """The lookup succeeded but matched nothing."""


class ServiceNotFoundError(NotFoundError):
    pass


class TaskNotFoundError(NotFoundError):
    pass


class ContainerInstanceNotFoundError(NotFoundError):
    pass


class Ec2InstanceNotFoundError(NotFoundError):
    pass


class TransportError(ResolutionError):
    """The ECS API call itself failed (credentials, network, throttling...)."""


class SessionLaunchError(EcsSsmError):
    def __init__(self, message, returncode=None):
        super().__init__(message)
        self.returncode = returncode
