from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class ResolveService:
    """Find the instance by walking the ECS lookup chain for ``service``."""

    service: str


@dataclass(frozen=True)
class KnownInstance:
    """The operator named the instance; no ECS lookups are made."""

    instance_id: str


Target = Union[ResolveService, KnownInstance]
