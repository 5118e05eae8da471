"""Domain layer for task registry."""

from paratask.task_registry.domain.registry_port import RegistryPort
from paratask.task_registry.domain.task_model import TaskMetadata

__all__ = ["TaskMetadata", "RegistryPort"]
